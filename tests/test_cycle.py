"""
Test suite for monthly cycle and reporting modules
"""

import pytest
from decimal import Decimal
from datetime import datetime, timezone

from retail_ledger.accounts import open_account
from retail_ledger.audit import AuditEventType, AuditTrail
from retail_ledger.currency import Money
from retail_ledger.cycle import CycleReport, run_monthly_cycle
from retail_ledger.directory import Directory
from retail_ledger.errors import InvalidAmount
from retail_ledger.linker import AccountLinker
from retail_ledger.owners import Address, Owner, PersonName
from retail_ledger.products import AccountKind
from retail_ledger.reporting import account_summary, owner_names, owner_summary


OPENED = datetime(2016, 1, 1, tzinfo=timezone.utc)


class TestMonthlyCycle:
    """Test interest posting and counter resets"""
    
    def setup_method(self):
        self.directory = Directory()
        self.basic = self.directory.add_account(open_account(1, Money(100_000), OPENED))
        self.savings = self.directory.add_account(
            open_account(2, Money(100_000), OPENED, AccountKind.SAVINGS)
        )
        self.checking = self.directory.add_account(
            open_account(3, Money(100_000), OPENED, AccountKind.CHECKING)
        )
        self.market = self.directory.add_account(
            open_account(4, Money(2_000_000), OPENED, AccountKind.MONEY_MARKET)
        )
        
        for _ in range(3):
            self.checking.withdraw_by_check(Money(100))
        for _ in range(6):
            self.market.deposit(Money(100))
    
    def test_cycle(self):
        report = run_monthly_cycle(self.directory, Decimal('1'))
        
        assert report.interest == {2: Money(1000), 4: Money(20_006)}
        assert report.total_interest == Money(21_006)
        assert report.checks_reset == [3]
        assert report.transactions_reset == [4]
        
        assert self.basic.balance == Money(100_000)
        assert self.savings.balance == Money(101_000)
        assert self.checking.balance == Money(99_700)
        assert self.checking.free_checks_remaining == 3
        assert self.market.transactions_remaining == 6
    
    def test_interest_posted_to_frozen_account(self):
        self.market.state.transactions_remaining = 6
        self.market.withdraw(Money(1_500_000))
        
        report = run_monthly_cycle(self.directory, Decimal('1'))
        
        assert report.interest[4] == Money(4_906)   # 1% of 490_600
        assert self.market.is_frozen
    
    def test_configured_rate(self):
        report = run_monthly_cycle(self.directory)
        assert report.rate == Decimal('0.25')
        assert report.interest[2] == Money(250)
    
    def test_audit_events(self):
        trail = AuditTrail()
        run_monthly_cycle(self.directory, Decimal('1'), trail)
        
        assert len(trail.get_events_by_type(AuditEventType.INTEREST_POSTED)) == 2
        assert len(trail.get_events_by_type(AuditEventType.CHECKS_RESET)) == 1
        assert len(trail.get_events_by_type(AuditEventType.TRANSACTIONS_RESET)) == 1
    
    @pytest.mark.parametrize("rate", ["-1", "abc", "NaN", "Infinity"])
    def test_bad_rate_leaves_accounts_untouched(self, rate):
        """Test a bad rate is rejected before any reset or audit event"""
        directory = Directory()
        for account in (self.checking, self.market, self.savings):
            directory.add_account(account)
        trail = AuditTrail()
        
        with pytest.raises(InvalidAmount):
            run_monthly_cycle(directory, rate, trail)
        
        assert self.checking.free_checks_remaining == 0
        assert self.market.transactions_remaining == 0
        assert self.savings.balance == Money(100_000)
        assert trail.count_events() == 0
    
    def test_empty_report_total(self):
        assert CycleReport(rate=Decimal('1')).total_interest == Money(0)


class TestReporting:
    """Test human-readable summaries"""
    
    def setup_method(self):
        self.directory = Directory()
        self.market = self.directory.add_account(
            open_account(1214, Money(2_000_000), OPENED, AccountKind.MONEY_MARKET)
        )
        self.owner = self.directory.add_owner(Owner(
            id=14,
            name=PersonName(first="Wanda", last="Morales"),
            address=Address(street1="9841 Fulton Street", city="Kenosha", state="Wisconsin")
        ))
        AccountLinker(self.directory).link(1214, 14)
    
    def test_account_summary(self):
        assert account_summary(self.directory, self.market) == "\n".join([
            "Money Market account 1214",
            "Balance: $20,000.00",
            "Opened: 2016-01-01T00:00:00+00:00",
            "Transactions remaining: 6",
            "Owners: Wanda Morales",
        ])
    
    def test_frozen_summary(self):
        self.market.withdraw(Money(1_500_000))
        assert "Status: frozen below minimum balance" in account_summary(self.directory, self.market)
    
    def test_checking_summary_without_owners(self):
        checking = self.directory.add_account(open_account(1, Money(0), OPENED, AccountKind.CHECKING))
        summary = account_summary(self.directory, checking)
        
        assert summary.startswith("Checking account 1")
        assert "Free checks remaining: 3" in summary
        assert summary.endswith("Owners: none")
    
    def test_unknown_owner_marked(self):
        self.market.add_owner(99)
        assert owner_names(self.directory, self.market) == ["Wanda Morales", "unknown owner 99"]
    
    def test_owner_summary(self):
        assert owner_summary(self.owner) == "\n".join([
            "14: Wanda Morales",
            "9841 Fulton Street",
            "Kenosha, Wisconsin",
            "Accounts: 1214",
        ])
