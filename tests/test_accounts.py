"""
Test suite for accounts module

Tests account opening rules and the withdrawal, deposit, check and interest
rules of every account kind.
"""

import pytest
from decimal import Decimal
from datetime import datetime, timezone

from retail_ledger.currency import Money
from retail_ledger.errors import BelowMinimumBalance, InvalidAmount, UnsupportedOperation
from retail_ledger.products import AccountKind, CheckingState, MoneyMarketState
from retail_ledger.accounts import Account, open_account, restore_account
from retail_ledger.transactions import DeclineReason, TransactionType


OPENED = datetime(1999, 3, 27, 11, 30, 9, tzinfo=timezone.utc)


def dollars(value: str) -> Money:
    return Money.from_decimal(Decimal(value))


class TestOpenAccount:
    """Test account construction"""
    
    def test_basic_account(self):
        account = open_account(1212, Money(1235667), OPENED)
        
        assert account.id == 1212
        assert account.kind == AccountKind.BASIC
        assert account.balance == Money(1235667)
        assert account.created_at == OPENED
        assert account.owner_ids == []
        assert account.state is None
        assert not account.is_long_term
        assert not account.is_frozen
    
    def test_default_creation_time(self):
        account = open_account(1, Money(0))
        assert account.created_at.tzinfo is not None
    
    def test_initial_owner(self):
        account = open_account(1, Money(0), OPENED, owner_id=15)
        assert account.owner_ids == [15]
    
    def test_negative_opening_balance_rejected(self):
        with pytest.raises(InvalidAmount):
            open_account(1, Money(-1), OPENED)
        with pytest.raises(InvalidAmount):
            open_account(1, Money(-1), OPENED, AccountKind.CHECKING)
    
    def test_savings_minimum(self):
        """Test savings opens at exactly the minimum and not below"""
        account = open_account(1, Money(1000), OPENED, AccountKind.SAVINGS)
        assert account.balance == Money(1000)
        
        with pytest.raises(BelowMinimumBalance, match="savings"):
            open_account(2, Money(999), OPENED, AccountKind.SAVINGS)
    
    def test_money_market_minimum(self):
        account = open_account(1, Money(1_000_000), OPENED, AccountKind.MONEY_MARKET)
        assert account.transactions_remaining == 6
        assert not account.is_frozen
        
        with pytest.raises(BelowMinimumBalance, match="money market"):
            open_account(2, Money(999_999), OPENED, AccountKind.MONEY_MARKET)
    
    def test_checking_state(self):
        account = open_account(1, Money(0), OPENED, AccountKind.CHECKING)
        assert isinstance(account.state, CheckingState)
        assert account.free_checks_remaining == 3
    
    def test_non_money_balance_rejected(self):
        with pytest.raises(TypeError):
            open_account(1, 1000, OPENED)
    
    def test_mismatched_state_rejected(self):
        with pytest.raises(ValueError, match="not valid state"):
            Account(1, AccountKind.SAVINGS, Money(1000), OPENED, state=CheckingState())
    
    def test_counters_are_kind_specific(self):
        savings = open_account(1, Money(1000), OPENED, AccountKind.SAVINGS)
        with pytest.raises(UnsupportedOperation):
            savings.free_checks_remaining
        with pytest.raises(UnsupportedOperation):
            savings.transactions_remaining
    
    def test_str(self):
        account = open_account(1212, Money(1235667), OPENED)
        assert str(account) == "ID: 1212, Balance: $12,356.67, Date of creation: 1999-03-27T11:30:09+00:00"


class TestRestoreAccount:
    """Test rebuilding accounts from shutdown records"""
    
    def test_money_market_below_minimum_restores_frozen(self):
        account = restore_account(7, dollars("4960.00"), OPENED, AccountKind.MONEY_MARKET)
        assert account.is_frozen
        assert account.transactions_remaining == 6
    
    def test_savings_below_minimum_restores(self):
        account = restore_account(7, Money(500), OPENED, AccountKind.SAVINGS)
        assert account.balance == Money(500)
    
    def test_checking_overdraft_restores(self):
        account = restore_account(7, Money(-1000), OPENED, AccountKind.CHECKING)
        assert account.balance == Money(-1000)
        assert account.free_checks_remaining == 3
        
        with pytest.raises(InvalidAmount):
            restore_account(7, Money(-1001), OPENED, AccountKind.CHECKING)
    
    def test_negative_non_checking_rejected(self):
        with pytest.raises(InvalidAmount):
            restore_account(7, Money(-1), OPENED, AccountKind.BASIC)


class TestBasicAccount:
    """Test base withdraw/deposit contract"""
    
    def setup_method(self):
        self.account = open_account(1, Money(5000), OPENED)
    
    def test_withdraw(self):
        result = self.account.withdraw(Money(2000))
        
        assert result.approved
        assert result.transaction_type == TransactionType.WITHDRAWAL
        assert result.balance == Money(3000)
        assert self.account.balance == Money(3000)
        assert result.fee == Money(0)
    
    def test_withdraw_entire_balance(self):
        result = self.account.withdraw(Money(5000))
        assert result.approved
        assert self.account.balance == Money(0)
    
    def test_withdraw_declined(self):
        """Test insufficient funds is a result, not an exception"""
        result = self.account.withdraw(Money(5001))
        
        assert result.declined
        assert not result
        assert result.reason == DeclineReason.INSUFFICIENT_FUNDS
        assert result.balance == Money(5000)
        assert self.account.balance == Money(5000)
    
    def test_deposit(self):
        result = self.account.deposit(Money(2500))
        assert result.approved
        assert result.transaction_type == TransactionType.DEPOSIT
        assert self.account.balance == Money(7500)
    
    def test_zero_amounts_allowed(self):
        assert self.account.withdraw(Money(0)).approved
        assert self.account.deposit(Money(0)).approved
        assert self.account.balance == Money(5000)
    
    def test_negative_amount_rejected(self):
        with pytest.raises(InvalidAmount):
            self.account.withdraw(Money(-1))
        with pytest.raises(InvalidAmount):
            self.account.deposit(Money(-1))
        assert self.account.balance == Money(5000)
    
    def test_non_money_amount_rejected(self):
        with pytest.raises(TypeError):
            self.account.deposit(100)
    
    def test_add_owner_keeps_duplicates(self):
        self.account.add_owner(15)
        self.account.add_owner(15)
        assert self.account.owner_ids == [15, 15]
    
    def test_kind_specific_operations_unsupported(self):
        with pytest.raises(UnsupportedOperation):
            self.account.withdraw_by_check(Money(100))
        with pytest.raises(UnsupportedOperation):
            self.account.add_interest(Decimal('1'))
        with pytest.raises(UnsupportedOperation):
            self.account.reset_checks()
        with pytest.raises(UnsupportedOperation):
            self.account.reset_transactions()


class TestSavingsAccount:
    """Test savings fee, minimum balance and interest"""
    
    def setup_method(self):
        self.account = open_account(2, dollars("15.00"), OPENED, AccountKind.SAVINGS)
    
    def test_withdraw_charges_fee(self):
        result = self.account.withdraw(Money(300))
        
        assert result.approved
        assert result.fee == Money(200)
        assert self.account.balance == Money(1000)
    
    def test_withdraw_declined_to_protect_minimum(self):
        """Test $10 withdrawal from $15 leaves less than minimum plus fee"""
        result = self.account.withdraw(dollars("10.00"))
        
        assert result.declined
        assert result.reason == DeclineReason.MINIMUM_BALANCE_RESERVE
        assert result.fee == Money(200)
        assert self.account.balance == dollars("15.00")
    
    def test_withdraw_boundary(self):
        """Test amount == balance - MIN_BAL - FEE is approved"""
        assert self.account.withdraw(Money(301)).declined
        assert self.account.withdraw(Money(300)).approved
        assert self.account.balance == Money(1000)
    
    def test_add_interest(self):
        account = open_account(3, dollars("10000.00"), OPENED, AccountKind.SAVINGS)
        
        interest = account.add_interest(Decimal('0.25'))
        
        assert interest == dollars("25.00")
        assert account.balance == dollars("10025.00")
    
    def test_add_interest_compounds(self):
        """Test calling twice compounds instead of being idempotent"""
        account = open_account(3, Money(1_000_000), OPENED, AccountKind.SAVINGS)
        
        first = account.add_interest(Decimal('0.25'))
        second = account.add_interest(Decimal('0.25'))
        
        assert first == Money(2500)
        assert second == Money(2506)
        assert account.balance == Money(1_005_006)
    
    def test_add_interest_accepts_float_and_string(self):
        account = open_account(3, Money(10000), OPENED, AccountKind.SAVINGS)
        assert account.add_interest(0.5) == Money(50)
        assert account.add_interest("1") == Money(101)   # 100.50 rounds up
    
    def test_negative_interest_rate_rejected(self):
        with pytest.raises(InvalidAmount):
            self.account.add_interest(Decimal('-1'))
        with pytest.raises(InvalidAmount):
            self.account.add_interest("not a rate")
        assert self.account.balance == dollars("15.00")
    
    @pytest.mark.parametrize("rate", ["NaN", "sNaN", "Infinity", "-Infinity", Decimal('NaN'), float('inf')])
    def test_non_finite_interest_rate_rejected(self, rate):
        with pytest.raises(InvalidAmount):
            self.account.add_interest(rate)
        assert self.account.balance == dollars("15.00")


class TestCheckingAccount:
    """Test checking direct withdrawals, checks and overdraft"""
    
    def setup_method(self):
        self.account = open_account(3, dollars("100.00"), OPENED, AccountKind.CHECKING)
    
    def test_withdraw_charges_non_check_fee(self):
        result = self.account.withdraw(dollars("10.00"))
        
        assert result.approved
        assert result.fee == Money(100)
        assert self.account.balance == dollars("89.00")
    
    def test_withdraw_cannot_overdraw(self):
        """Test direct withdrawal needs amount plus fee on hand"""
        result = self.account.withdraw(dollars("99.01"))
        
        assert result.declined
        assert result.reason == DeclineReason.INSUFFICIENT_FUNDS
        assert self.account.balance == dollars("100.00")
        
        assert self.account.withdraw(dollars("99.00")).approved
        assert self.account.balance == Money(0)
    
    def test_free_checks_then_fee(self):
        """Test the 4th check in a cycle is charged"""
        for expected_remaining in (2, 1, 0):
            result = self.account.withdraw_by_check(dollars("10.00"))
            assert result.approved
            assert result.fee == Money(0)
            assert result.transaction_type == TransactionType.CHECK_WITHDRAWAL
            assert self.account.free_checks_remaining == expected_remaining
        
        result = self.account.withdraw_by_check(dollars("10.00"))
        assert result.approved
        assert result.fee == Money(200)
        assert self.account.free_checks_remaining == 0
        assert self.account.balance == dollars("58.00")
    
    def test_reset_checks(self):
        for _ in range(4):
            self.account.withdraw_by_check(Money(100))
        
        self.account.reset_checks()
        assert self.account.free_checks_remaining == 3
        
        result = self.account.withdraw_by_check(Money(100))
        assert result.fee == Money(0)
        assert self.account.free_checks_remaining == 2
    
    def test_check_overdraft(self):
        """Test checks may overdraw down to -MAX_OVERDRAFT"""
        account = open_account(4, dollars("20.00"), OPENED, AccountKind.CHECKING)
        
        result = account.withdraw_by_check(dollars("30.00"))
        assert result.approved
        assert account.balance == dollars("-10.00")
        
        declined = account.withdraw_by_check(Money(1))
        assert declined.declined
        assert declined.reason == DeclineReason.OVERDRAFT_LIMIT
        assert declined.overdraft_limit == Money(1000)
        assert declined.fee == Money(0)
        assert account.balance == dollars("-10.00")
    
    def test_declined_check_keeps_free_check(self):
        account = open_account(4, dollars("20.00"), OPENED, AccountKind.CHECKING)
        
        result = account.withdraw_by_check(dollars("30.01"))
        
        assert result.declined
        assert account.free_checks_remaining == 3
    
    def test_declined_check_reports_fee(self):
        """Test a decline after the free checks reports the fee that would apply"""
        account = open_account(4, dollars("20.00"), OPENED, AccountKind.CHECKING)
        account.state.free_checks_remaining = 0
        
        # 20.00 - 2.00 fee + 10.00 overdraft = 28.00 available
        declined = account.withdraw_by_check(dollars("28.01"))
        assert declined.declined
        assert declined.fee == Money(200)
        assert "fee would apply" in declined.message
        
        approved = account.withdraw_by_check(dollars("28.00"))
        assert approved.approved
        assert account.balance == dollars("-10.00")
    
    def test_direct_withdrawal_declined_when_overdrawn(self):
        account = open_account(4, dollars("20.00"), OPENED, AccountKind.CHECKING)
        account.withdraw_by_check(dollars("22.00"))
        
        assert account.balance == dollars("-2.00")
        assert account.withdraw(dollars("2.00")).declined
    
    def test_no_interest(self):
        with pytest.raises(UnsupportedOperation):
            self.account.add_interest(Decimal('1'))


class TestMoneyMarketAccount:
    """Test the money-market transaction cap and freeze state machine"""
    
    def setup_method(self):
        self.account = open_account(5, dollars("20000.00"), OPENED, AccountKind.MONEY_MARKET)
    
    def test_withdraw_above_minimum(self):
        result = self.account.withdraw(dollars("5000.00"))
        
        assert result.approved
        assert result.fee == Money(0)
        assert not result.froze
        assert self.account.balance == dollars("15000.00")
        assert self.account.transactions_remaining == 5
    
    def test_withdraw_below_minimum_freezes_and_charges_once(self):
        result = self.account.withdraw(dollars("15000.00"))
        
        assert result.approved
        assert result.froze
        assert result.fee == dollars("100.00")
        assert self.account.balance == dollars("4900.00")
        assert self.account.is_frozen
        assert self.account.transactions_remaining == 5
    
    def test_frozen_withdrawals_declined(self):
        self.account.withdraw(dollars("15000.00"))
        
        result = self.account.withdraw(dollars("1.00"))
        
        assert result.declined
        assert result.reason == DeclineReason.ACCOUNT_FROZEN
        assert self.account.balance == dollars("4900.00")
        assert self.account.transactions_remaining == 5
    
    def test_withdraw_must_leave_fee_reserve(self):
        result = self.account.withdraw(dollars("19900.01"))
        
        assert result.declined
        assert result.reason == DeclineReason.BELOW_MINIMUM_FEE_RESERVE
        assert self.account.balance == dollars("20000.00")
        assert self.account.transactions_remaining == 6
        
        result = self.account.withdraw(dollars("19900.00"))
        assert result.approved
        assert self.account.balance == Money(0)
    
    def test_deposit_unfreezes_above_minimum(self):
        self.account.withdraw(dollars("15000.00"))          # 4900.00, frozen
        
        result = self.account.deposit(dollars("5100.00"))   # exactly 10000.00
        assert result.approved
        assert not result.unfroze
        assert self.account.is_frozen
        
        result = self.account.deposit(dollars("0.01"))
        assert result.unfroze
        assert not self.account.is_frozen
        assert self.account.transactions_remaining == 5
    
    def test_frozen_deposits_ignore_transaction_cap(self):
        self.account.withdraw(dollars("15000.00"))
        self.account.state.transactions_remaining = 0
        
        for _ in range(10):
            assert self.account.deposit(dollars("1.00")).approved
        assert self.account.balance == dollars("4910.00")
    
    def test_transaction_cap_applies_to_withdrawals(self):
        for _ in range(6):
            assert self.account.withdraw(dollars("1.00")).approved
        
        result = self.account.withdraw(dollars("1.00"))
        assert result.declined
        assert result.reason == DeclineReason.TRANSACTION_LIMIT
        assert self.account.balance == dollars("19994.00")
    
    def test_frozen_check_precedes_cap(self):
        self.account.withdraw(dollars("15000.00"))
        self.account.state.transactions_remaining = 0
        
        assert self.account.withdraw(Money(1)).reason == DeclineReason.ACCOUNT_FROZEN
    
    def test_seven_deposits_then_reset_and_freeze(self):
        """Open at 20000.00, seven 10.00 deposits, reset, withdraw 15000.00"""
        results = [self.account.deposit(dollars("10.00")) for _ in range(7)]
        
        assert all(result.approved for result in results[:6])
        assert results[6].declined
        assert results[6].reason == DeclineReason.TRANSACTION_LIMIT
        assert self.account.balance == dollars("20060.00")
        
        self.account.reset_transactions()
        assert self.account.transactions_remaining == 6
        
        result = self.account.withdraw(dollars("15000.00"))
        assert result.approved
        assert result.froze
        assert result.fee == dollars("100.00")
        assert self.account.balance == dollars("4960.00")
        assert self.account.is_frozen
    
    def test_add_interest_shared_with_savings(self):
        interest = self.account.add_interest(Decimal('0.25'))
        assert interest == dollars("50.00")
        assert self.account.balance == dollars("20050.00")
        assert self.account.transactions_remaining == 6
    
    def test_no_checks(self):
        with pytest.raises(UnsupportedOperation):
            self.account.withdraw_by_check(Money(100))
        with pytest.raises(UnsupportedOperation):
            self.account.reset_checks()
    
    def test_state_bounds(self):
        with pytest.raises(ValueError):
            MoneyMarketState(transactions_remaining=7)
        with pytest.raises(ValueError):
            CheckingState(free_checks_remaining=-1)
