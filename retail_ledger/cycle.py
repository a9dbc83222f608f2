"""
Monthly Cycle Module

End-of-month processing: interest is posted to long-term accounts, checking
accounts get their free checks back and money-market accounts get a fresh
transaction budget.
"""

import logging
from decimal import Decimal
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union

from .audit import AuditEventType, AuditTrail
from .config import get_config
from .currency import Money
from .directory import Directory
from .products import AccountKind
from .transactions import parse_rate


logger = logging.getLogger("retail_ledger.cycle")


@dataclass
class CycleReport:
    """What one monthly cycle did"""
    rate: Decimal
    interest: Dict[int, Money] = field(default_factory=dict)   # account_id -> interest credited
    checks_reset: List[int] = field(default_factory=list)
    transactions_reset: List[int] = field(default_factory=list)
    
    @property
    def total_interest(self) -> Money:
        total = Money(0)
        for amount in self.interest.values():
            total += amount
        return total


def run_monthly_cycle(
    directory: Directory,
    rate: Optional[Union[Decimal, int, str]] = None,
    audit_trail: Optional[AuditTrail] = None
) -> CycleReport:
    """
    Run the monthly cycle over every account in the directory
    
    The rate is validated before any account or audit event is touched.
    
    Args:
        directory: Accounts to process
        rate: Interest rate in percent (configured monthly_interest_rate if omitted)
        audit_trail: Optional trail receiving one event per change
        
    Returns:
        CycleReport listing interest per account and the resets performed
        
    Raises:
        InvalidAmount: If the rate is unparseable, not finite or negative
    """
    if rate is None:
        rate = get_config().monthly_interest_rate
    report = CycleReport(rate=parse_rate(rate))
    
    for account in directory.all_accounts():
        if account.is_long_term:
            interest = account.add_interest(report.rate)
            report.interest[account.id] = interest
            if audit_trail:
                audit_trail.log_event(
                    AuditEventType.INTEREST_POSTED, "account", account.id,
                    {"rate": report.rate, "interest": interest, "balance": account.balance}
                )
        
        if account.kind == AccountKind.CHECKING:
            account.reset_checks()
            report.checks_reset.append(account.id)
            if audit_trail:
                audit_trail.log_event(AuditEventType.CHECKS_RESET, "account", account.id)
        
        elif account.kind == AccountKind.MONEY_MARKET:
            account.reset_transactions()
            report.transactions_reset.append(account.id)
            if audit_trail:
                audit_trail.log_event(AuditEventType.TRANSACTIONS_RESET, "account", account.id)
    
    logger.info(
        f"Monthly cycle at {report.rate}%: interest {report.total_interest} on "
        f"{len(report.interest)} accounts, {len(report.checks_reset)} check resets, "
        f"{len(report.transactions_reset)} transaction resets"
    )
    return report
