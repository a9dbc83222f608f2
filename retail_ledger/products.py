"""
Product Module

Account kinds, the fee and limit schedule of each product, and the
per-kind variant state carried by an account.
"""

from dataclasses import dataclass
from typing import Optional, Union
from enum import Enum

from .currency import Money


class AccountKind(Enum):
    """Banking product kinds, valued by their flat-record label"""
    BASIC = "basic"                  # Plain account, no fees
    SAVINGS = "savings"              # Long-term, earns interest
    CHECKING = "checking"            # Direct and check withdrawals
    MONEY_MARKET = "money market"    # Long-term, earns interest, capped
    
    @classmethod
    def from_label(cls, label: Optional[str]) -> 'AccountKind':
        """Map a record label to a kind; unknown labels open a basic account"""
        normalized = " ".join((label or "").strip().lower().replace("_", " ").split())
        for kind in cls:
            if kind.value == normalized:
                return kind
        return cls.BASIC
    
    @property
    def earns_interest(self) -> bool:
        """Long-term products accrue interest"""
        return self in (AccountKind.SAVINGS, AccountKind.MONEY_MARKET)


class SavingsTerms:
    """Savings fee schedule"""
    FEE = Money(200)
    MIN_BAL = Money(1000)


class CheckingTerms:
    """Checking fee schedule"""
    NON_CHECK_FEE = Money(100)
    CHECK_FEE = Money(200)
    FREE_CHECKS_PER_MONTH = 3
    MAX_OVERDRAFT = Money(1000)


class MoneyMarketTerms:
    """Money-market limits and penalty"""
    MAX_TRANSACTIONS = 6
    MIN_BAL = Money(1_000_000)
    BELOW_MIN_FEE = Money(10_000)


@dataclass
class CheckingState:
    """Free check withdrawals left in the current cycle"""
    free_checks_remaining: int = CheckingTerms.FREE_CHECKS_PER_MONTH
    
    def __post_init__(self):
        if not 0 <= self.free_checks_remaining <= CheckingTerms.FREE_CHECKS_PER_MONTH:
            raise ValueError(
                f"free_checks_remaining must be between 0 and {CheckingTerms.FREE_CHECKS_PER_MONTH}"
            )


@dataclass
class MoneyMarketState:
    """Transaction budget and freeze flag"""
    transactions_remaining: int = MoneyMarketTerms.MAX_TRANSACTIONS
    frozen: bool = False
    
    def __post_init__(self):
        if not 0 <= self.transactions_remaining <= MoneyMarketTerms.MAX_TRANSACTIONS:
            raise ValueError(
                f"transactions_remaining must be between 0 and {MoneyMarketTerms.MAX_TRANSACTIONS}"
            )


VariantState = Union[None, CheckingState, MoneyMarketState]


MINIMUM_OPENING_BALANCE = {
    AccountKind.BASIC: Money(0),
    AccountKind.SAVINGS: SavingsTerms.MIN_BAL,
    AccountKind.CHECKING: Money(0),
    AccountKind.MONEY_MARKET: MoneyMarketTerms.MIN_BAL,
}


def initial_state(kind: AccountKind) -> VariantState:
    """Fresh variant state for a newly opened or reloaded account"""
    if kind == AccountKind.CHECKING:
        return CheckingState()
    if kind == AccountKind.MONEY_MARKET:
        return MoneyMarketState()
    return None
