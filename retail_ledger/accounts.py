"""
Account Management Module

A single tagged-variant Account record covers every product. The kind
selects the withdrawal and deposit rules (see transactions) and the
variant state the account carries: free checks for checking, the
transaction budget and freeze flag for money market.
"""

from decimal import Decimal
from datetime import datetime, timezone
from dataclasses import dataclass, field
from typing import List, Optional, Union

from . import transactions
from .currency import Money
from .errors import BelowMinimumBalance, InvalidAmount, UnsupportedOperation
from .products import (
    AccountKind, CheckingState, CheckingTerms, MoneyMarketState, MoneyMarketTerms,
    MINIMUM_OPENING_BALANCE, VariantState, initial_state
)
from .transactions import TransactionResult


_STATE_TYPES = {
    AccountKind.BASIC: type(None),
    AccountKind.SAVINGS: type(None),
    AccountKind.CHECKING: CheckingState,
    AccountKind.MONEY_MARKET: MoneyMarketState,
}


@dataclass
class Account:
    """
    Bank account: shared ledger fields plus the variant state of its kind.
    Owners are referenced by ID only; duplicates in ``owner_ids`` are kept.
    """
    id: int
    kind: AccountKind
    balance: Money
    created_at: datetime
    owner_ids: List[int] = field(default_factory=list)
    state: VariantState = None
    
    def __post_init__(self):
        if not isinstance(self.balance, Money):
            raise TypeError("Account balance must be Money")
        
        if self.state is None:
            self.state = initial_state(self.kind)
        
        if not isinstance(self.state, _STATE_TYPES[self.kind]):
            raise ValueError(
                f"{type(self.state).__name__} is not valid state for a {self.kind.value} account"
            )
    
    @property
    def is_long_term(self) -> bool:
        """Check if the account earns interest"""
        return self.kind.earns_interest
    
    @property
    def free_checks_remaining(self) -> int:
        if self.kind != AccountKind.CHECKING:
            raise UnsupportedOperation(f"Account {self.id} is not a checking account")
        return self.state.free_checks_remaining
    
    @property
    def transactions_remaining(self) -> int:
        if self.kind != AccountKind.MONEY_MARKET:
            raise UnsupportedOperation(f"Account {self.id} is not a money market account")
        return self.state.transactions_remaining
    
    @property
    def is_frozen(self) -> bool:
        """Only money-market accounts freeze"""
        return self.kind == AccountKind.MONEY_MARKET and self.state.frozen
    
    def withdraw(self, amount: Money) -> TransactionResult:
        """Direct (non-check) withdrawal"""
        return transactions.withdraw(self, amount)
    
    def deposit(self, amount: Money) -> TransactionResult:
        return transactions.deposit(self, amount)
    
    def withdraw_by_check(self, amount: Money) -> TransactionResult:
        """Check withdrawal, checking accounts only"""
        return transactions.withdraw_by_check(self, amount)
    
    def add_interest(self, rate: Union[Decimal, int, str]) -> Money:
        """Credit ``rate`` percent interest, long-term accounts only"""
        return transactions.add_interest(self, rate)
    
    def reset_checks(self) -> None:
        transactions.reset_checks(self)
    
    def reset_transactions(self) -> None:
        transactions.reset_transactions(self)
    
    def add_owner(self, owner_id: int) -> None:
        """Append an owner ID; repeated links are recorded as given"""
        self.owner_ids.append(owner_id)
    
    def __str__(self) -> str:
        return (
            f"ID: {self.id}, Balance: {self.balance}, "
            f"Date of creation: {self.created_at.isoformat()}"
        )


def open_account(
    account_id: int,
    initial_balance: Money,
    created_at: Optional[datetime] = None,
    kind: AccountKind = AccountKind.BASIC,
    owner_id: Optional[int] = None
) -> Account:
    """
    Open a new account, enforcing the product's opening rules
    
    Args:
        account_id: Unique account ID
        initial_balance: Opening deposit
        created_at: Creation timestamp (now, UTC, if not provided)
        kind: Product kind
        owner_id: Optional first owner
        
    Returns:
        Created Account object with default variant state
        
    Raises:
        InvalidAmount: If the opening balance is negative
        BelowMinimumBalance: If the opening balance is below the product minimum
    """
    if not isinstance(initial_balance, Money):
        raise TypeError("Opening balance must be Money")
    if initial_balance.is_negative():
        raise InvalidAmount(f"Opening balance must be non-negative, got {initial_balance}")
    
    minimum = MINIMUM_OPENING_BALANCE[kind]
    if initial_balance < minimum:
        raise BelowMinimumBalance(kind.value, minimum, initial_balance)
    
    return Account(
        id=account_id,
        kind=kind,
        balance=initial_balance,
        created_at=created_at or datetime.now(timezone.utc),
        owner_ids=[owner_id] if owner_id is not None else []
    )


def restore_account(
    account_id: int,
    balance: Money,
    created_at: datetime,
    kind: AccountKind
) -> Account:
    """
    Rebuild an account from its shutdown record
    
    Opening minimums do not apply: a money-market account may have been
    saved below its minimum, in which case it comes back frozen. Counters
    return to their cycle defaults. Only checking balances may be negative,
    and no lower than the overdraft limit.
    """
    if not isinstance(balance, Money):
        raise TypeError("Balance must be Money")
    
    floor = -CheckingTerms.MAX_OVERDRAFT if kind == AccountKind.CHECKING else Money(0)
    if balance < floor:
        raise InvalidAmount(f"Balance {balance} is below {floor} for a {kind.value} account")
    
    state = initial_state(kind)
    if kind == AccountKind.MONEY_MARKET and balance < MoneyMarketTerms.MIN_BAL:
        state.frozen = True
    
    return Account(
        id=account_id,
        kind=kind,
        balance=balance,
        created_at=created_at,
        state=state
    )
