"""
Transaction Rules Module

Withdrawal and deposit rules for every account kind. Each kind registers
its rule in a dispatch table; the public functions validate the amount and
route to the rule for ``account.kind``. A rule either mutates the account
and returns an approved TransactionResult, or leaves it untouched and
returns a declined one. Declines are ordinary results, never exceptions.
"""

from decimal import Decimal, InvalidOperation
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Union, TYPE_CHECKING
from enum import Enum

from .currency import Money
from .errors import InvalidAmount, UnsupportedOperation
from .products import (
    AccountKind, CheckingTerms, MoneyMarketTerms, SavingsTerms
)

if TYPE_CHECKING:
    from .accounts import Account


ZERO = Money(0)


class TransactionType(Enum):
    """Kinds of balance-changing requests"""
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    CHECK_WITHDRAWAL = "check_withdrawal"


class DeclineReason(Enum):
    """Why a request was declined"""
    INSUFFICIENT_FUNDS = "insufficient_funds"                  # Amount (plus fee) exceeds balance
    MINIMUM_BALANCE_RESERVE = "minimum_balance_reserve"        # Savings minimum plus fee must remain
    OVERDRAFT_LIMIT = "overdraft_limit"                        # Check would exceed the overdraft limit
    ACCOUNT_FROZEN = "account_frozen"                          # Money market frozen below minimum
    TRANSACTION_LIMIT = "transaction_limit"                    # Monthly transaction cap reached
    BELOW_MINIMUM_FEE_RESERVE = "below_minimum_fee_reserve"    # Balance must cover the below-minimum fee


@dataclass(frozen=True)
class TransactionResult:
    """
    Outcome of a deposit or withdrawal request.
    
    ``balance`` is the account balance after the request: the new balance
    when approved, the unchanged balance when declined. ``fee`` is the fee
    charged, or on a decline the fee that would have applied.
    """
    transaction_type: TransactionType
    account_id: int
    amount: Money
    balance: Money
    approved: bool
    fee: Money = ZERO
    reason: Optional[DeclineReason] = None
    overdraft_limit: Optional[Money] = None
    froze: bool = False      # Request froze the account
    unfroze: bool = False    # Request lifted a freeze
    
    @property
    def declined(self) -> bool:
        return not self.approved
    
    def __bool__(self) -> bool:
        return self.approved
    
    @property
    def message(self) -> str:
        """Human-readable description of the outcome"""
        action = self.transaction_type.value.replace("_", " ")
        if self.approved:
            text = f"{action.capitalize()} of {self.amount} posted, balance {self.balance}"
            if self.fee.is_positive():
                text += f" (fee {self.fee})"
            if self.froze:
                text += "; account frozen below minimum balance"
            if self.unfroze:
                text += "; account unfrozen"
            return text
        
        text = f"{action.capitalize()} of {self.amount} declined ({self.reason.value}), balance {self.balance}"
        if self.overdraft_limit is not None:
            text += f"; overdraft limit is -{self.overdraft_limit}"
        if self.fee.is_positive():
            text += f"; a {self.fee} fee would apply"
        return text


def validate_amount(amount: Money) -> Money:
    """Reject non-Money and negative amounts"""
    if not isinstance(amount, Money):
        raise TypeError(f"Amount must be Money, got {type(amount).__name__}")
    if amount.is_negative():
        raise InvalidAmount(f"Amount must be non-negative, got {amount}")
    return amount


def _approved(account: 'Account', transaction_type: TransactionType, amount: Money,
              fee: Money = ZERO, **flags) -> TransactionResult:
    return TransactionResult(
        transaction_type=transaction_type,
        account_id=account.id,
        amount=amount,
        balance=account.balance,
        approved=True,
        fee=fee,
        **flags
    )


def _declined(account: 'Account', transaction_type: TransactionType, amount: Money,
              reason: DeclineReason, fee: Money = ZERO,
              overdraft_limit: Optional[Money] = None) -> TransactionResult:
    return TransactionResult(
        transaction_type=transaction_type,
        account_id=account.id,
        amount=amount,
        balance=account.balance,
        approved=False,
        fee=fee,
        reason=reason,
        overdraft_limit=overdraft_limit
    )


# Withdrawal rules

def _withdraw_basic(account: 'Account', amount: Money) -> TransactionResult:
    if amount <= account.balance:
        account.balance -= amount
        return _approved(account, TransactionType.WITHDRAWAL, amount)
    return _declined(account, TransactionType.WITHDRAWAL, amount, DeclineReason.INSUFFICIENT_FUNDS)


def _withdraw_savings(account: 'Account', amount: Money) -> TransactionResult:
    fee = SavingsTerms.FEE
    if amount <= account.balance - SavingsTerms.MIN_BAL - fee:
        account.balance -= amount + fee
        return _approved(account, TransactionType.WITHDRAWAL, amount, fee=fee)
    return _declined(
        account, TransactionType.WITHDRAWAL, amount,
        DeclineReason.MINIMUM_BALANCE_RESERVE, fee=fee
    )


def _withdraw_checking(account: 'Account', amount: Money) -> TransactionResult:
    fee = CheckingTerms.NON_CHECK_FEE
    if amount <= account.balance - fee:
        account.balance -= amount + fee
        return _approved(account, TransactionType.WITHDRAWAL, amount, fee=fee)
    return _declined(
        account, TransactionType.WITHDRAWAL, amount,
        DeclineReason.INSUFFICIENT_FUNDS, fee=fee
    )


def _withdraw_money_market(account: 'Account', amount: Money) -> TransactionResult:
    state = account.state
    
    if state.frozen:
        return _declined(account, TransactionType.WITHDRAWAL, amount, DeclineReason.ACCOUNT_FROZEN)
    
    if state.transactions_remaining == 0:
        return _declined(account, TransactionType.WITHDRAWAL, amount, DeclineReason.TRANSACTION_LIMIT)
    
    # The balance must still cover the penalty should this withdrawal dip below minimum
    if amount > account.balance - MoneyMarketTerms.BELOW_MIN_FEE:
        return _declined(
            account, TransactionType.WITHDRAWAL, amount,
            DeclineReason.BELOW_MINIMUM_FEE_RESERVE, fee=MoneyMarketTerms.BELOW_MIN_FEE
        )
    
    account.balance -= amount
    fee = ZERO
    froze = False
    if account.balance < MoneyMarketTerms.MIN_BAL:
        fee = MoneyMarketTerms.BELOW_MIN_FEE
        account.balance -= fee
        state.frozen = True
        froze = True
    state.transactions_remaining -= 1
    
    return _approved(account, TransactionType.WITHDRAWAL, amount, fee=fee, froze=froze)


# Deposit rules

def _deposit_basic(account: 'Account', amount: Money) -> TransactionResult:
    account.balance += amount
    return _approved(account, TransactionType.DEPOSIT, amount)


def _deposit_money_market(account: 'Account', amount: Money) -> TransactionResult:
    state = account.state
    
    # Frozen accounts take any deposit without spending a transaction
    if state.frozen:
        account.balance += amount
        unfroze = False
        if account.balance > MoneyMarketTerms.MIN_BAL:
            state.frozen = False
            unfroze = True
        return _approved(account, TransactionType.DEPOSIT, amount, unfroze=unfroze)
    
    if state.transactions_remaining == 0:
        return _declined(account, TransactionType.DEPOSIT, amount, DeclineReason.TRANSACTION_LIMIT)
    
    account.balance += amount
    state.transactions_remaining -= 1
    return _approved(account, TransactionType.DEPOSIT, amount)


_WITHDRAW_RULES: Dict[AccountKind, Callable[['Account', Money], TransactionResult]] = {
    AccountKind.BASIC: _withdraw_basic,
    AccountKind.SAVINGS: _withdraw_savings,
    AccountKind.CHECKING: _withdraw_checking,
    AccountKind.MONEY_MARKET: _withdraw_money_market,
}

_DEPOSIT_RULES: Dict[AccountKind, Callable[['Account', Money], TransactionResult]] = {
    AccountKind.BASIC: _deposit_basic,
    AccountKind.SAVINGS: _deposit_basic,
    AccountKind.CHECKING: _deposit_basic,
    AccountKind.MONEY_MARKET: _deposit_money_market,
}


def _require_kind(account: 'Account', kind: AccountKind, operation: str) -> None:
    if account.kind != kind:
        raise UnsupportedOperation(
            f"{operation} is only available on {kind.value} accounts, "
            f"account {account.id} is {account.kind.value}"
        )


def withdraw(account: 'Account', amount: Money) -> TransactionResult:
    """Direct withdrawal under the rules of the account's kind"""
    validate_amount(amount)
    return _WITHDRAW_RULES[account.kind](account, amount)


def deposit(account: 'Account', amount: Money) -> TransactionResult:
    """Deposit under the rules of the account's kind"""
    validate_amount(amount)
    return _DEPOSIT_RULES[account.kind](account, amount)


def withdraw_by_check(account: 'Account', amount: Money) -> TransactionResult:
    """
    Withdraw from a checking account by check
    
    The first checks of each cycle are free; after that every check costs
    CHECK_FEE. The balance may go negative down to -MAX_OVERDRAFT.
    
    Args:
        account: Checking account to debit
        amount: Amount of the check
        
    Returns:
        TransactionResult; a decline carries the overdraft limit and the fee
        that would have been charged
        
    Raises:
        UnsupportedOperation: If the account is not a checking account
        InvalidAmount: If the amount is negative
    """
    _require_kind(account, AccountKind.CHECKING, "Check withdrawal")
    validate_amount(amount)
    state = account.state
    
    fee = CheckingTerms.CHECK_FEE if state.free_checks_remaining == 0 else ZERO
    
    if amount <= account.balance - fee + CheckingTerms.MAX_OVERDRAFT:
        account.balance -= amount + fee
        if state.free_checks_remaining > 0:
            state.free_checks_remaining -= 1
        return _approved(account, TransactionType.CHECK_WITHDRAWAL, amount, fee=fee)
    
    return _declined(
        account, TransactionType.CHECK_WITHDRAWAL, amount,
        DeclineReason.OVERDRAFT_LIMIT, fee=fee,
        overdraft_limit=CheckingTerms.MAX_OVERDRAFT
    )


def parse_rate(rate: Union[Decimal, int, float, str]) -> Decimal:
    """
    Parse an interest rate given in percent
    
    Raises:
        InvalidAmount: If the rate is unparseable, not finite or negative
    """
    if isinstance(rate, float):
        rate = str(rate)
    try:
        parsed = Decimal(rate)
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidAmount(f"Invalid interest rate {rate!r}")
    if not parsed.is_finite():
        raise InvalidAmount(f"Interest rate must be a finite number, got {rate!r}")
    if parsed < 0:
        raise InvalidAmount(f"Interest rate must be non-negative, got {parsed}")
    return parsed


def add_interest(account: 'Account', rate: Union[Decimal, int, float, str]) -> Money:
    """
    Credit ``rate`` percent of the balance to a long-term account
    
    Args:
        account: Savings or money-market account
        rate: Interest rate in percent
        
    Returns:
        Interest credited, rounded half-up to the cent
    """
    if not account.kind.earns_interest:
        raise UnsupportedOperation(
            f"Interest is only paid on savings and money market accounts, "
            f"account {account.id} is {account.kind.value}"
        )
    
    rate = parse_rate(rate)
    
    interest = account.balance.percent(rate)
    account.balance += interest
    return interest


def reset_checks(account: 'Account') -> None:
    """Restore the monthly free check allowance"""
    _require_kind(account, AccountKind.CHECKING, "Check reset")
    account.state.free_checks_remaining = CheckingTerms.FREE_CHECKS_PER_MONTH


def reset_transactions(account: 'Account') -> None:
    """Restore the monthly money-market transaction budget"""
    _require_kind(account, AccountKind.MONEY_MARKET, "Transaction reset")
    account.state.transactions_remaining = MoneyMarketTerms.MAX_TRANSACTIONS
