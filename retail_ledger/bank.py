"""
Bank Module

ID-based entry point for collaborators (UI, admin cycle, tests). Wires the
directory, linker and audit trail together and logs every operation. Each
mutation runs under one lock so its read-modify-write is not interleaved.
"""

import logging
import threading
from datetime import datetime
from decimal import Decimal
from typing import Callable, List, Optional, Union

from .accounts import Account, open_account
from .audit import AuditEventType, AuditTrail
from .bootstrap import export_accounts, load_from_csv
from .config import LedgerConfig, get_config
from .currency import Money
from .cycle import CycleReport, run_monthly_cycle
from .directory import Directory
from .linker import AccountLinker
from .logging_config import log_action
from .owners import Owner
from .products import AccountKind
from .reporting import account_summary, owner_summary
from .transactions import TransactionResult, TransactionType, parse_rate


logger = logging.getLogger("retail_ledger.bank")


_POSTED_EVENTS = {
    TransactionType.DEPOSIT: AuditEventType.DEPOSIT_POSTED,
    TransactionType.WITHDRAWAL: AuditEventType.WITHDRAWAL_POSTED,
    TransactionType.CHECK_WITHDRAWAL: AuditEventType.CHECK_POSTED,
}


class Bank:
    """
    Ledger session over one directory
    """
    
    def __init__(
        self,
        directory: Optional[Directory] = None,
        audit_trail: Optional[AuditTrail] = None,
        config: Optional[LedgerConfig] = None
    ):
        self.config = config or get_config()
        self.directory = directory if directory is not None else Directory()
        self.linker = AccountLinker(self.directory)
        
        if audit_trail is None and self.config.enable_audit_logging:
            audit_trail = AuditTrail()
        self.audit_trail = audit_trail
        
        self._lock = threading.RLock()
    
    @classmethod
    def from_csv(
        cls,
        accounts_path,
        owners_path=None,
        links_path=None,
        restore: bool = True,
        **kwargs
    ) -> 'Bank':
        """
        Open a session over accounts, owners and links loaded from CSV files
        
        The accounts file is normally a shutdown export, so accounts are
        restored by default: balances below the opening minimums reload as
        saved, with money-market accounts below their minimum frozen. Pass
        restore=False to apply the opening rules to every row.
        """
        directory = load_from_csv(accounts_path, owners_path, links_path, restore=restore)
        return cls(directory=directory, **kwargs)
    
    def _audit(self, event_type: AuditEventType, entity_type: str, entity_id, **metadata) -> None:
        if self.audit_trail:
            self.audit_trail.log_event(event_type, entity_type, entity_id, metadata)
    
    # Directory operations
    
    def open_account(
        self,
        account_id: int,
        initial_balance: Money,
        kind: AccountKind = AccountKind.BASIC,
        created_at: Optional[datetime] = None,
        owner_id: Optional[int] = None
    ) -> Account:
        """
        Open and register a new account
        
        Args:
            account_id: Unique account ID
            initial_balance: Opening deposit
            kind: Product kind
            created_at: Creation timestamp (now if not provided)
            owner_id: Registered owner to link immediately
            
        Returns:
            The registered Account
        """
        with self._lock:
            if owner_id is not None:
                self.directory.get_owner(owner_id)
            
            account = self.directory.add_account(
                open_account(account_id, initial_balance, created_at, kind)
            )
            self._audit(
                AuditEventType.ACCOUNT_OPENED, "account", account.id,
                kind=kind, balance=account.balance, created_at=account.created_at
            )
            log_action(
                logger, "info", f"Opened {kind.value} account {account.id} with {account.balance}",
                action="open_account", resource=f"account:{account.id}"
            )
            
            if owner_id is not None:
                self.link(account.id, owner_id)
            return account
    
    def register_owner(self, owner: Owner) -> Owner:
        with self._lock:
            self.directory.add_owner(owner)
            self._audit(AuditEventType.OWNER_REGISTERED, "owner", owner.id, name=owner.full_name)
            log_action(
                logger, "info", f"Registered owner {owner.id}",
                action="register_owner", resource=f"owner:{owner.id}"
            )
            return owner
    
    def link(self, account_id: int, owner_id: int) -> None:
        """Link an owner to an account (see AccountLinker.link)"""
        with self._lock:
            self.linker.link(account_id, owner_id)
            self._audit(AuditEventType.OWNERSHIP_LINKED, "account", account_id, owner_id=owner_id)
    
    # Transactions
    
    def _transact(
        self,
        account_id: int,
        amount: Money,
        operation: Callable[[Account, Money], TransactionResult]
    ) -> TransactionResult:
        with self._lock:
            account = self.directory.get_account(account_id)
            result = operation(account, amount)
            self._record(result)
            return result
    
    def _record(self, result: TransactionResult) -> None:
        resource = f"account:{result.account_id}"
        details = {
            "amount": result.amount.cents,
            "fee": result.fee.cents,
            "balance": result.balance.cents,
        }
        
        if result.declined:
            details["reason"] = result.reason.value
            self._audit(
                AuditEventType.TRANSACTION_DECLINED, "account", result.account_id,
                transaction_type=result.transaction_type, **details
            )
            log_action(
                logger, "warning", result.message,
                action=result.transaction_type.value, resource=resource, extra=details
            )
            return
        
        self._audit(_POSTED_EVENTS[result.transaction_type], "account", result.account_id, **details)
        log_action(
            logger, "info", result.message,
            action=result.transaction_type.value, resource=resource, extra=details
        )
        
        if result.froze:
            self._audit(AuditEventType.ACCOUNT_FROZEN, "account", result.account_id, balance=result.balance)
            logger.info(f"Account {result.account_id} frozen below minimum balance")
        if result.unfroze:
            self._audit(AuditEventType.ACCOUNT_UNFROZEN, "account", result.account_id, balance=result.balance)
            logger.info(f"Account {result.account_id} unfrozen")
    
    def withdraw(self, account_id: int, amount: Money) -> TransactionResult:
        return self._transact(account_id, amount, Account.withdraw)
    
    def withdraw_by_check(self, account_id: int, amount: Money) -> TransactionResult:
        return self._transact(account_id, amount, Account.withdraw_by_check)
    
    def deposit(self, account_id: int, amount: Money) -> TransactionResult:
        return self._transact(account_id, amount, Account.deposit)
    
    def add_interest(self, account_id: int, rate: Optional[Union[Decimal, int, str]] = None) -> Money:
        """Credit interest to one long-term account (configured rate if omitted)"""
        rate = parse_rate(self.config.monthly_interest_rate if rate is None else rate)
        with self._lock:
            account = self.directory.get_account(account_id)
            interest = account.add_interest(rate)
            self._audit(
                AuditEventType.INTEREST_POSTED, "account", account_id,
                rate=rate, interest=interest, balance=account.balance
            )
            log_action(
                logger, "info", f"Posted {interest} interest to account {account_id}",
                action="add_interest", resource=f"account:{account_id}"
            )
            return interest
    
    def run_monthly_cycle(self, rate: Optional[Union[Decimal, int, str]] = None) -> CycleReport:
        if rate is None:
            rate = self.config.monthly_interest_rate
        with self._lock:
            return run_monthly_cycle(self.directory, rate, self.audit_trail)
    
    # Queries
    
    def balance(self, account_id: int) -> Money:
        return self.directory.get_account(account_id).balance
    
    def summary(self, account_id: int) -> str:
        return account_summary(self.directory, self.directory.get_account(account_id))
    
    def owner_summary(self, owner_id: int) -> str:
        return owner_summary(self.directory.get_owner(owner_id))
    
    def export(self) -> List[List[str]]:
        """Shutdown rows for every account"""
        with self._lock:
            return export_accounts(self.directory)
