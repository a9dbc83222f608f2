"""
Directory Module

In-memory lookup of accounts and owners by ID. A Directory is an explicit
value handed to whatever needs lookups; nothing in the package keeps a
process-wide registry.
"""

import threading
from typing import Dict, Iterator, List, Optional

from .accounts import Account
from .errors import DuplicateID, UnresolvedReference
from .owners import Owner
from .products import AccountKind


class Directory:
    """
    ID -> Account and ID -> Owner tables with unique-ID enforcement
    """
    
    def __init__(self):
        self._accounts: Dict[int, Account] = {}
        self._owners: Dict[int, Owner] = {}
        self._lock = threading.RLock()
    
    def add_account(self, account: Account) -> Account:
        """Register an account; a second account with the same ID is rejected"""
        with self._lock:
            if account.id in self._accounts:
                raise DuplicateID("account", account.id)
            self._accounts[account.id] = account
            return account
    
    def add_owner(self, owner: Owner) -> Owner:
        """Register an owner; a second owner with the same ID is rejected"""
        with self._lock:
            if owner.id in self._owners:
                raise DuplicateID("owner", owner.id)
            self._owners[owner.id] = owner
            return owner
    
    def find_account(self, account_id: int) -> Optional[Account]:
        """Get account by ID, None if absent"""
        return self._accounts.get(account_id)
    
    def find_owner(self, owner_id: int) -> Optional[Owner]:
        """Get owner by ID, None if absent"""
        return self._owners.get(owner_id)
    
    def get_account(self, account_id: int) -> Account:
        """Get account by ID or raise UnresolvedReference"""
        account = self.find_account(account_id)
        if account is None:
            raise UnresolvedReference("account", account_id)
        return account
    
    def get_owner(self, owner_id: int) -> Owner:
        """Get owner by ID or raise UnresolvedReference"""
        owner = self.find_owner(owner_id)
        if owner is None:
            raise UnresolvedReference("owner", owner_id)
        return owner
    
    def all_accounts(self) -> List[Account]:
        """All accounts in registration order"""
        return list(self._accounts.values())
    
    def all_owners(self) -> List[Owner]:
        """All owners in registration order"""
        return list(self._owners.values())
    
    def accounts_of_kind(self, kind: AccountKind) -> List[Account]:
        return [account for account in self._accounts.values() if account.kind == kind]
    
    def owners_of(self, account: Account) -> List[Optional[Owner]]:
        """Resolve an account's owner IDs; unknown IDs resolve to None"""
        return [self.find_owner(owner_id) for owner_id in account.owner_ids]
    
    def accounts_of(self, owner: Owner) -> List[Optional[Account]]:
        """Resolve an owner's account IDs; unknown IDs resolve to None"""
        return [self.find_account(account_id) for account_id in owner.account_ids]
    
    def __iter__(self) -> Iterator[Account]:
        return iter(self.all_accounts())
    
    def __len__(self) -> int:
        return len(self._accounts)
    
    def __contains__(self, account_id: int) -> bool:
        return account_id in self._accounts
