"""
Account Linker Module

Associates owners with accounts. Both sides are resolved through the
Directory before either is touched.
"""

import logging
from typing import Iterable, Tuple

from .directory import Directory
from .errors import UnresolvedReference


logger = logging.getLogger("retail_ledger.linker")


class AccountLinker:
    """Many-to-many Owner <-> Account association"""
    
    def __init__(self, directory: Directory):
        self.directory = directory
    
    def link(self, account_id: int, owner_id: int) -> None:
        """
        Link an owner to an account
        
        Args:
            account_id: ID of the account
            owner_id: ID of the owner
            
        Raises:
            UnresolvedReference: If either ID is not in the directory
        """
        account = self.directory.find_account(account_id)
        if account is None:
            raise UnresolvedReference("account", account_id, f"linking owner {owner_id}")
        
        owner = self.directory.find_owner(owner_id)
        if owner is None:
            raise UnresolvedReference("owner", owner_id, f"linking account {account_id}")
        
        if owner_id in account.owner_ids:
            logger.warning(f"Owner {owner_id} is already linked to account {account_id}")
        
        account.add_owner(owner_id)
        owner.add_account(account_id)
    
    def link_all(self, pairs: Iterable[Tuple[int, int]]) -> int:
        """Link (account_id, owner_id) pairs in order; returns the number linked"""
        count = 0
        for account_id, owner_id in pairs:
            self.link(account_id, owner_id)
            count += 1
        return count
