"""
Owner Module

Account owners: identity, name and address. Name and address never change
after creation; the only mutable part of an owner is the list of account IDs
maintained by the linker.
"""

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(frozen=True)
class PersonName:
    """Owner name"""
    first: str
    last: str
    middle: Optional[str] = None
    
    def __post_init__(self):
        if not (self.first or "").strip() and not (self.last or "").strip():
            raise ValueError("Owner name requires a first or last name")
    
    @property
    def full_name(self) -> str:
        parts = [self.first, self.middle, self.last]
        return " ".join(part for part in parts if part)


@dataclass(frozen=True)
class Address:
    """Owner postal address"""
    street1: str
    city: str
    state: str
    street2: Optional[str] = None
    country: Optional[str] = None
    zip_code: Optional[str] = None
    
    def lines(self) -> List[str]:
        """Address formatted as printable lines"""
        result = [self.street1]
        if self.street2:
            result.append(self.street2)
        locality = f"{self.city}, {self.state}"
        if self.zip_code:
            locality = f"{locality} {self.zip_code}"
        result.append(locality)
        if self.country:
            result.append(self.country)
        return result


@dataclass
class Owner:
    """
    Account owner, linked to accounts by ID
    """
    id: int
    name: PersonName
    address: Address
    account_ids: List[int] = field(default_factory=list)
    
    @property
    def full_name(self) -> str:
        return self.name.full_name
    
    def add_account(self, account_id: int) -> None:
        """Append an account ID; repeated links are recorded as given"""
        self.account_ids.append(account_id)
    
    def __str__(self) -> str:
        return f"{self.id}: {self.full_name}"
