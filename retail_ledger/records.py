"""
Flat Record Module

Pydantic models for the flat rows exchanged with the bootstrap loader and
the shutdown export:

    account:     id, balance_cents, created_at, kind
    owner:       id, last_name, first_name, street1, city, state
    association: account_id, owner_id

An exported account row loads back into an equivalent account.
"""

from datetime import datetime
from typing import List, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .accounts import Account, open_account, restore_account
from .currency import Money
from .errors import InvalidRecord
from .owners import Address, Owner, PersonName
from .products import AccountKind


# Layout used by the original data files, e.g. "1999-03-27 11:30:09 -0800"
LEGACY_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S %z"


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO 8601 or legacy-layout timestamp"""
    text = value.strip()
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.strptime(text, LEGACY_TIMESTAMP_FORMAT)
    except ValueError:
        raise ValueError(f"Unrecognized timestamp '{value}'")


def _field(row: Sequence[str], index: int) -> Optional[str]:
    if index < len(row):
        value = row[index].strip()
        return value or None
    return None


def _require_columns(row: Sequence[str], count: int, record_type: str) -> None:
    if len(row) < count:
        raise InvalidRecord(f"{record_type} row needs {count} columns, got {len(row)}: {list(row)}")


class AccountRecord(BaseModel):
    model_config = ConfigDict(frozen=True)
    
    id: int
    balance_cents: int
    created_at: datetime
    kind: AccountKind = Field(default=AccountKind.BASIC, description="Product label; unknown labels are basic")
    
    @field_validator("created_at", mode="before")
    @classmethod
    def _parse_created_at(cls, value):
        if isinstance(value, str):
            return parse_timestamp(value)
        return value
    
    @field_validator("kind", mode="before")
    @classmethod
    def _parse_kind(cls, value):
        if isinstance(value, AccountKind):
            return value
        return AccountKind.from_label(value)
    
    @classmethod
    def from_row(cls, row: Sequence[str]) -> 'AccountRecord':
        """Build from a CSV row; the kind column is optional"""
        _require_columns(row, 3, "Account")
        try:
            return cls(
                id=row[0].strip(),
                balance_cents=row[1].strip(),
                created_at=row[2],
                kind=_field(row, 3)
            )
        except ValidationError as e:
            raise InvalidRecord(f"Invalid account row {list(row)}: {e}") from e
    
    def to_row(self) -> List[str]:
        return [str(self.id), str(self.balance_cents), self.created_at.isoformat(), self.kind.value]


class OwnerRecord(BaseModel):
    model_config = ConfigDict(frozen=True)
    
    id: int
    last_name: str
    first_name: str
    street1: str
    city: str
    state: str
    
    @classmethod
    def from_row(cls, row: Sequence[str]) -> 'OwnerRecord':
        _require_columns(row, 6, "Owner")
        try:
            return cls(
                id=row[0].strip(),
                last_name=row[1].strip(),
                first_name=row[2].strip(),
                street1=row[3].strip(),
                city=row[4].strip(),
                state=row[5].strip()
            )
        except ValidationError as e:
            raise InvalidRecord(f"Invalid owner row {list(row)}: {e}") from e
    
    def to_row(self) -> List[str]:
        return [str(self.id), self.last_name, self.first_name, self.street1, self.city, self.state]


class AssociationRecord(BaseModel):
    model_config = ConfigDict(frozen=True)
    
    account_id: int
    owner_id: int
    
    @classmethod
    def from_row(cls, row: Sequence[str]) -> 'AssociationRecord':
        _require_columns(row, 2, "Association")
        try:
            return cls(account_id=row[0].strip(), owner_id=row[1].strip())
        except ValidationError as e:
            raise InvalidRecord(f"Invalid association row {list(row)}: {e}") from e
    
    def to_row(self) -> List[str]:
        return [str(self.account_id), str(self.owner_id)]


def account_from_record(record: AccountRecord, restore: bool = False) -> Account:
    """
    Build an account from its flat record
    
    Args:
        record: Parsed account record
        restore: Reload a shutdown export instead of opening a new account;
            opening minimums are skipped and counters start at their defaults
            
    Returns:
        Account of the record's kind
    """
    balance = Money(record.balance_cents)
    if restore:
        return restore_account(record.id, balance, record.created_at, record.kind)
    return open_account(record.id, balance, record.created_at, record.kind)


def account_to_record(account: Account) -> AccountRecord:
    return AccountRecord(
        id=account.id,
        balance_cents=account.balance.cents,
        created_at=account.created_at,
        kind=account.kind
    )


def owner_from_record(record: OwnerRecord) -> Owner:
    return Owner(
        id=record.id,
        name=PersonName(first=record.first_name, last=record.last_name),
        address=Address(street1=record.street1, city=record.city, state=record.state)
    )
