"""
Bootstrap Module

Batch load of accounts, owners and owner links from flat rows (or the CSV
files holding them), and the shutdown export of account rows. Files have no
header line; blank lines are skipped.
"""

import csv
import io
import logging
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Union

from .config import get_config
from .directory import Directory
from .linker import AccountLinker
from .records import (
    AccountRecord, AssociationRecord, OwnerRecord,
    account_from_record, account_to_record, owner_from_record
)


logger = logging.getLogger("retail_ledger.bootstrap")

Row = Sequence[str]
PathLike = Union[str, Path]


def read_rows(path: PathLike, encoding: Optional[str] = None) -> List[List[str]]:
    """Read the non-blank rows of a headerless CSV file"""
    encoding = encoding or get_config().csv_encoding
    with open(path, newline="", encoding=encoding) as handle:
        return [row for row in csv.reader(handle) if any(cell.strip() for cell in row)]


def load_directory(
    account_rows: Iterable[Row],
    owner_rows: Iterable[Row] = (),
    link_rows: Iterable[Row] = (),
    directory: Optional[Directory] = None,
    restore: bool = False
) -> Directory:
    """
    Build a directory from flat rows in one pass
    
    Args:
        account_rows: (id, balance_cents, created_at[, kind]) rows
        owner_rows: (id, last_name, first_name, street1, city, state) rows
        link_rows: (account_id, owner_id) rows
        directory: Directory to fill (a new one if not provided)
        restore: Rows are a shutdown export; see records.account_from_record
        
    Returns:
        The populated directory
        
    Raises:
        InvalidRecord: On a malformed row
        DuplicateID: If two rows share an account or owner ID
        UnresolvedReference: If a link names an unknown account or owner
    """
    directory = directory if directory is not None else Directory()
    
    for row in account_rows:
        directory.add_account(account_from_record(AccountRecord.from_row(row), restore=restore))
    
    for row in owner_rows:
        directory.add_owner(owner_from_record(OwnerRecord.from_row(row)))
    
    linker = AccountLinker(directory)
    links = linker.link_all(
        (record.account_id, record.owner_id)
        for record in (AssociationRecord.from_row(row) for row in link_rows)
    )
    
    logger.info(
        f"Loaded {len(directory)} accounts, {len(directory.all_owners())} owners, {links} links"
    )
    return directory


def load_from_csv(
    accounts_path: PathLike,
    owners_path: Optional[PathLike] = None,
    links_path: Optional[PathLike] = None,
    restore: bool = False
) -> Directory:
    """Load a directory from the accounts, owners and account-owner CSV files"""
    return load_directory(
        read_rows(accounts_path),
        read_rows(owners_path) if owners_path else [],
        read_rows(links_path) if links_path else [],
        restore=restore
    )


def export_accounts(directory: Directory) -> List[List[str]]:
    """Shutdown rows (id, balance_cents, created_at, kind) in registration order"""
    return [account_to_record(account).to_row() for account in directory.all_accounts()]


def export_accounts_csv(directory: Directory) -> str:
    """Shutdown rows rendered as CSV text"""
    output = io.StringIO()
    writer = csv.writer(output, lineterminator="\n")
    writer.writerows(export_accounts(directory))
    return output.getvalue()


def write_accounts_csv(directory: Directory, path: PathLike, encoding: Optional[str] = None) -> int:
    """Write the shutdown export; returns the number of rows written"""
    rows = export_accounts(directory)
    encoding = encoding or get_config().csv_encoding
    with open(path, "w", newline="", encoding=encoding) as handle:
        csv.writer(handle, lineterminator="\n").writerows(rows)
    logger.info(f"Exported {len(rows)} accounts to {path}")
    return len(rows)
