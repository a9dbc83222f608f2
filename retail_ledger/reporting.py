"""
Reporting Module

Human-readable account and owner summaries. Owner names are resolved
through the directory at report time.
"""

from typing import List

from .accounts import Account
from .directory import Directory
from .owners import Owner
from .products import AccountKind


KIND_TITLES = {
    AccountKind.BASIC: "Basic",
    AccountKind.SAVINGS: "Savings",
    AccountKind.CHECKING: "Checking",
    AccountKind.MONEY_MARKET: "Money Market",
}


def owner_names(directory: Directory, account: Account) -> List[str]:
    """Names of an account's owners; IDs missing from the directory are marked unknown"""
    names = []
    for owner_id in account.owner_ids:
        owner = directory.find_owner(owner_id)
        names.append(owner.full_name if owner else f"unknown owner {owner_id}")
    return names


def account_summary(directory: Directory, account: Account) -> str:
    """
    Multi-line summary of an account
    
    Example:
        Savings account 1212
        Balance: $12,356.67
        Opened: 1999-03-27T11:30:09-08:00
        Owners: Jane Doe
    """
    lines = [
        f"{KIND_TITLES[account.kind]} account {account.id}",
        f"Balance: {account.balance}",
        f"Opened: {account.created_at.isoformat()}",
    ]
    
    if account.kind == AccountKind.CHECKING:
        lines.append(f"Free checks remaining: {account.free_checks_remaining}")
    elif account.kind == AccountKind.MONEY_MARKET:
        lines.append(f"Transactions remaining: {account.transactions_remaining}")
        if account.is_frozen:
            lines.append("Status: frozen below minimum balance")
    
    names = owner_names(directory, account)
    lines.append(f"Owners: {', '.join(names)}" if names else "Owners: none")
    return "\n".join(lines)


def owner_summary(owner: Owner) -> str:
    """Owner ID, name, address and account IDs"""
    lines = [f"{owner.id}: {owner.full_name}"]
    lines.extend(owner.address.lines())
    if owner.account_ids:
        lines.append("Accounts: " + ", ".join(str(account_id) for account_id in owner.account_ids))
    else:
        lines.append("Accounts: none")
    return "\n".join(lines)
