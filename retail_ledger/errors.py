"""
Ledger Exceptions

Hard failures of the ledger core. A declined withdrawal or deposit is NOT
an error: it comes back as a TransactionResult with ``approved=False``.
"""

from typing import Optional


class LedgerError(Exception):
    """Base class for all ledger errors"""


class InvalidAmount(LedgerError, ValueError):
    """Raised for a negative transaction amount or interest rate"""


class BelowMinimumBalance(LedgerError, ValueError):
    """Raised when an account is opened below its product minimum"""
    
    def __init__(self, kind: str, minimum: object, initial: object):
        self.kind = kind
        self.minimum = minimum
        self.initial = initial
        super().__init__(
            f"A {kind} account requires an opening balance of at least {minimum}, got {initial}"
        )


class DuplicateID(LedgerError, ValueError):
    """Raised when a second account or owner would share an existing ID"""
    
    def __init__(self, entity_type: str, entity_id: int):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"Duplicate {entity_type} ID {entity_id}")


class UnresolvedReference(LedgerError, LookupError):
    """Raised when an account or owner ID cannot be resolved"""
    
    def __init__(self, entity_type: str, entity_id: int, context: Optional[str] = None):
        self.entity_type = entity_type
        self.entity_id = entity_id
        message = f"No {entity_type} with ID {entity_id}"
        if context:
            message = f"{message} ({context})"
        super().__init__(message)


class UnsupportedOperation(LedgerError, TypeError):
    """Raised when an operation is not defined for the account kind"""


class InvalidRecord(LedgerError, ValueError):
    """Raised when a flat bootstrap record cannot be parsed"""
