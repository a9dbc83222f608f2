"""
Audit Trail Module

Hash-chained audit log with SHA-256 for tamper detection. Every change to
an account or owner, and every declined request, is recorded here.
"""

import hashlib
import json
import threading
import uuid
from datetime import datetime, timezone
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional

from .currency import Money
from .storage import InMemoryStorage, StorageInterface, StorageRecord


class AuditEventType(Enum):
    """Types of audit events"""
    # Directory events
    ACCOUNT_OPENED = "account_opened"
    OWNER_REGISTERED = "owner_registered"
    OWNERSHIP_LINKED = "ownership_linked"
    
    # Transaction events
    DEPOSIT_POSTED = "deposit_posted"
    WITHDRAWAL_POSTED = "withdrawal_posted"
    CHECK_POSTED = "check_posted"
    TRANSACTION_DECLINED = "transaction_declined"
    
    # Account state events
    ACCOUNT_FROZEN = "account_frozen"
    ACCOUNT_UNFROZEN = "account_unfrozen"
    
    # Monthly cycle events
    INTEREST_POSTED = "interest_posted"
    CHECKS_RESET = "checks_reset"
    TRANSACTIONS_RESET = "transactions_reset"


def _convert_value(value: Any) -> Any:
    if isinstance(value, Money):
        return value.cents
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {str(k): _convert_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_convert_value(v) for v in value]
    return value


@dataclass
class AuditEvent(StorageRecord):
    """
    Immutable audit event with hash chaining for tamper detection
    """
    sequence: int           # Position in the chain, starting at 1
    event_type: AuditEventType
    entity_type: str        # "account" or "owner"
    entity_id: str
    previous_hash: str
    current_hash: str
    metadata: Dict[str, Any]
    
    def __post_init__(self):
        # Money is stored as integer cents, Decimal as string
        self.metadata = {k: _convert_value(v) for k, v in (self.metadata or {}).items()}
    
    def calculate_hash(self) -> str:
        """
        Calculate SHA-256 hash of this event
        Hash includes all fields except current_hash
        """
        hash_data = {
            'id': self.id,
            'sequence': self.sequence,
            'created_at': self.created_at.isoformat(),
            'event_type': self.event_type.value,
            'entity_type': self.entity_type,
            'entity_id': self.entity_id,
            'previous_hash': self.previous_hash,
            'metadata': self.metadata
        }
        json_data = json.dumps(hash_data, sort_keys=True, separators=(',', ':'))
        return hashlib.sha256(json_data.encode('utf-8')).hexdigest()
    
    def verify_hash(self) -> bool:
        return self.current_hash == self.calculate_hash()
    
    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        result['event_type'] = self.event_type.value
        return result
    
    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AuditEvent':
        data = dict(data)
        data['created_at'] = datetime.fromisoformat(data['created_at'])
        data['event_type'] = AuditEventType(data['event_type'])
        return cls(**data)


class AuditTrail:
    """
    Hash-chained audit trail
    """
    
    def __init__(self, storage: Optional[StorageInterface] = None, table_name: str = "audit_events"):
        self.storage = storage or InMemoryStorage()
        self.table_name = table_name
        self._lock = threading.Lock()
        self._last_hash = ""
        self._sequence = 0
        
        # Resume an existing chain
        events = self.get_all_events()
        if events:
            self._last_hash = events[-1].current_hash
            self._sequence = events[-1].sequence
    
    def log_event(
        self,
        event_type: AuditEventType,
        entity_type: str,
        entity_id: Any,
        metadata: Optional[Dict[str, Any]] = None
    ) -> AuditEvent:
        """
        Log an audit event with hash chaining
        
        Args:
            event_type: Type of audit event
            entity_type: Type of entity being audited
            entity_id: ID of the entity
            metadata: Additional event-specific data
            
        Returns:
            Created AuditEvent
        """
        with self._lock:
            self._sequence += 1
            event = AuditEvent(
                id=str(uuid.uuid4()),
                created_at=datetime.now(timezone.utc),
                sequence=self._sequence,
                event_type=event_type,
                entity_type=entity_type,
                entity_id=str(entity_id),
                previous_hash=self._last_hash,
                current_hash="",
                metadata=metadata or {}
            )
            event.current_hash = event.calculate_hash()
            
            self.storage.save(self.table_name, event.id, event.to_dict())
            self._last_hash = event.current_hash
            return event
    
    def _query(self, filters: Dict[str, Any]) -> List[AuditEvent]:
        rows = self.storage.find(self.table_name, filters) if filters else self.storage.load_all(self.table_name)
        return sorted((AuditEvent.from_dict(row) for row in rows), key=lambda e: e.sequence)
    
    def get_events_for_entity(self, entity_type: str, entity_id: Any) -> List[AuditEvent]:
        """All events for one entity, in chain order"""
        return self._query({'entity_type': entity_type, 'entity_id': str(entity_id)})
    
    def get_events_by_type(self, event_type: AuditEventType) -> List[AuditEvent]:
        return self._query({'event_type': event_type.value})
    
    def get_all_events(self) -> List[AuditEvent]:
        return self._query({})
    
    def count_events(self) -> int:
        return self.storage.count(self.table_name)
    
    def verify_integrity(self) -> Dict[str, Any]:
        """
        Verify the integrity of the entire audit chain
        
        Returns:
            Dictionary with integrity check results
        """
        result = {
            'valid': True,
            'total_events': 0,
            'hash_errors': [],
            'chain_breaks': []
        }
        
        events = self.get_all_events()
        result['total_events'] = len(events)
        
        previous_hash = ""
        for position, event in enumerate(events):
            if not event.verify_hash():
                result['valid'] = False
                result['hash_errors'].append({
                    'event_id': event.id,
                    'position': position,
                    'expected_hash': event.calculate_hash(),
                    'actual_hash': event.current_hash
                })
            if event.previous_hash != previous_hash:
                result['valid'] = False
                result['chain_breaks'].append({
                    'event_id': event.id,
                    'position': position,
                    'expected_previous_hash': previous_hash,
                    'actual_previous_hash': event.previous_hash
                })
            previous_hash = event.current_hash
        
        return result
