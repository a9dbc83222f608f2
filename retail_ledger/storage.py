"""
Storage Backend Module

Table storage behind the audit trail. A table maps record IDs to
JSON-compatible dictionaries; the in-memory backend copies rows on the way
in and out so callers never hold a reference to a stored row.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Any
from datetime import datetime
import json
import threading
from dataclasses import dataclass, asdict


Row = Dict[str, Any]


@dataclass
class StorageRecord:
    """Common fields of every persisted record"""
    id: str
    created_at: datetime
    
    def to_dict(self) -> Row:
        row = asdict(self)
        row['created_at'] = self.created_at.isoformat()
        return row


class StorageInterface(ABC):
    """
    Table-oriented backend contract
    
    Rows passed to save() must be JSON-compatible; rows handed back are
    independent copies.
    """
    
    @abstractmethod
    def save(self, table: str, record_id: str, data: Row) -> None:
        """Insert or replace the row stored under record_id"""
    
    @abstractmethod
    def load(self, table: str, record_id: str) -> Optional[Row]:
        """Row stored under record_id, or None"""
    
    @abstractmethod
    def load_all(self, table: str) -> List[Row]:
        """Every row of the table in insertion order"""
    
    @abstractmethod
    def find(self, table: str, filters: Row) -> List[Row]:
        """Rows whose fields equal every value in filters"""
    
    @abstractmethod
    def count(self, table: str) -> int:
        ...
    
    @abstractmethod
    def clear_table(self, table: str) -> None:
        ...


class InMemoryStorage(StorageInterface):
    """Dictionary-backed storage for a single process"""
    
    def __init__(self):
        self._tables: Dict[str, Dict[str, Row]] = {}
        self._lock = threading.RLock()
    
    def _rows(self, table: str) -> Dict[str, Row]:
        return self._tables.setdefault(table, {})
    
    @staticmethod
    def _copy(row: Row) -> Row:
        return json.loads(json.dumps(row, default=str))
    
    def save(self, table: str, record_id: str, data: Row) -> None:
        with self._lock:
            self._rows(table)[record_id] = self._copy(data)
    
    def load(self, table: str, record_id: str) -> Optional[Row]:
        with self._lock:
            row = self._rows(table).get(record_id)
            return None if row is None else self._copy(row)
    
    def load_all(self, table: str) -> List[Row]:
        with self._lock:
            return [self._copy(row) for row in self._rows(table).values()]
    
    def find(self, table: str, filters: Row) -> List[Row]:
        with self._lock:
            matches = []
            for row in self._rows(table).values():
                if all(row.get(key, object()) == value for key, value in filters.items()):
                    matches.append(self._copy(row))
            return matches
    
    def count(self, table: str) -> int:
        with self._lock:
            return len(self._rows(table))
    
    def clear_table(self, table: str) -> None:
        with self._lock:
            self._tables.pop(table, None)
