"""
Storage abstractions for encrypted transaction records.

This module provides:
- RecordStorage: Abstract interface for record storage backends
- InMemoryRecordStorage: In-memory implementation for tests and demos

The engine never touches storage; callers persist the records it returns.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from .models import SecureRecord


class RecordStorage(ABC):
    """
    Abstract storage interface for encrypted records.

    All methods are async so database-backed stores fit the same interface.
    """

    @abstractmethod
    async def save(self, record: SecureRecord) -> None:
        """Store a record, replacing any record with the same id."""
        ...

    @abstractmethod
    async def find_by_id(self, record_id: str) -> Optional[SecureRecord]:
        """Get a record by id."""
        ...

    @abstractmethod
    async def find_by_party_id(self, party_id: str) -> List[SecureRecord]:
        """Get all records for a party, newest first."""
        ...

    @abstractmethod
    async def list(self) -> List[SecureRecord]:
        """Get all records, newest first."""
        ...

    @abstractmethod
    async def delete(self, record_id: str) -> bool:
        """Delete a record. Returns False if it did not exist."""
        ...

    @abstractmethod
    async def count(self) -> int:
        ...

    @abstractmethod
    async def clear(self) -> None:
        ...


class InMemoryRecordStorage(RecordStorage):
    """
    In-memory record storage.

    Uses asyncio.Lock for safe concurrent access. Records are frozen
    dataclasses, so returned values cannot alter what is stored.
    """

    def __init__(self) -> None:
        self._records: Dict[str, SecureRecord] = {}
        self._lock = asyncio.Lock()

    async def save(self, record: SecureRecord) -> None:
        async with self._lock:
            self._records[record.id] = record

    async def find_by_id(self, record_id: str) -> Optional[SecureRecord]:
        async with self._lock:
            return self._records.get(record_id)

    async def find_by_party_id(self, party_id: str) -> List[SecureRecord]:
        async with self._lock:
            matches = [r for r in self._records.values() if r.party_id == party_id]
        return _newest_first(matches)

    async def list(self) -> List[SecureRecord]:
        async with self._lock:
            records = list(self._records.values())
        return _newest_first(records)

    async def delete(self, record_id: str) -> bool:
        async with self._lock:
            return self._records.pop(record_id, None) is not None

    async def count(self) -> int:
        async with self._lock:
            return len(self._records)

    async def clear(self) -> None:
        async with self._lock:
            self._records.clear()


def _newest_first(records: List[SecureRecord]) -> List[SecureRecord]:
    return sorted(records, key=lambda r: r.created_at, reverse=True)
