"""Structural store interface used by the locator and the importer."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from pylbs.models.tower import BulkWriteResult, TowerKey, TowerQuery, TowerRecord


class TowerStore(Protocol):
    """Persistent owner of tower records.

    Implemented by :class:`SqliteTowerStore` and :class:`MemoryTowerStore`;
    test doubles only need the same five coroutines.  Implementations give
    read-your-writes consistency within one process and must not hold
    mutable state shared between concurrent calls.
    """

    async def ensure_index(self) -> None:
        """Create the collection and its unique five-field key index."""
        ...

    async def find(self, query: TowerQuery) -> list[TowerRecord]:
        """Return point and accuracy of every record matching *query*."""
        ...

    async def bulk_upsert(self, items: Sequence[tuple[TowerKey, TowerRecord]]) -> BulkWriteResult:
        """Insert or overwrite records by key, in no guaranteed order."""
        ...

    async def delete_all(self) -> int:
        """Remove every record of the collection; return how many were removed."""
        ...

    async def count(self) -> int:
        ...
