"""Deterministic in-memory tower store."""

from __future__ import annotations

from collections.abc import Sequence

from pylbs.models.tower import BulkWriteResult, TowerKey, TowerQuery, TowerRecord


class MemoryTowerStore:
    """In-memory store keyed by :class:`TowerKey`.

    Given the same sequence of writes it produces the same contents; reads
    return records in insertion order of their keys.  Intended for tests and
    for embedding small datasets; use it from a single event loop.
    """

    def __init__(self) -> None:
        self._records: dict[TowerKey, TowerRecord] = {}

    async def ensure_index(self) -> None:
        return None

    async def find(self, query: TowerQuery) -> list[TowerRecord]:
        return [record for key, record in self._records.items() if query.matches(key)]

    async def bulk_upsert(self, items: Sequence[tuple[TowerKey, TowerRecord]]) -> BulkWriteResult:
        inserted = modified = 0
        for key, record in items:
            existing = self._records.get(key)
            if existing is None:
                inserted += 1
            elif existing != record:
                modified += 1
            self._records[key] = record
        return BulkWriteResult(inserted=inserted, modified=modified)

    async def delete_all(self) -> int:
        removed = len(self._records)
        self._records.clear()
        return removed

    async def count(self) -> int:
        return len(self._records)

    def snapshot(self) -> dict[TowerKey, TowerRecord]:
        """Return a copy of the stored records."""
        return dict(self._records)
