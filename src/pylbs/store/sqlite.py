"""SQLite-backed tower store.

One table per collection with a unique index over the five key columns::

    radio | mcc | mnc | lac | cell | lon | lat | accuracy

Every operation opens its own connection in a worker thread and closes it
on every exit path, so concurrent lookups never share a connection.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import sqlite3
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import TypeVar

from pylbs._constants import COLLECTION_NAME
from pylbs.config import LbsConfig, validate_collection_name
from pylbs.exceptions import StoreAccessError
from pylbs.models.tower import BulkWriteResult, TowerKey, TowerQuery, TowerRecord

_logger = logging.getLogger(__name__)

T = TypeVar("T")

_KEY_COLUMNS = ("radio", "mcc", "mnc", "lac", "cell")

# Pairs per lookup statement; keeps bound parameters under SQLite's limit.
_FIND_CHUNK = 400


class SqliteTowerStore:
    """Tower store on a SQLite database file."""

    def __init__(
        self,
        database: str | Path,
        *,
        collection: str = COLLECTION_NAME,
        timeout: float = 30.0,
    ) -> None:
        self._database = str(database)
        self._table = validate_collection_name(collection)
        self._timeout = timeout

    @classmethod
    def from_config(cls, config: LbsConfig) -> SqliteTowerStore:
        return cls(config.database, collection=config.collection)

    @property
    def collection(self) -> str:
        return self._table

    # ------------------------------------------------------------------
    # Connection handling
    # ------------------------------------------------------------------

    def _run(self, operation: str, fn: Callable[[sqlite3.Connection], T]) -> T:
        try:
            with contextlib.closing(sqlite3.connect(self._database, timeout=self._timeout)) as conn:
                with conn:
                    return fn(conn)
        except sqlite3.Error as exc:
            raise StoreAccessError(
                f"{operation} on {self._database}:{self._table} failed: {exc}",
                operation=operation,
            ) from exc

    async def _call(self, operation: str, fn: Callable[[sqlite3.Connection], T]) -> T:
        _logger.debug("%s %s:%s", operation, self._database, self._table)
        return await asyncio.to_thread(self._run, operation, fn)

    # ------------------------------------------------------------------
    # TowerStore
    # ------------------------------------------------------------------

    async def ensure_index(self) -> None:
        table = self._table

        def _ensure(conn: sqlite3.Connection) -> None:
            conn.execute(
                f"""CREATE TABLE IF NOT EXISTS {table} (
                        radio TEXT NOT NULL,
                        mcc INTEGER NOT NULL,
                        mnc INTEGER NOT NULL,
                        lac INTEGER NOT NULL,
                        cell INTEGER NOT NULL,
                        lon REAL NOT NULL,
                        lat REAL NOT NULL,
                        accuracy REAL NOT NULL
                    )"""
            )
            conn.execute(
                f"CREATE UNIQUE INDEX IF NOT EXISTS {table}_key ON {table} ({', '.join(_KEY_COLUMNS)})"
            )

        await self._call("ensure_index", _ensure)

    async def find(self, query: TowerQuery) -> list[TowerRecord]:
        if not query.cells:
            return []
        pairs = sorted(query.cells)
        table = self._table

        def _find(conn: sqlite3.Connection) -> list[tuple[float, float, float]]:
            rows: list[tuple[float, float, float]] = []
            for start in range(0, len(pairs), _FIND_CHUNK):
                chunk = pairs[start : start + _FIND_CHUNK]
                values = ", ".join("(?, ?)" for _ in chunk)
                sql = (
                    f"SELECT lon, lat, accuracy FROM {table} "
                    f"WHERE radio = ? AND mcc = ? AND mnc = ? AND (lac, cell) IN (VALUES {values})"
                )
                params: list[object] = [query.radio, query.mcc, query.mnc]
                for lac, cell in chunk:
                    params.extend((lac, cell))
                rows.extend(conn.execute(sql, params).fetchall())
            return rows

        rows = await self._call("find", _find)
        return [TowerRecord(lon=lon, lat=lat, range=accuracy) for lon, lat, accuracy in rows]

    async def bulk_upsert(self, items: Sequence[tuple[TowerKey, TowerRecord]]) -> BulkWriteResult:
        if not items:
            return BulkWriteResult()
        table = self._table
        sql = f"""INSERT INTO {table} (radio, mcc, mnc, lac, cell, lon, lat, accuracy)
                  VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                  ON CONFLICT ({', '.join(_KEY_COLUMNS)}) DO UPDATE SET
                      lon = excluded.lon, lat = excluded.lat, accuracy = excluded.accuracy
                  WHERE lon != excluded.lon OR lat != excluded.lat OR accuracy != excluded.accuracy"""
        params = [(*key.as_tuple(), record.lon, record.lat, record.range) for key, record in items]

        def _upsert(conn: sqlite3.Connection) -> BulkWriteResult:
            before = conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]
            changed = conn.executemany(sql, params).rowcount
            after = conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]
            inserted = after - before
            return BulkWriteResult(inserted=inserted, modified=max(0, changed - inserted))

        return await self._call("bulk_upsert", _upsert)

    async def delete_all(self) -> int:
        table = self._table

        def _delete(conn: sqlite3.Connection) -> int:
            return conn.execute(f"DELETE FROM {table}").rowcount

        return await self._call("delete_all", _delete)

    async def count(self) -> int:
        table = self._table

        def _count(conn: sqlite3.Connection) -> int:
            return int(conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0])

        return await self._call("count", _count)
