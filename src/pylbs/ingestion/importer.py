"""Bulk dataset import into a tower store.

A run moves through these phases::

    READING (header) -> READING (rows) -> [PURGING] -> COMMITTING -> DONE

Accepted rows are spooled to a temporary file while the dataset is read.
The spool is replayed into the store in unordered batches only after the
reader has reached the end of the dataset cleanly, so a dataset that
cannot be read to the end never touches the store.  Full imports delete
the whole collection once, right before the first batch is committed.
Incremental (``diff``) imports only upsert.
"""

from __future__ import annotations

import csv
import logging
import tempfile
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path
from typing import TextIO

import aiohttp

from pylbs._constants import DEFAULT_BATCH_SIZE, DEFAULT_PROGRESS_EVERY, INCREMENTAL_MARKER
from pylbs.exceptions import DatasetAccessError, LbsConfigError, RowParseError
from pylbs.ingestion.download import dataset_name, download_dataset, is_url
from pylbs.ingestion.rows import MIN_COLUMNS, iter_rows, open_dataset, parse_row
from pylbs.models.imports import ImportFilters, ImportResult
from pylbs.models.tower import BulkWriteResult, TowerKey, TowerRecord
from pylbs.store.base import TowerStore

_logger = logging.getLogger(__name__)


class ImportPhase(StrEnum):
    READING = "reading"
    PURGING = "purging"
    COMMITTING = "committing"
    DONE = "done"


@dataclass(slots=True)
class ImportProgress:
    """Snapshot passed to progress callbacks."""

    phase: ImportPhase
    rows: int
    accepted: int
    skipped: int


def is_incremental_source(source: str | Path) -> bool:
    """Whether the dataset name marks it as a differential export."""
    return INCREMENTAL_MARKER in dataset_name(source).lower()


class _Spool:
    """Accepted upserts parked on disk until the dataset is fully read."""

    def __init__(self, fh: TextIO) -> None:
        self._fh = fh
        self._writer = csv.writer(fh)

    def add(self, key: TowerKey, record: TowerRecord) -> None:
        self._writer.writerow((*key.as_tuple(), record.lon, record.lat, record.range))

    def batches(self, size: int) -> Iterator[list[tuple[TowerKey, TowerRecord]]]:
        self._fh.flush()
        self._fh.seek(0)
        batch: list[tuple[TowerKey, TowerRecord]] = []
        for radio, mcc, mnc, lac, cell, lon, lat, accuracy in csv.reader(self._fh):
            key = TowerKey(radio=radio, mcc=int(mcc), mnc=int(mnc), lac=int(lac), cell=int(cell))
            batch.append((key, TowerRecord(lon=float(lon), lat=float(lat), range=float(accuracy))))
            if len(batch) >= size:
                yield batch
                batch = []
        if batch:
            yield batch


@dataclass(slots=True)
class _Run:
    source: str
    incremental: bool
    rows: int = 0
    accepted: int = 0
    filtered: int = 0
    malformed: int = 0
    deleted: int = 0
    purged: bool = False
    written: BulkWriteResult = field(default_factory=BulkWriteResult)

    @property
    def skipped(self) -> int:
        return self.filtered + self.malformed

    def result(self, total: int | None) -> ImportResult:
        return ImportResult(
            source=self.source,
            incremental=self.incremental,
            rows=self.rows,
            accepted=self.accepted,
            filtered=self.filtered,
            malformed=self.malformed,
            deleted=self.deleted,
            inserted=self.written.inserted,
            modified=self.written.modified,
            failed=self.written.failed,
            total=total,
        )


class Importer:
    """Populate or refresh a :class:`TowerStore` from a cell CSV dataset.

    At most one import should run against a collection at a time; callers
    enforce this.
    """

    def __init__(
        self,
        store: TowerStore,
        *,
        batch_size: int = DEFAULT_BATCH_SIZE,
        progress_every: int = DEFAULT_PROGRESS_EVERY,
        on_progress: Callable[[ImportProgress], None] | None = None,
        http_session: aiohttp.ClientSession | None = None,
        download_timeout: float = 0,
    ) -> None:
        if batch_size < 1:
            raise LbsConfigError(f"batch_size must be >= 1, got {batch_size}")
        self._store = store
        self._batch_size = batch_size
        self._progress_every = max(1, progress_every)
        self._on_progress = on_progress
        self._http_session = http_session
        self._download_timeout = download_timeout

    async def run(
        self,
        source: str | Path,
        *,
        filters: ImportFilters | None = None,
        incremental: bool | None = None,
    ) -> ImportResult:
        """Import *source* (a local path or an ``http(s)`` URL).

        Parameters
        ----------
        filters
            Row filters; ``None`` admits every row.
        incremental
            Force incremental (``True``) or full (``False``) mode.  By
            default the mode follows the dataset name: names containing
            ``diff`` are incremental.

        Raises
        ------
        DatasetAccessError
            The dataset cannot be downloaded, opened or read to the end.
            The store is left as it was.
        StoreAccessError
            A store operation failed.
        """
        if incremental is None:
            incremental = is_incremental_source(source)
        filters = filters or ImportFilters()

        if is_url(source):
            async with download_dataset(
                str(source),
                http_session=self._http_session,
                timeout=self._download_timeout,
            ) as path:
                return await self._import_file(path, label=str(source), filters=filters, incremental=incremental)
        return await self._import_file(Path(source), label=str(source), filters=filters, incremental=incremental)

    async def _import_file(
        self,
        path: Path,
        *,
        label: str,
        filters: ImportFilters,
        incremental: bool,
    ) -> ImportResult:
        run = _Run(source=label, incremental=incremental)
        if filters.active:
            _logger.info(
                "Filters country - %s, radio - %s, min samples - %d",
                ", ".join(str(c) for c in sorted(filters.countries)) or "any",
                ", ".join(sorted(filters.radios)) or "any",
                filters.min_samples,
            )

        with tempfile.TemporaryFile(mode="w+", encoding="utf-8", newline="", prefix="pylbs-") as spool_file:
            spool = _Spool(spool_file)

            _logger.info("Reading data from CSV %r...", label)
            with open_dataset(path) as stream:
                rows = iter_rows(stream, source=label)
                header = next(rows, None)
                if header is None:
                    _logger.info("Dataset %r is empty", label)
                    return run.result(None)
                columns = len(header[1])
                if columns < MIN_COLUMNS:
                    raise DatasetAccessError(
                        f"Dataset {label} has {columns} columns, expected at least {MIN_COLUMNS}",
                        source=label,
                    )

                await self._store.ensure_index()
                for line, fields in rows:
                    run.rows += 1
                    if run.rows % self._progress_every == 0:
                        self._report(ImportPhase.READING, run)
                    try:
                        parsed = parse_row(line, fields, filters, columns=columns)
                    except RowParseError as exc:
                        _logger.warning("%s", exc)
                        run.malformed += 1
                        continue
                    if parsed is None:
                        run.filtered += 1
                        continue
                    spool.add(*parsed)
                    run.accepted += 1

            _logger.debug("Read %d rows, %d accepted", run.rows, run.accepted)
            for batch in spool.batches(self._batch_size):
                await self._commit(batch, run)
        self._report(ImportPhase.DONE, run)

        if run.accepted == 0:
            _logger.info("No record for import (%d rows skipped)", run.skipped)
            return run.result(None)

        if run.written.modified:
            _logger.info("Modified %d records", run.written.modified)
        total = await self._store.count()
        _logger.info(
            "Imported %d records (%d skipped); total unique records in DB: %d",
            run.accepted,
            run.skipped,
            total,
        )
        return run.result(total)

    async def _commit(self, batch: list[tuple[TowerKey, TowerRecord]], run: _Run) -> None:
        if not run.incremental and not run.purged:
            self._report(ImportPhase.PURGING, run)
            _logger.info("Deleting old data...")
            run.deleted = await self._store.delete_all()
            run.purged = True
            if run.deleted:
                _logger.info("Deleted %d records", run.deleted)

        self._report(ImportPhase.COMMITTING, run)
        _logger.debug("Bulk importing %d records", len(batch))
        result = await self._store.bulk_upsert(batch)
        if result.failed:
            _logger.warning("%d records failed to import", result.failed)
        run.written = run.written + result

    def _report(self, phase: ImportPhase, run: _Run) -> None:
        if self._on_progress is None:
            return
        self._on_progress(ImportProgress(phase=phase, rows=run.rows, accepted=run.accepted, skipped=run.skipped))
