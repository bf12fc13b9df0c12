"""Import cell tower datasets into a pylbs database.

Usage
-----
::

    pylbs-import [--database lbs.sqlite] [--radio gsm,lte] [--country 250,255]
                 [--min-samples N] [--incremental | --full] DATASET

DATASET is a path or URL of an OpenCellID / Mozilla Location Service cell
export (``.csv`` or ``.csv.gz``).  Importing takes a while, so for debugging
the filters can restrict the database to a few radio types and countries.

When the dataset name contains ``diff`` only new and changed towers are
upserted; otherwise the collection is emptied first and replaced with the
dataset's contents.  ``--incremental`` / ``--full`` override the name.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from collections.abc import Sequence
from typing import TextIO

from pydantic import ValidationError

from pylbs.client import LbsClient
from pylbs.config import LbsConfig
from pylbs.exceptions import LbsError
from pylbs.ingestion.importer import ImportPhase, ImportProgress
from pylbs.models.imports import ImportFilters

_logger = logging.getLogger("pylbs.import")


def _build_parser(defaults: LbsConfig) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pylbs-import",
        description="Import LBS database data",
    )
    parser.add_argument("dataset", help="CSV dataset path or http(s) URL")
    parser.add_argument("--database", default=defaults.database, help="SQLite database path (default: %(default)s)")
    parser.add_argument("--collection", default=defaults.collection, help="collection/table name (default: %(default)s)")
    parser.add_argument("--radio", default="", help="filter for radio (comma separated)")
    parser.add_argument("--country", default="", help="filter for country (comma separated)")
    parser.add_argument("--min-samples", type=int, default=0, help="filter for min samples count")
    parser.add_argument("--batch-size", type=int, default=defaults.batch_size, help="upserts per bulk write")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--incremental", dest="incremental", action="store_true", default=None, help="never delete old data")
    mode.add_argument("--full", dest="incremental", action="store_false", help="replace all existing data")
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    return parser


class _ProgressPrinter:
    """Render import progress on a single stderr line."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream if stream is not None else sys.stderr
        self._dirty = False

    def __call__(self, progress: ImportProgress) -> None:
        if progress.phase == ImportPhase.DONE:
            if self._dirty:
                print(file=self._stream)
                self._dirty = False
            return
        if progress.phase != ImportPhase.READING:
            return
        self._stream.write(f"\r* find {progress.accepted:8d} | skipped {progress.skipped:8d} records ")
        self._stream.flush()
        self._dirty = True


async def run_import(args: argparse.Namespace, config: LbsConfig) -> int:
    filters = ImportFilters.from_strings(radio=args.radio, country=args.country, min_samples=args.min_samples)
    _logger.info("Opening database %s (collection %s)...", config.database, config.collection)
    async with LbsClient(config, on_progress=_ProgressPrinter()) as client:
        result = await client.import_dataset(args.dataset, filters=filters, incremental=args.incremental)
    if result.total is None:
        _logger.info("Nothing imported from %s", result.source)
    else:
        _logger.info(
            "Done: %d accepted, %d filtered, %d malformed, %d inserted, %d modified, %d total",
            result.accepted,
            result.filtered,
            result.malformed,
            result.inserted,
            result.modified,
            result.total,
        )
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    try:
        defaults = LbsConfig.from_env()
    except LbsError as exc:
        print(f"pylbs-import: {exc}", file=sys.stderr)
        return 1
    args = _build_parser(defaults).parse_args(argv)

    logging.basicConfig(
        stream=sys.stdout,
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(message)s",
        datefmt="%H:%M:%S",
    )

    try:
        config = LbsConfig.from_env(
            database=args.database,
            collection=args.collection,
            batch_size=args.batch_size,
        )
        return asyncio.run(run_import(args, config))
    except (LbsError, ValidationError) as exc:
        _logger.error("Import failed: %s", exc)
        return 1


if __name__ == "__main__":
    sys.exit(main())
