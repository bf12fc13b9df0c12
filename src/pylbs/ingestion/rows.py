"""Dataset row decoding.

Rows follow the OpenCellID / Mozilla Location Service cell export layout::

    radio,mcc,net,area,cell,unit,lon,lat,range,samples,changeable,created,updated,averageSignal

Only columns 0-4 and 6-9 are used.
"""

from __future__ import annotations

import contextlib
import csv
import gzip
import io
import zlib
from collections.abc import Iterator
from pathlib import Path
from typing import TextIO

from pylbs._constants import (
    COL_CELL,
    COL_LAC,
    COL_LAT,
    COL_LON,
    COL_MCC,
    COL_MNC,
    COL_RADIO,
    COL_RANGE,
    COL_SAMPLES,
    INT32_MAX,
    UINT16_MAX,
    UINT32_MAX,
)
from pylbs.exceptions import DatasetAccessError, RowParseError
from pylbs.ingestion.normalize import normalize_radio_field, parse_finite_float, parse_int, parse_uint
from pylbs.models.imports import ImportFilters
from pylbs.models.tower import TowerKey, TowerRecord

_GZIP_MAGIC = b"\x1f\x8b"

#: Minimum column count a dataset must have to carry every used field.
MIN_COLUMNS = COL_SAMPLES + 1


@contextlib.contextmanager
def open_dataset(path: str | Path) -> Iterator[TextIO]:
    """Open a plain or gzip-compressed CSV dataset as text.

    Compression is detected from the file's magic bytes, not its name.
    Bytes that are not valid UTF-8 decode to U+FFFD, so they only matter
    when they land in a parsed column.
    """
    with contextlib.ExitStack() as stack:
        try:
            raw = stack.enter_context(open(path, "rb"))  # noqa: SIM115
            magic = raw.peek(len(_GZIP_MAGIC))[: len(_GZIP_MAGIC)]
        except OSError as exc:
            raise DatasetAccessError(f"Cannot open dataset {path}: {exc}", source=str(path)) from exc
        binary = gzip.GzipFile(fileobj=raw, mode="rb") if magic == _GZIP_MAGIC else raw
        yield stack.enter_context(io.TextIOWrapper(binary, encoding="utf-8", errors="replace", newline=""))


def iter_rows(stream: TextIO, *, source: str = "") -> Iterator[tuple[int, list[str]]]:
    """Lazily yield ``(line, fields)`` for every CSV record, header included.

    ``line`` is the 1-based record number.  The sequence is finite and
    cannot be restarted.  Read or decompression failures are fatal and raise
    :class:`DatasetAccessError`.
    """
    reader = csv.reader(stream)
    line = 0
    while True:
        try:
            fields = next(reader)
        except StopIteration:
            return
        except (csv.Error, OSError, EOFError, zlib.error) as exc:
            raise DatasetAccessError(
                f"Error reading dataset {source} after record {line}: {exc}",
                source=source,
            ) from exc
        line += 1
        yield line, fields


def parse_row(
    line: int,
    fields: list[str],
    filters: ImportFilters,
    *,
    columns: int,
) -> tuple[TowerKey, TowerRecord] | None:
    """Decode one data row into an upsert.

    Returns ``None`` when a filter rejects the row and raises
    :class:`RowParseError` when a field cannot be parsed.  Filters are
    checked as early as possible so rejected rows are not fully parsed.
    """
    if len(fields) != columns:
        raise RowParseError(line, "columns", str(len(fields)))

    radio = normalize_radio_field(line, fields[COL_RADIO])
    if not filters.admits_radio(radio):
        return None
    samples = parse_int(line, "samples", fields[COL_SAMPLES], INT32_MAX)
    if not filters.admits_samples(samples):
        return None
    mcc = parse_uint(line, "mcc", fields[COL_MCC], UINT16_MAX)
    if not filters.admits_country(mcc):
        return None
    mnc = parse_uint(line, "mnc", fields[COL_MNC], UINT16_MAX)
    lac = parse_uint(line, "area", fields[COL_LAC], UINT16_MAX)
    cell = parse_uint(line, "cell", fields[COL_CELL], UINT32_MAX)
    lon = parse_finite_float(line, "longitude", fields[COL_LON])
    lat = parse_finite_float(line, "latitude", fields[COL_LAT])
    accuracy = parse_finite_float(line, "range", fields[COL_RANGE], non_negative=True)

    key = TowerKey(radio=radio, mcc=mcc, mnc=mnc, lac=lac, cell=cell)
    record = TowerRecord(lon=lon, lat=lat, range=accuracy)
    return key, record
