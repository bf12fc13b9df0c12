from __future__ import annotations

import gzip
from pathlib import Path

import pytest

from pylbs.exceptions import DatasetAccessError, RowParseError
from pylbs.ingestion.rows import iter_rows, open_dataset, parse_row
from pylbs.models import ImportFilters, TowerKey, TowerRecord

HEADER = "radio,mcc,net,area,cell,unit,lon,lat,range,samples,changeable,created,updated,averageSignal"
COLUMNS = len(HEADER.split(","))


def _fields(
    radio: str = "GSM",
    mcc: str = "250",
    mnc: str = "2",
    lac: str = "7743",
    cell: str = "22517",
    lon: str = "37.6",
    lat: str = "55.7",
    rng: str = "50",
    samples: str = "10",
) -> list[str]:
    return [radio, mcc, mnc, lac, cell, "", lon, lat, rng, samples, "1", "1459692143", "1459692143", "0"]


def test_parse_row_builds_key_and_record() -> None:
    parsed = parse_row(2, _fields(), ImportFilters(), columns=COLUMNS)

    assert parsed == (
        TowerKey(radio="gsm", mcc=250, mnc=2, lac=7743, cell=22517),
        TowerRecord(lon=37.6, lat=55.7, range=50.0),
    )


def test_parse_row_applies_filters() -> None:
    assert parse_row(2, _fields(samples="3"), ImportFilters(min_samples=5), columns=COLUMNS) is None
    assert parse_row(2, _fields(radio="gsm"), ImportFilters(radios={"lte"}), columns=COLUMNS) is None
    assert parse_row(2, _fields(mcc="255"), ImportFilters(countries={250}), columns=COLUMNS) is None
    assert parse_row(2, _fields(radio="LTE"), ImportFilters(radios={"LTE"}), columns=COLUMNS) is not None


def test_filtered_rows_are_not_fully_parsed() -> None:
    # A bad longitude does not matter when the radio filter rejects the row first.
    assert parse_row(2, _fields(radio="cdma", lon="x"), ImportFilters(radios={"gsm"}), columns=COLUMNS) is None


@pytest.mark.parametrize(
    ("overrides", "field"),
    [
        ({"samples": "many"}, "samples"),
        ({"mcc": "-1"}, "mcc"),
        ({"mnc": "65536"}, "mnc"),
        ({"lac": "0x10"}, "area"),
        ({"cell": "4294967296"}, "cell"),
        ({"lon": "east"}, "longitude"),
        ({"lat": "nan"}, "latitude"),
        ({"rng": "-5"}, "range"),
        ({"radio": ""}, "radio"),
    ],
)
def test_parse_row_reports_bad_field(overrides: dict[str, str], field: str) -> None:
    with pytest.raises(RowParseError) as excinfo:
        parse_row(7, _fields(**overrides), ImportFilters(), columns=COLUMNS)

    assert excinfo.value.line == 7
    assert excinfo.value.field == field
    assert str(excinfo.value).startswith(f"[7] bad {field}")


def test_parse_row_rejects_wrong_column_count() -> None:
    with pytest.raises(RowParseError) as excinfo:
        parse_row(3, _fields()[:10], ImportFilters(), columns=COLUMNS)
    assert excinfo.value.field == "columns"


def test_open_dataset_reads_plain_and_gzip(tmp_path: Path) -> None:
    body = f"{HEADER}\n{','.join(_fields())}\n"
    plain = tmp_path / "cells.csv"
    plain.write_text(body, encoding="utf-8")
    packed = tmp_path / "cells-no-suffix"
    packed.write_bytes(gzip.compress(body.encode("utf-8")))

    for path in (plain, packed):
        with open_dataset(path) as stream:
            rows = list(iter_rows(stream, source=str(path)))
        assert [line for line, _ in rows] == [1, 2]
        assert rows[0][1] == HEADER.split(",")
        assert rows[1][1] == _fields()


def test_open_dataset_missing_file(tmp_path: Path) -> None:
    with pytest.raises(DatasetAccessError) as excinfo:
        with open_dataset(tmp_path / "missing.csv"):
            pass
    assert "missing.csv" in excinfo.value.source


def test_truncated_gzip_is_fatal(tmp_path: Path) -> None:
    body = (f"{HEADER}\n" + f"{','.join(_fields())}\n" * 2000).encode("utf-8")
    path = tmp_path / "cells.csv.gz"
    path.write_bytes(gzip.compress(body)[:-40])

    with pytest.raises(DatasetAccessError):
        with open_dataset(path) as stream:
            for _ in iter_rows(stream, source=str(path)):
                pass
