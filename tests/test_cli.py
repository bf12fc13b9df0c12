from __future__ import annotations

import io
import sqlite3
from contextlib import closing
from pathlib import Path

import pytest

from pylbs.cli import _ProgressPrinter, main
from pylbs.ingestion import ImportPhase, ImportProgress

HEADER = "radio,mcc,net,area,cell,unit,lon,lat,range,samples,changeable,created,updated,averageSignal"
ROWS = [
    "GSM,250,2,7743,22517,,37.6,55.7,50,10,1,1459692143,1459692143,0",
    "UMTS,250,2,7743,39696,,37.62,55.71,300,4,1,1459692143,1459692143,0",
    "LTE,255,1,10,20,,30.5,50.4,1000,12,1,1459692143,1459692143,0",
]


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in ("LBS_DATABASE", "LBS_COLLECTION", "LBS_BATCH_SIZE", "LBS_PROGRESS_EVERY"):
        monkeypatch.delenv(key, raising=False)


def _stored(database: Path) -> list[tuple[str, int, int]]:
    with closing(sqlite3.connect(database)) as conn:
        return sorted(conn.execute("SELECT radio, mcc, cell FROM lbs").fetchall())


def test_main_imports_dataset_with_filters(tmp_path: Path) -> None:
    dataset = tmp_path / "cell_towers.csv"
    dataset.write_text("\n".join([HEADER, *ROWS]) + "\n", encoding="utf-8")
    database = tmp_path / "lbs.sqlite"

    code = main([str(dataset), "--database", str(database), "--country", "250", "--radio", "gsm,umts"])

    assert code == 0
    assert _stored(database) == [("gsm", 250, 22517), ("umts", 250, 39696)]


def test_main_min_samples_filter(tmp_path: Path) -> None:
    dataset = tmp_path / "cell_towers.csv"
    dataset.write_text("\n".join([HEADER, *ROWS]) + "\n", encoding="utf-8")
    database = tmp_path / "lbs.sqlite"

    assert main([str(dataset), "--database", str(database), "--min-samples", "5"]) == 0
    assert [row[2] for row in _stored(database)] == [22517, 20]


def test_main_incremental_flag_keeps_old_rows(tmp_path: Path) -> None:
    database = tmp_path / "lbs.sqlite"
    first = tmp_path / "first.csv"
    first.write_text("\n".join([HEADER, ROWS[0]]) + "\n", encoding="utf-8")
    second = tmp_path / "second.csv"
    second.write_text("\n".join([HEADER, ROWS[2]]) + "\n", encoding="utf-8")

    assert main([str(first), "--database", str(database)]) == 0
    assert main([str(second), "--database", str(database), "--incremental"]) == 0
    assert len(_stored(database)) == 2

    assert main([str(second), "--database", str(database), "--full"]) == 0
    assert len(_stored(database)) == 1


def test_main_reports_failure(tmp_path: Path) -> None:
    assert main([str(tmp_path / "missing.csv"), "--database", str(tmp_path / "lbs.sqlite")]) == 1


def test_main_rejects_bad_collection(tmp_path: Path) -> None:
    dataset = tmp_path / "cell_towers.csv"
    dataset.write_text(HEADER + "\n", encoding="utf-8")

    assert main([str(dataset), "--database", str(tmp_path / "lbs.sqlite"), "--collection", "no-dashes"]) == 1


def test_progress_printer_rewrites_single_line() -> None:
    out = io.StringIO()
    printer = _ProgressPrinter(out)

    printer(ImportProgress(phase=ImportPhase.READING, rows=10, accepted=7, skipped=3))
    printer(ImportProgress(phase=ImportPhase.COMMITTING, rows=10, accepted=7, skipped=3))
    printer(ImportProgress(phase=ImportPhase.DONE, rows=12, accepted=9, skipped=3))

    assert out.getvalue() == "\r* find        7 | skipped        3 records \n"
