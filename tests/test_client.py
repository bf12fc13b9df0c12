from __future__ import annotations

import gzip
from pathlib import Path

import aiohttp
import pytest
from aiohttp import test_utils, web

from pylbs.client import LbsClient
from pylbs.config import LbsConfig
from pylbs.exceptions import DatasetAccessError, LbsError, NotFoundError
from pylbs.ingestion import ImportPhase, ImportProgress
from pylbs.models import GeolocationRequest, ImportFilters
from pylbs.store import MemoryTowerStore, SqliteTowerStore

HEADER = "radio,mcc,net,area,cell,unit,lon,lat,range,samples,changeable,created,updated,averageSignal"
ROWS = [
    "GSM,250,2,7743,22517,,37.6,55.7,50,10,1,1459692143,1459692143,0",
    "GSM,250,2,7743,39696,,37.62,55.71,300,4,1,1459692143,1459692143,0",
    "LTE,255,1,10,20,,30.5,50.4,1000,12,1,1459692143,1459692143,0",
]
BODY = "\n".join([HEADER, *ROWS]) + "\n"

REQUEST = {
    "radioType": "gsm",
    "cellTowers": [
        {"mobileCountryCode": 250, "mobileNetworkCode": 2, "locationAreaCode": 7743, "cellId": 22517},
        {"mobileCountryCode": 250, "mobileNetworkCode": 2, "locationAreaCode": 7743, "cellId": 39696},
    ],
}


def _config(tmp_path: Path, **overrides: object) -> LbsConfig:
    return LbsConfig(database=str(tmp_path / "lbs.sqlite"), **overrides)  # type: ignore[arg-type]


def _dataset_app() -> web.Application:
    async def _plain(_request: web.Request) -> web.Response:
        return web.Response(body=BODY.encode("utf-8"), content_type="text/csv")

    async def _packed(_request: web.Request) -> web.Response:
        return web.Response(body=gzip.compress(BODY.encode("utf-8")), content_type="application/gzip")

    app = web.Application()
    app.router.add_get("/exports/cell_towers.csv", _plain)
    app.router.add_get("/exports/MLS-diff-cell-export.csv.gz", _packed)
    return app


@pytest.mark.asyncio
async def test_import_then_locate_with_sqlite(tmp_path: Path) -> None:
    path = tmp_path / "cell_towers.csv"
    path.write_text(BODY, encoding="utf-8")

    async with LbsClient(_config(tmp_path)) as client:
        result = await client.import_dataset(path)
        response = await client.get(REQUEST)
        cells = await client.get_cells(GeolocationRequest.model_validate(REQUEST))
        records = await client.records()

    assert result.accepted == 3
    assert result.total == 3
    assert records == 3
    assert len(cells) == 2
    assert response.longitude == pytest.approx(37.61)
    assert response.latitude == pytest.approx(55.705)
    assert response.accuracy > 300.0


@pytest.mark.asyncio
async def test_filters_passed_through(tmp_path: Path) -> None:
    path = tmp_path / "cell_towers.csv"
    path.write_text(BODY, encoding="utf-8")

    async with LbsClient(_config(tmp_path)) as client:
        result = await client.import_dataset(path, filters=ImportFilters(countries={250}, min_samples=5))
        response = await client.get(REQUEST)

    assert result.accepted == 1
    assert result.filtered == 2
    assert (response.longitude, response.latitude, response.accuracy) == (37.6, 55.7, 50.0)


@pytest.mark.asyncio
async def test_configured_default_radio_type_used(tmp_path: Path) -> None:
    path = tmp_path / "cell_towers.csv"
    path.write_text(BODY, encoding="utf-8")
    request = {"cellTowers": [{"mobileCountryCode": 255, "mobileNetworkCode": 1, "locationAreaCode": 10, "cellId": 20}]}

    async with LbsClient(_config(tmp_path)) as client:
        await client.import_dataset(path)
        with pytest.raises(NotFoundError):
            await client.get(request)

    async with LbsClient(_config(tmp_path, default_radio_type="LTE")) as client:
        response = await client.get(request)

    assert response.accuracy == 1000.0


@pytest.mark.asyncio
async def test_client_requires_context_manager() -> None:
    client = LbsClient(store=MemoryTowerStore())

    with pytest.raises(LbsError, match="not initialized"):
        await client.get(REQUEST)
    with pytest.raises(LbsError):
        await client.import_dataset("cell_towers.csv")


def test_client_builds_sqlite_store_from_config(tmp_path: Path) -> None:
    client = LbsClient(_config(tmp_path, collection="towers"))

    assert isinstance(client.store, SqliteTowerStore)
    assert client.store.collection == "towers"


@pytest.mark.asyncio
async def test_import_from_url(tmp_path: Path) -> None:
    phases: list[ImportPhase] = []

    def _on_progress(progress: ImportProgress) -> None:
        phases.append(progress.phase)

    async with test_utils.TestServer(_dataset_app()) as server:
        url = str(server.make_url("/exports/cell_towers.csv"))
        async with LbsClient(_config(tmp_path), on_progress=_on_progress) as client:
            result = await client.import_dataset(url)
            response = await client.get(REQUEST)

    assert result.source == url
    assert not result.incremental
    assert result.total == 3
    assert phases[-1] == ImportPhase.DONE
    assert response.accuracy > 300.0


@pytest.mark.asyncio
async def test_import_gzip_diff_from_url_with_shared_session(tmp_path: Path) -> None:
    store = MemoryTowerStore()

    async with test_utils.TestServer(_dataset_app()) as server, aiohttp.ClientSession() as session:
        url = str(server.make_url("/exports/MLS-diff-cell-export.csv.gz"))
        async with LbsClient(_config(tmp_path), store=store, session=session) as client:
            result = await client.import_dataset(url)
        assert not session.closed

    assert result.incremental
    assert result.deleted == 0
    assert result.total == 3


@pytest.mark.asyncio
async def test_http_error_is_fatal_and_leaves_store_untouched(tmp_path: Path) -> None:
    store = MemoryTowerStore()

    async with test_utils.TestServer(_dataset_app()) as server:
        url = str(server.make_url("/exports/missing.csv"))
        async with LbsClient(_config(tmp_path), store=store) as client:
            with pytest.raises(DatasetAccessError) as excinfo:
                await client.import_dataset(url)

    assert excinfo.value.status_code == 404
    assert await store.count() == 0
