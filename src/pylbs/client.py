"""High-level async client bundling store, locator and importer."""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

import aiohttp

from pylbs.config import LbsConfig
from pylbs.exceptions import LbsError
from pylbs.ingestion.download import is_url
from pylbs.ingestion.importer import ImportProgress, Importer
from pylbs.locator import Locator
from pylbs.models.geolocation import GeolocationRequest, GeolocationResponse
from pylbs.models.imports import ImportFilters, ImportResult
from pylbs.models.tower import TowerRecord
from pylbs.store.base import TowerStore
from pylbs.store.sqlite import SqliteTowerStore

_logger = logging.getLogger(__name__)


class LbsClient:
    """Async client for a local cell tower geolocation database.

    Usage::

        async with LbsClient(LbsConfig.from_env()) as client:
            await client.import_dataset("cell_towers.csv.gz")
            response = await client.get({"cellTowers": [...]})
    """

    def __init__(
        self,
        config: LbsConfig | None = None,
        *,
        store: TowerStore | None = None,
        session: aiohttp.ClientSession | None = None,
        on_progress: Callable[[ImportProgress], None] | None = None,
    ) -> None:
        self._config = config or LbsConfig()
        self._store: TowerStore = store if store is not None else SqliteTowerStore.from_config(self._config)
        self._external_session = session is not None
        self._http_session = session
        self._on_progress = on_progress
        self._locator: Locator | None = None

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> LbsClient:
        await self._store.ensure_index()
        self._locator = Locator(self._store, default_radio_type=self._config.default_radio_type)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        self._locator = None

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_locator(self) -> Locator:
        if self._locator is None:
            raise LbsError("Client not initialized. Use 'async with LbsClient(...) as client:'")
        return self._locator

    @staticmethod
    def _as_request(request: GeolocationRequest | dict[str, Any]) -> GeolocationRequest:
        if isinstance(request, GeolocationRequest):
            return request
        return GeolocationRequest.model_validate(request)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    @property
    def store(self) -> TowerStore:
        return self._store

    async def get_cells(self, request: GeolocationRequest | dict[str, Any]) -> list[TowerRecord]:
        """Return the stored records of the towers named in *request*."""
        return await self._require_locator().get_cells(self._as_request(request))

    async def get(self, request: GeolocationRequest | dict[str, Any]) -> GeolocationResponse:
        """Estimate the position for *request* (a model or geolocation JSON dict)."""
        return await self._require_locator().get(self._as_request(request))

    async def records(self) -> int:
        """Number of tower records in the store."""
        return await self._require_locator().records()

    # ------------------------------------------------------------------
    # Ingestion
    # ------------------------------------------------------------------

    async def import_dataset(
        self,
        source: str | Path,
        *,
        filters: ImportFilters | None = None,
        incremental: bool | None = None,
    ) -> ImportResult:
        """Import a cell dataset from a path or URL into the store."""
        self._require_locator()
        if is_url(source) and self._http_session is None:
            self._http_session = aiohttp.ClientSession()
        _logger.debug("Importing %s", source)
        importer = Importer(
            self._store,
            batch_size=self._config.batch_size,
            progress_every=self._config.progress_every,
            on_progress=self._on_progress,
            http_session=self._http_session,
            download_timeout=self._config.download_timeout,
        )
        return await importer.run(source, filters=filters, incremental=incremental)
