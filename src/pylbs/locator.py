"""Resolution engine: tower lookup and position averaging.

The estimate is the mean of the matched towers'
coordinates, with an accuracy radius large enough to cover every matched
tower's own uncertainty disk.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from pylbs._constants import DEFAULT_RADIO_TYPE
from pylbs.exceptions import EmptyRequestError, NotFoundError
from pylbs.geo import haversine
from pylbs.models.geolocation import GeolocationRequest, GeolocationResponse, LatLng
from pylbs.models.tower import TowerQuery, TowerRecord
from pylbs.store.base import TowerStore

_logger = logging.getLogger(__name__)


def build_query(request: GeolocationRequest, *, default_radio_type: str = DEFAULT_RADIO_TYPE) -> TowerQuery:
    """Build the store predicate for *request*.

    Radio type falls back to *default_radio_type*, never to a tower's own
    ``radio_type``.  Country and network codes fall back to the first
    tower's.
    """
    if not request.cell_towers:
        raise EmptyRequestError()
    first = request.cell_towers[0]
    radio = request.radio_type or default_radio_type
    mcc = request.home_mobile_country_code or first.mobile_country_code
    mnc = request.home_mobile_network_code or first.mobile_network_code
    return TowerQuery.build(
        radio,
        mcc,
        mnc,
        ((tower.location_area_code, tower.cell_id) for tower in request.cell_towers),
    )


def estimate(cells: Sequence[TowerRecord]) -> GeolocationResponse:
    """Combine matched tower records into one position and accuracy radius."""
    if not cells:
        raise NotFoundError()
    count = float(len(cells))
    lon = sum(cell.lon for cell in cells) / count
    lat = sum(cell.lat for cell in cells) / count
    accuracy = max(haversine(lat, lon, cell.lat, cell.lon) + cell.range for cell in cells)
    return GeolocationResponse(location=LatLng(lat=lat, lng=lon), accuracy=accuracy)


class Locator:
    """Resolve geolocation requests against a :class:`TowerStore`.

    Usage::

        locator = Locator(SqliteTowerStore("lbs.sqlite"))
        response = await locator.get(request)
    """

    def __init__(self, store: TowerStore, *, default_radio_type: str = DEFAULT_RADIO_TYPE) -> None:
        self._store = store
        self._default_radio_type = default_radio_type.strip().lower() or DEFAULT_RADIO_TYPE

    @property
    def default_radio_type(self) -> str:
        return self._default_radio_type

    async def get_cells(self, request: GeolocationRequest) -> list[TowerRecord]:
        """Return point and accuracy of every stored tower the request names."""
        query = build_query(request, default_radio_type=self._default_radio_type)
        cells = await self._store.find(query)
        _logger.debug(
            "Matched %d of %d towers (radio=%s mcc=%d mnc=%d)",
            len(cells),
            len(request.cell_towers),
            query.radio,
            query.mcc,
            query.mnc,
        )
        return cells

    async def get(self, request: GeolocationRequest) -> GeolocationResponse:
        """Estimate the position for *request*.

        Raises
        ------
        EmptyRequestError
            The request names no cell towers.
        NotFoundError
            None of the towers is in the store.
        StoreAccessError
            The store lookup failed.
        """
        cells = await self.get_cells(request)
        return estimate(cells)

    async def records(self) -> int:
        """Number of tower records in the store."""
        return await self._store.count()
