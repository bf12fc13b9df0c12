"""Data models for towers, geolocation requests and import results."""

from pylbs.models._base import LbsBaseModel, RadioType, normalize_radio
from pylbs.models.geolocation import (
    CellTower,
    GeolocationRequest,
    GeolocationResponse,
    LatLng,
    WifiAccessPoint,
)
from pylbs.models.imports import ImportFilters, ImportResult
from pylbs.models.tower import BulkWriteResult, TowerKey, TowerQuery, TowerRecord

__all__ = [
    "BulkWriteResult",
    "CellTower",
    "GeolocationRequest",
    "GeolocationResponse",
    "ImportFilters",
    "ImportResult",
    "LatLng",
    "LbsBaseModel",
    "RadioType",
    "TowerKey",
    "TowerQuery",
    "TowerRecord",
    "WifiAccessPoint",
    "normalize_radio",
]
