"""pylbs - Local cell tower geolocation database and importer."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pylbs")
except PackageNotFoundError:
    __version__ = "0+local"
from pylbs.client import LbsClient
from pylbs.config import LbsConfig
from pylbs.exceptions import (
    DatasetAccessError,
    EmptyRequestError,
    LbsConfigError,
    LbsError,
    NotFoundError,
    RowParseError,
    StoreAccessError,
)
from pylbs.geo import haversine
from pylbs.ingestion import ImportPhase, ImportProgress, Importer
from pylbs.locator import Locator
from pylbs.models import (
    BulkWriteResult,
    CellTower,
    GeolocationRequest,
    GeolocationResponse,
    ImportFilters,
    ImportResult,
    LatLng,
    TowerKey,
    TowerQuery,
    TowerRecord,
    WifiAccessPoint,
)
from pylbs.store import MemoryTowerStore, SqliteTowerStore, TowerStore

__all__ = [
    "__version__",
    "BulkWriteResult",
    "CellTower",
    "DatasetAccessError",
    "EmptyRequestError",
    "GeolocationRequest",
    "GeolocationResponse",
    "ImportFilters",
    "ImportPhase",
    "ImportProgress",
    "ImportResult",
    "Importer",
    "LatLng",
    "LbsClient",
    "LbsConfig",
    "LbsConfigError",
    "LbsError",
    "Locator",
    "MemoryTowerStore",
    "NotFoundError",
    "RowParseError",
    "SqliteTowerStore",
    "StoreAccessError",
    "TowerKey",
    "TowerQuery",
    "TowerRecord",
    "TowerStore",
    "WifiAccessPoint",
    "haversine",
]
