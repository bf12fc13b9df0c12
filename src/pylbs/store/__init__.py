"""Record store layer.

The store is the single owner of persisted tower records.  The locator and
the importer talk to it only through :class:`TowerStore`.
"""

from pylbs.store.base import TowerStore
from pylbs.store.memory import MemoryTowerStore
from pylbs.store.sqlite import SqliteTowerStore

__all__ = ["MemoryTowerStore", "SqliteTowerStore", "TowerStore"]
