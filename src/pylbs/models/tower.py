"""Stored tower key/record types and store-facing value objects."""

from __future__ import annotations

import math
from collections.abc import Iterable

from pydantic import Field, field_validator

from pylbs._constants import UINT16_MAX, UINT32_MAX
from pylbs.models._base import LbsBaseModel, RadioType


class TowerKey(LbsBaseModel):
    """Composite identifier of a cell tower.

    The five fields are unique within a collection and form the store's
    primary index.
    """

    radio: RadioType
    mcc: int = Field(ge=0, le=UINT16_MAX)
    mnc: int = Field(ge=0, le=UINT16_MAX)
    lac: int = Field(ge=0, le=UINT16_MAX)
    cell: int = Field(ge=0, le=UINT32_MAX)

    def as_tuple(self) -> tuple[str, int, int, int, int]:
        return (self.radio, self.mcc, self.mnc, self.lac, self.cell)


class TowerRecord(LbsBaseModel):
    """Recorded position of a tower.

    Parameters
    ----------
    lon : float
        Longitude in degrees.
    lat : float
        Latitude in degrees.
    range : float
        Accuracy radius in metres around the point.
    """

    lon: float
    lat: float
    range: float = Field(default=0.0, ge=0)

    @field_validator("lon", "lat", "range")
    @classmethod
    def _finite(cls, value: float) -> float:
        if not math.isfinite(value):
            raise ValueError("must be a finite number")
        return value


class TowerQuery(LbsBaseModel):
    """Match predicate for a tower lookup.

    ``radio``, ``mcc`` and ``mnc`` must match exactly; ``(lac, cell)`` must
    equal at least one of ``cells``.
    """

    radio: RadioType
    mcc: int
    mnc: int
    cells: frozenset[tuple[int, int]]

    @classmethod
    def build(cls, radio: str, mcc: int, mnc: int, cells: Iterable[tuple[int, int]]) -> TowerQuery:
        return cls(radio=radio, mcc=mcc, mnc=mnc, cells=frozenset(cells))

    def matches(self, key: TowerKey) -> bool:
        return (
            key.radio == self.radio
            and key.mcc == self.mcc
            and key.mnc == self.mnc
            and (key.lac, key.cell) in self.cells
        )


class BulkWriteResult(LbsBaseModel):
    """Outcome of one unordered bulk upsert.

    Conflicting keys are overwritten (upsert).  ``modified`` counts existing
    records whose values changed; rewriting identical values counts as
    neither inserted nor modified.
    """

    inserted: int = 0
    modified: int = 0
    failed: int = 0

    def __add__(self, other: BulkWriteResult) -> BulkWriteResult:
        return BulkWriteResult(
            inserted=self.inserted + other.inserted,
            modified=self.modified + other.modified,
            failed=self.failed + other.failed,
        )
