"""Import filter and import result models."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pylbs._constants import UINT16_MAX

_logger = logging.getLogger(__name__)


class ImportFilters(BaseModel):
    """Row filters applied while importing a dataset.

    Every filter is optional; an empty set (or ``min_samples=0``) admits
    all values.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        validate_default=True,
    )

    radios: frozenset[str] = Field(default_factory=frozenset)
    countries: frozenset[int] = Field(default_factory=frozenset)
    min_samples: int = Field(default=0, ge=0)

    @field_validator("radios", mode="before")
    @classmethod
    def _lowercase_radios(cls, value: Iterable[str] | None) -> frozenset[str]:
        if value is None:
            return frozenset()
        return frozenset(r.strip().lower() for r in value if r and r.strip())

    @field_validator("countries")
    @classmethod
    def _mcc_range(cls, value: frozenset[int]) -> frozenset[int]:
        for mcc in value:
            if not 0 <= mcc <= UINT16_MAX:
                raise ValueError(f"country code out of range: {mcc}")
        return value

    @classmethod
    def from_strings(
        cls,
        *,
        radio: str | None = None,
        country: str | None = None,
        min_samples: int = 0,
    ) -> ImportFilters:
        """Build filters from comma separated lists (``"gsm,lte"``, ``"250,255"``).

        Country entries that are not valid 16-bit codes are ignored.
        """
        radios = radio.split(",") if radio else []
        countries: set[int] = set()
        for item in (country.split(",") if country else []):
            item = item.strip()
            if not item:
                continue
            try:
                mcc = int(item)
            except ValueError:
                _logger.warning("Ignoring invalid country filter %r", item)
                continue
            if not 0 <= mcc <= UINT16_MAX:
                _logger.warning("Ignoring invalid country filter %r", item)
                continue
            countries.add(mcc)
        return cls(radios=radios, countries=frozenset(countries), min_samples=min_samples)

    @property
    def active(self) -> bool:
        return bool(self.radios or self.countries or self.min_samples)

    def admits_radio(self, radio: str) -> bool:
        return not self.radios or radio in self.radios

    def admits_country(self, mcc: int) -> bool:
        return not self.countries or mcc in self.countries

    def admits_samples(self, samples: int) -> bool:
        return samples >= self.min_samples


class ImportResult(BaseModel):
    """Counters for one import run.

    Parameters
    ----------
    source : str
        Dataset path or URL.
    incremental : bool
        ``True`` when the run only upserted (no purge).
    rows : int
        Data rows read (header excluded).
    accepted : int
        Rows staged for upsert.
    filtered : int
        Rows rejected by a filter.
    malformed : int
        Rows skipped because a field failed to parse.
    deleted : int
        Records purged before committing (full imports only).
    inserted, modified, failed : int
        Summed bulk write outcomes.
    total : int or None
        Record count read back after the run; ``None`` when nothing was
        written.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    source: str
    incremental: bool
    rows: int = 0
    accepted: int = 0
    filtered: int = 0
    malformed: int = 0
    deleted: int = 0
    inserted: int = 0
    modified: int = 0
    failed: int = 0
    total: int | None = None

    @property
    def skipped(self) -> int:
        return self.filtered + self.malformed
