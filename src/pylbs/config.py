"""Library configuration for pylbs."""

from __future__ import annotations

import dataclasses
import os
import re
from collections.abc import Mapping
from typing import Any

from pylbs._constants import (
    COLLECTION_NAME,
    DEFAULT_BATCH_SIZE,
    DEFAULT_PROGRESS_EVERY,
    DEFAULT_RADIO_TYPE,
)
from pylbs.exceptions import LbsConfigError

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def validate_collection_name(name: str) -> str:
    """Return *name* if it is usable as a table/collection name."""
    if not _IDENTIFIER_RE.match(name):
        raise LbsConfigError(f"invalid collection name: {name!r}")
    return name


def _env_number(env: Mapping[str, str], key: str, cast: type) -> Any:
    raw = env.get(key)
    if raw is None:
        return None
    try:
        return cast(raw.strip())
    except ValueError as exc:
        raise LbsConfigError(f"{key} must be a {cast.__name__}, got {raw!r}") from exc


@dataclasses.dataclass(frozen=True)
class LbsConfig:
    """Library configuration.

    Parameters
    ----------
    database : str
        Path of the SQLite database file holding tower records.
    collection : str
        Table (collection) name for tower records.  Defaults to ``"lbs"``.
    default_radio_type : str
        Radio type used for lookups when neither the request nor its first
        tower names one.
    batch_size : int
        Number of staged upserts sent to the store per bulk write.
    download_timeout : float
        Total timeout in seconds for downloading a remote dataset.
        ``0`` disables the timeout.
    progress_every : int
        Row interval between import progress callbacks.
    """

    database: str = "lbs.sqlite"
    collection: str = COLLECTION_NAME
    default_radio_type: str = DEFAULT_RADIO_TYPE
    batch_size: int = DEFAULT_BATCH_SIZE
    download_timeout: float = 300.0
    progress_every: int = DEFAULT_PROGRESS_EVERY

    def __post_init__(self) -> None:
        validate_collection_name(self.collection)
        radio = self.default_radio_type.strip().lower()
        if not radio:
            raise LbsConfigError("default_radio_type must be non-empty")
        object.__setattr__(self, "default_radio_type", radio)
        if self.batch_size < 1:
            raise LbsConfigError(f"batch_size must be >= 1, got {self.batch_size}")
        if self.download_timeout < 0:
            raise LbsConfigError(f"download_timeout must be >= 0, got {self.download_timeout}")
        if self.progress_every < 1:
            raise LbsConfigError(f"progress_every must be >= 1, got {self.progress_every}")

    @classmethod
    def from_env(cls, **overrides: Any) -> LbsConfig:
        """Create configuration from ``LBS_*`` environment variables.

        Explicit keyword arguments override environment values.
        """
        env = os.environ

        _ENV_STR_MAP = {
            "LBS_DATABASE": "database",
            "LBS_COLLECTION": "collection",
            "LBS_DEFAULT_RADIO_TYPE": "default_radio_type",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_STR_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        _ENV_NUMBER_MAP: dict[str, tuple[str, type]] = {
            "LBS_BATCH_SIZE": ("batch_size", int),
            "LBS_DOWNLOAD_TIMEOUT": ("download_timeout", float),
            "LBS_PROGRESS_EVERY": ("progress_every", int),
        }
        for env_key, (field_name, cast) in _ENV_NUMBER_MAP.items():
            if field_name in overrides:
                continue
            val = _env_number(env, env_key, cast)
            if val is not None:
                config_kwargs[field_name] = val

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
