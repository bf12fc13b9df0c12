"""Base model for pylbs wire and storage types.

Every model inherits from :class:`LbsBaseModel` which provides:

* ``alias_generator=to_camel`` so camelCase geolocation JSON keys
  (``cellTowers``, ``homeMobileCountryCode``) map to snake_case fields.
* ``populate_by_name`` so Python callers can use the field names.
* Immutability, since requests, records and responses are values.
"""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict
from pydantic.alias_generators import to_camel


def normalize_radio(value: Any) -> Any:
    """Lowercase and strip a radio type tag; empty strings become ``None``."""
    if value is None:
        return None
    if isinstance(value, str):
        text = value.strip().lower()
        return text or None
    return value


RadioType = Annotated[str, BeforeValidator(normalize_radio)]
"""Lowercase radio technology tag (``gsm``, ``umts``, ``lte``, ``cdma``, ``wcdma``...)."""

OptionalRadioType = Annotated[str | None, BeforeValidator(normalize_radio)]


class LbsBaseModel(BaseModel):
    """Base for pylbs models."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )
