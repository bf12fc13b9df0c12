"""Geolocation request/response models.

The shapes follow the Google / Mozilla Location Service geolocation API so
payloads meant for those services can be passed straight through::

    {
        "radioType": "gsm",
        "homeMobileCountryCode": 250,
        "cellTowers": [
            {"mobileCountryCode": 250, "mobileNetworkCode": 2,
             "locationAreaCode": 7743, "cellId": 22517, "signalStrength": -78}
        ]
    }
"""

from __future__ import annotations

from pydantic import Field

from pylbs._constants import UINT16_MAX, UINT32_MAX
from pylbs.models._base import LbsBaseModel, OptionalRadioType


class CellTower(LbsBaseModel):
    """An observed cell tower.

    ``radio_type``, ``signal_strength``, ``age`` and ``timing_advance`` are
    accepted for wire compatibility but do not influence the lookup.
    """

    radio_type: OptionalRadioType = None
    mobile_country_code: int = Field(default=0, ge=0, le=UINT16_MAX)
    mobile_network_code: int = Field(default=0, ge=0, le=UINT16_MAX)
    location_area_code: int = Field(ge=0, le=UINT16_MAX)
    cell_id: int = Field(ge=0, le=UINT32_MAX)
    signal_strength: int | None = None
    age: int | None = None
    timing_advance: int | None = None


class WifiAccessPoint(LbsBaseModel):
    """An observed Wi-Fi access point (accepted, not resolved)."""

    mac_address: str
    signal_strength: int | None = None
    age: int | None = None
    channel: int | None = None
    signal_to_noise_ratio: int | None = None


class GeolocationRequest(LbsBaseModel):
    """A geolocation lookup request.

    ``radio_type`` is request-wide; when missing the locator's configured
    default applies.  ``home_mobile_country_code`` and
    ``home_mobile_network_code`` fall back to the first tower's codes.
    """

    home_mobile_country_code: int | None = Field(default=None, ge=0, le=UINT16_MAX)
    home_mobile_network_code: int | None = Field(default=None, ge=0, le=UINT16_MAX)
    radio_type: OptionalRadioType = None
    carrier: str | None = None
    consider_ip: bool = False
    cell_towers: list[CellTower] = Field(default_factory=list)
    wifi_access_points: list[WifiAccessPoint] = Field(default_factory=list)


class LatLng(LbsBaseModel):
    lat: float
    lng: float


class GeolocationResponse(LbsBaseModel):
    """Estimated position and accuracy radius in metres."""

    location: LatLng
    accuracy: float

    @property
    def latitude(self) -> float:
        return self.location.lat

    @property
    def longitude(self) -> float:
        return self.location.lng
