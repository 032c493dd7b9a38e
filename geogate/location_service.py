# geogate/location_service.py
from __future__ import annotations

from typing import Any, Dict, Optional

import httpx

from geogate.errors import UpstreamError
from geogate.http_utils import get_json
from geogate.models import PlaceDescriptor

SERVICE_NAME = "geocode"

# Most specific settlement first
_CITY_KEYS = ("city", "town", "village", "hamlet", "suburb")
_REGION_KEYS = ("state", "county")


def _first(address: Dict[str, Any], keys) -> Optional[str]:
    for key in keys:
        if address.get(key):
            return address[key]
    return None


def reshape_reverse(data: Dict[str, Any]) -> PlaceDescriptor:
    address = data.get("address")
    if not isinstance(address, dict):
        raise UpstreamError(SERVICE_NAME, "payload missing address")

    return PlaceDescriptor(
        city=_first(address, _CITY_KEYS),
        region=_first(address, _REGION_KEYS),
        country=address.get("country"),
        country_code=address.get("country_code"),
        raw=address,
    )


class GeocodeClient:
    """Reverse geocoding through Nominatim."""

    def __init__(self, http: httpx.AsyncClient, reverse_url: str, user_agent: str):
        self.http = http
        self.reverse_url = reverse_url
        self.user_agent = user_agent

    async def reverse(self, lat: float, lng: float) -> PlaceDescriptor:
        data = await get_json(
            self.http,
            self.reverse_url,
            {"lat": lat, "lon": lng, "format": "json"},
            SERVICE_NAME,
            headers={"User-Agent": self.user_agent},
        )
        return reshape_reverse(data)
