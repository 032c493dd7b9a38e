# geogate/weather_service.py
from __future__ import annotations

import logging
from typing import Any, Dict

import httpx

from geogate.errors import UpstreamError
from geogate.http_utils import get_json
from geogate.models import WeatherDescriptor, WeatherLocation

log = logging.getLogger(__name__)

SERVICE_NAME = "weather"


def reshape_current_weather(data: Dict[str, Any]) -> WeatherDescriptor:
    """
    WeatherAPI.com current.json payload -> WeatherDescriptor.
    The untouched `current` block is passed through as `raw`.
    """
    location = data.get("location")
    current = data.get("current")
    if not isinstance(location, dict) or not isinstance(current, dict):
        raise UpstreamError(SERVICE_NAME, "payload missing location/current")

    condition = current.get("condition") or {}

    return WeatherDescriptor(
        location=WeatherLocation(
            name=location.get("name"),
            region=location.get("region"),
            country=location.get("country"),
        ),
        temperature_c=current.get("temp_c"),
        condition=condition.get("text"),
        icon=condition.get("icon"),
        wind_kph=current.get("wind_kph"),
        humidity=current.get("humidity"),
        is_day=current.get("is_day") == 1,
        raw=current,
    )


class WeatherClient:
    def __init__(self, http: httpx.AsyncClient, api_key: str, current_url: str):
        self.http = http
        self.api_key = api_key
        self.current_url = current_url

    async def current(self, lat: float, lng: float) -> WeatherDescriptor:
        data = await get_json(
            self.http,
            self.current_url,
            {"key": self.api_key, "q": f"{lat},{lng}", "aqi": "no"},
            SERVICE_NAME,
        )
        return reshape_current_weather(data)
