# geogate/models.py
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


# -----------------------------------------------------------
# Geo dataset
# -----------------------------------------------------------
class Country(BaseModel):
    """One row of `countries`; columns beyond code/name land in `extra`."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    code: str = Field(alias="country_code")
    name: str = Field(alias="country_name")
    extra: Dict[str, Any] = Field(default_factory=dict)


class City(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    name: str = Field(alias="city")
    latitude: float
    longitude: float
    population: int = Field(ge=0)
    country_code: str


# -----------------------------------------------------------
# Identity
# -----------------------------------------------------------
class IdentityProvider(str, Enum):
    PRIMARY_AUTH = "primary_auth"
    GOOGLE = "google"


class VerifiedIdentity(BaseModel):
    subject: str
    email: Optional[str] = None
    provider: IdentityProvider
    raw_claims: Dict[str, Any] = Field(default_factory=dict)


# -----------------------------------------------------------
# Request / response bodies for the remote collaborators
# -----------------------------------------------------------
class Coordinates(BaseModel):
    lat: float = Field(ge=-90, le=90)
    lng: float = Field(ge=-180, le=180)


class PlaceDescriptor(BaseModel):
    city: Optional[str] = None
    region: Optional[str] = None
    country: Optional[str] = None
    country_code: Optional[str] = Field(default=None, alias="countryCode")
    raw: Dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(populate_by_name=True)


class WeatherLocation(BaseModel):
    name: Optional[str] = None
    region: Optional[str] = None
    country: Optional[str] = None


class WeatherDescriptor(BaseModel):
    location: WeatherLocation
    temperature_c: Optional[float] = None
    condition: Optional[str] = None
    icon: Optional[str] = None
    wind_kph: Optional[float] = None
    humidity: Optional[float] = None
    is_day: bool = False
    raw: Dict[str, Any] = Field(default_factory=dict)
