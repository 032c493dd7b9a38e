# geogate/routes.py
from __future__ import annotations

from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, Query

from geogate.deps import (
    get_geo_store,
    get_geocode_client,
    get_weather_client,
    require_identity,
)
from geogate.errors import ValidationError
from geogate.geo_store import MAX_SEARCH_LIMIT, MIN_SEARCH_LIMIT, GeoStore
from geogate.location_service import GeocodeClient
from geogate.models import (
    City,
    Coordinates,
    Country,
    PlaceDescriptor,
    VerifiedIdentity,
    WeatherDescriptor,
)
from geogate.weather_service import WeatherClient


router = APIRouter()

DEFAULT_SEARCH_LIMIT = 50


# -----------------------------------------------------------
# Meta
# -----------------------------------------------------------
@router.get("/health", tags=["meta"])
async def health() -> Dict[str, str]:
    return {"status": "ok"}


# -----------------------------------------------------------
# Remote collaborators (bearer protected)
# -----------------------------------------------------------
@router.post("/location", response_model=PlaceDescriptor, tags=["location"])
async def location_endpoint(
    payload: Coordinates,
    identity: VerifiedIdentity = Depends(require_identity),
    geocoder: GeocodeClient = Depends(get_geocode_client),
) -> PlaceDescriptor:
    """Reverse-geocode a coordinate pair into a place descriptor."""
    return await geocoder.reverse(payload.lat, payload.lng)


@router.post("/weather", response_model=WeatherDescriptor, tags=["weather"])
async def weather_endpoint(
    payload: Coordinates,
    identity: VerifiedIdentity = Depends(require_identity),
    weather: WeatherClient = Depends(get_weather_client),
) -> WeatherDescriptor:
    return await weather.current(payload.lat, payload.lng)


# -----------------------------------------------------------
# Geo reference data (public)
# -----------------------------------------------------------
@router.get("/geo/countries", response_model=List[Country], tags=["geo"])
async def list_countries(store: GeoStore = Depends(get_geo_store)) -> List[Country]:
    return await store.list_countries()


@router.get("/geo/countries/{country_code}", response_model=Country, tags=["geo"])
async def get_country(country_code: str, store: GeoStore = Depends(get_geo_store)) -> Country:
    return await store.get_country(country_code.upper())


@router.get("/geo/countries/{country_code}/cities", response_model=List[City], tags=["geo"])
async def list_country_cities(
    country_code: str,
    store: GeoStore = Depends(get_geo_store),
) -> List[City]:
    return await store.list_cities_by_country(country_code.upper())


@router.get("/geo/search/cities", response_model=List[City], tags=["geo"])
async def search_cities(
    name: Optional[str] = Query(None, description="Substring of the city name"),
    limit: int = Query(DEFAULT_SEARCH_LIMIT, description="Maximum number of results"),
    store: GeoStore = Depends(get_geo_store),
) -> List[City]:
    """
    Case-insensitive substring search over city names, most populous first.
    Surrounding whitespace in `name` is ignored.
    """
    if not name or not name.strip():
        raise ValidationError("City name is required")
    if not MIN_SEARCH_LIMIT <= limit <= MAX_SEARCH_LIMIT:
        raise ValidationError(
            f"Limit must be a number between {MIN_SEARCH_LIMIT} and {MAX_SEARCH_LIMIT}"
        )
    return await store.search_cities_by_name(name.strip(), limit)


@router.get("/geo/{geo_type}", tags=["geo"])
async def geo_by_type(
    geo_type: str,
    country: Optional[str] = Query(None, description="Country code, required for cities"),
    store: GeoStore = Depends(get_geo_store),
):
    """
    Older combined endpoint: /geo/countries or /geo/cities?country=XX.
    """
    normalized = geo_type.lower()

    if normalized == "countries":
        return await store.list_countries()

    if normalized == "cities":
        if not country:
            raise ValidationError("Country code is required for cities endpoint")
        return await store.list_cities_by_country(country.upper())

    raise ValidationError('Invalid type. Use "countries" or "cities"')
