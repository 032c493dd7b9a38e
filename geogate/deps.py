# geogate/deps.py
"""
FastAPI dependencies.

Long-lived collaborators live on app.state (created in main.lifespan); the
functions below hand them to routes and are the override points for tests.
"""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import Depends, Header, Request

from geogate.auth_gate import AuthGate
from geogate.errors import AuthFailure
from geogate.geo_store import GeoStore
from geogate.location_service import GeocodeClient
from geogate.models import VerifiedIdentity
from geogate.weather_service import WeatherClient

log = logging.getLogger(__name__)


def get_geo_store(request: Request) -> GeoStore:
    return request.app.state.geo_store


def get_auth_gate(request: Request) -> AuthGate:
    return request.app.state.auth_gate


def get_weather_client(request: Request) -> WeatherClient:
    return request.app.state.weather_client


def get_geocode_client(request: Request) -> GeocodeClient:
    return request.app.state.geocode_client


async def require_identity(
    authorization: Optional[str] = Header(None),
    gate: AuthGate = Depends(get_auth_gate),
) -> VerifiedIdentity:
    """
    Guard for protected routes. The identity is returned to the route as a
    parameter; nothing is stored on the request.
    """
    try:
        identity = await gate.verify(authorization)
    except AuthFailure as e:
        # reason stays in the logs; the client only ever sees 401 Unauthorized
        log.warning("Authentication failed: %s", e.reason.value)
        raise

    log.info("Request authenticated via %s", identity.provider.value)
    return identity
