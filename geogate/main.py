# geogate/main.py
from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from geogate.auth_gate import AuthGate
from geogate.errors import AuthFailure, GatewayError
from geogate.geo_store import GeoStore
from geogate.identity_providers import GoogleTokenVerifier, PrimaryAuthClient
from geogate.location_service import GeocodeClient
from geogate.routes import router as api_router
from geogate.settings import settings
from geogate.weather_service import WeatherClient

log = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    One shared HTTP client per process; collaborators hang off app.state.
    Anything already set on app.state (tests) is left alone.
    """
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    http = httpx.AsyncClient(timeout=settings.http_timeout_seconds)
    state = app.state

    try:
        if getattr(state, "geo_store", None) is None:
            state.geo_store = GeoStore(settings.geo_db_path)
        if getattr(state, "auth_gate", None) is None:
            state.auth_gate = AuthGate(
                PrimaryAuthClient(http, settings.primary_auth_url, settings.primary_auth_api_key),
                GoogleTokenVerifier(settings.google_client_id, settings.google_certs_url),
            )
        if getattr(state, "weather_client", None) is None:
            state.weather_client = WeatherClient(
                http, settings.weather_api_key, settings.weatherapi_current_url
            )
        if getattr(state, "geocode_client", None) is None:
            state.geocode_client = GeocodeClient(
                http, settings.nominatim_reverse_url, settings.nominatim_user_agent
            )
        log.info("geogate started (geo dataset: %s)", settings.geo_db_path)
        yield
    finally:
        await http.aclose()


app = FastAPI(
    title="Geo & Weather Gateway",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)


# ---------------------------
# Error mapping
# ---------------------------
@app.exception_handler(GatewayError)
async def gateway_error_handler(request: Request, exc: GatewayError) -> JSONResponse:
    if exc.status_code >= 500:
        log.error("%s on %s %s: %s", exc.code, request.method, request.url.path, exc.message)

    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthFailure) else None
    return JSONResponse(
        status_code=exc.status_code,
        content={"code": exc.code, "detail": exc.public_message()},
        headers=headers,
    )


def _validation_details(exc: RequestValidationError):
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")}
        for err in exc.errors()
    ]


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # Malformed bodies / query params are the caller's fault: 400, not 422
    return JSONResponse(
        status_code=400,
        content={"code": "VALIDATION_ERROR", "detail": _validation_details(exc)},
    )


allowed_origins = [origin.strip() for origin in settings.frontend_cors_origin.split(",")]
# ---------------------------------------------------------
# CORS CONFIGURATION
# ---------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=False,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Accept", "Authorization"],
)

app.include_router(api_router)


@app.get("/", tags=["meta"])
async def root():
    return {
        "name": "Geo & Weather Gateway",
        "status": "ok",
        "docs": "/docs",
    }
