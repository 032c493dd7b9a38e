# geogate/settings.py
from __future__ import annotations
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Primary auth backend
    primary_auth_url: str
    primary_auth_api_key: str

    # Google ID tokens (fallback verifier)
    google_client_id: str = ""
    google_certs_url: str = "https://www.googleapis.com/oauth2/v3/certs"

    # External API keys / base URLs
    weather_api_key: str
    weatherapi_current_url: str = "http://api.weatherapi.com/v1/current.json"
    nominatim_reverse_url: str = "https://nominatim.openstreetmap.org/reverse"
    nominatim_user_agent: str = "geogate"
    http_timeout_seconds: float = 10.0

    # Local geo dataset
    geo_db_path: str = "data/world_geo.db"

    frontend_cors_origin: str = "http://localhost:8080"
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()
