"""Application configuration using Pydantic Settings."""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings

# Resolve config: prefer system config (installed), fall back to repo .env (dev)
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
_SYSTEM_CONF = Path("/etc/raincheck/raincheck.conf")
_ENV_FILE = _SYSTEM_CONF if _SYSTEM_CONF.exists() else _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file."""

    # OpenWeather (credential required for the forecast stage)
    owm_api_key: str = ""
    owm_base_url: str = "https://api.openweathermap.org"

    # Geocoding
    geocoding_provider: Literal["openweather", "open-meteo"] = "openweather"
    open_meteo_geocoding_url: str = "https://geocoding-api.open-meteo.com/v1/search"
    default_region: str = "GH"
    geocoding_limit: int = 5

    # Units: metric, imperial, or standard
    units: Literal["metric", "imperial", "standard"] = "metric"

    # HTTP timeout per provider request (seconds)
    request_timeout: float = 10.0

    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    @field_validator("owm_base_url", "open_meteo_geocoding_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    model_config = {"env_prefix": "RAINCHECK_", "env_file": str(_ENV_FILE)}


@lru_cache
def get_settings() -> Settings:
    return Settings()
