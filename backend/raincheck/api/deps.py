"""FastAPI dependencies: provider clients built from settings, error mapping."""

from typing import NoReturn

from fastapi import Depends, HTTPException

from ..config import Settings, get_settings
from ..services.errors import (
    EmptyQueryError,
    InvalidCoordinatesError,
    NetworkError,
    PlaceNotFoundError,
    ProviderError,
    WeatherServiceError,
)
from ..services.forecast_owm import ForecastClient
from ..services.geocoding import GeocodingResolver

# Error kind -> HTTP status. Order matters: subclasses before bases.
_STATUS_BY_ERROR: list[tuple[type[WeatherServiceError], int]] = [
    (EmptyQueryError, 400),
    (PlaceNotFoundError, 404),
    (InvalidCoordinatesError, 422),
    (NetworkError, 503),
    (ProviderError, 502),
]


def get_resolver(settings: Settings = Depends(get_settings)) -> GeocodingResolver:
    return GeocodingResolver.from_settings(settings)


def get_forecast_client(settings: Settings = Depends(get_settings)) -> ForecastClient:
    return ForecastClient.from_settings(settings)


def raise_http(exc: WeatherServiceError) -> NoReturn:
    """Re-raise a pipeline error as an HTTPException with a display message."""
    for error_type, status in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            raise HTTPException(status, str(exc)) from exc
    raise HTTPException(500, str(exc)) from exc
