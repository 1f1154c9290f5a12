"""GET /api/forecast and /api/current - Weather for a coordinate pair."""

from typing import Literal

from fastapi import APIRouter, Depends, Query

from ..schemas.forecast import CurrentResponse, ForecastResponse
from ..services.errors import WeatherServiceError
from ..services.forecast_owm import ForecastClient
from .deps import get_forecast_client, raise_http

router = APIRouter()

Units = Literal["metric", "imperial", "standard"]


@router.get("/forecast", response_model=ForecastResponse)
async def get_forecast(
    lat: float | None = Query(None),
    lon: float | None = Query(None),
    units: Units | None = Query(None),
    client: ForecastClient = Depends(get_forecast_client),
):
    """Return the normalized forecast bundle (One Call 3.0 or 2.5 fallback)."""
    try:
        bundle = await client.fetch(lat, lon, units)
    except WeatherServiceError as exc:
        raise_http(exc)
    return ForecastResponse.model_validate(bundle)


@router.get("/current", response_model=CurrentResponse)
async def get_current(
    lat: float | None = Query(None),
    lon: float | None = Query(None),
    units: Units | None = Query(None),
    client: ForecastClient = Depends(get_forecast_client),
):
    """Return current conditions only."""
    try:
        current = await client.fetch_current(lat, lon, units)
    except WeatherServiceError as exc:
        raise_http(exc)
    return CurrentResponse.model_validate(current)
