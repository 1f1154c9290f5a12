"""GET /api/rain - Will it rain today at a named place?"""

from typing import Literal

from fastapi import APIRouter, Depends, Query

from ..schemas.forecast import CityWeatherResponse
from ..services.errors import WeatherServiceError
from ..services.forecast_owm import ForecastClient
from ..services.geocoding import GeocodingResolver
from ..services.pipeline import fetch_by_city
from .deps import get_forecast_client, get_resolver, raise_http

router = APIRouter()


@router.get("/rain", response_model=CityWeatherResponse)
async def get_rain(
    q: str = Query(""),
    units: Literal["metric", "imperial", "standard"] | None = Query(None),
    resolver: GeocodingResolver = Depends(get_resolver),
    client: ForecastClient = Depends(get_forecast_client),
):
    """Geocode the place, fetch its forecast and assess rain for its local day."""
    try:
        result = await fetch_by_city(q, resolver, client, units=units)
    except WeatherServiceError as exc:
        raise_http(exc)
    return CityWeatherResponse.model_validate(result)
