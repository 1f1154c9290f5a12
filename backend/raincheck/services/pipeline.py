"""Place name -> coordinates -> forecast -> rain assessment.

The stages run strictly in sequence because the forecast needs the
geocoded coordinates. Nothing is cached or shared between calls.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from .bundle import ForecastBundle, RainAssessment
from .forecast_owm import ForecastClient
from .geocoding import GeocodingResolver, GeoResult
from .rain import assess

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CityWeather:
    place: GeoResult
    forecast: ForecastBundle
    rain: RainAssessment


async def fetch_by_city(
    raw_query: str,
    resolver: GeocodingResolver,
    client: ForecastClient,
    units: Optional[str] = None,
    now_utc: Optional[int] = None,
) -> CityWeather:
    """Run the full lookup for a free-text place name.

    Cancelling the awaiting task aborts whichever stage is in flight;
    the CancelledError is re-raised, never converted into an error.
    """
    try:
        place = await resolver.resolve(raw_query)
        forecast = await client.fetch(place.latitude, place.longitude, units)
    except asyncio.CancelledError:
        logger.info("Lookup for %r cancelled", raw_query)
        raise

    return CityWeather(place=place, forecast=forecast, rain=assess(forecast, now_utc))
