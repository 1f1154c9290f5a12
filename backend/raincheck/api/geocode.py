"""GET /api/geocode - Resolve a place name to coordinates."""

from fastapi import APIRouter, Depends, Query

from ..schemas.forecast import PlaceResponse
from ..services.errors import WeatherServiceError
from ..services.geocoding import GeocodingResolver
from .deps import get_resolver, raise_http

router = APIRouter()


@router.get("/geocode", response_model=PlaceResponse)
async def get_geocode(
    q: str = Query("", description="Free-text place, e.g. 'Koforidua' or 'Accra, GH'"),
    resolver: GeocodingResolver = Depends(get_resolver),
):
    """Return the top geocoding match for the query."""
    try:
        place = await resolver.resolve(q)
    except WeatherServiceError as exc:
        raise_http(exc)
    return PlaceResponse.model_validate(place)
