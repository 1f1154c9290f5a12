"""Place-name geocoding.

Resolves a free-text query to coordinates and a display label. Two providers
are supported:

  - OpenWeather direct geocoding (keyed): the response is a bare list of
    places with lat/lon/name/state/country.
  - Open-Meteo geocoding (keyless): the response is {"results": [...]} with
    latitude/longitude/name/admin1/country_code.

Each query is tried as typed and then with the default region appended.
Provider order is authoritative: the first non-empty result set wins and
its first entry is taken.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Optional

import httpx

from ..config import Settings
from .errors import (
    ConfigurationError,
    NetworkError,
    PlaceNotFoundError,
    ProviderAuthError,
    ProviderError,
    WeatherServiceError,
)
from .http import REQUEST_TIMEOUT, get_json, open_client
from .query import normalize, with_region_hint

logger = logging.getLogger(__name__)

OPENWEATHER = "openweather"
OPEN_METEO = "open-meteo"

OWM_BASE_URL = "https://api.openweathermap.org"
OPEN_METEO_GEOCODING_URL = "https://geocoding-api.open-meteo.com/v1/search"


@dataclass(frozen=True)
class GeoResult:
    """A resolved place."""
    latitude: float
    longitude: float
    label: str  # "Name, Subdivision, CC" with empty parts omitted


@dataclass
class _Attempt:
    """Outcome of one candidate lookup: matches, or the error it raised."""
    query: str
    places: list[GeoResult] = field(default_factory=list)
    error: Optional[WeatherServiceError] = None


def _join_label(*parts: Optional[str]) -> str:
    return ", ".join(p for p in parts if p)


def _to_result(lat: Any, lon: Any, label: str) -> Optional[GeoResult]:
    try:
        latitude = float(lat)
        longitude = float(lon)
    except (TypeError, ValueError):
        return None
    if not (math.isfinite(latitude) and math.isfinite(longitude)):
        return None
    return GeoResult(latitude=latitude, longitude=longitude, label=label)


def parse_openweather(payload: Any) -> list[GeoResult]:
    """Parse an OpenWeather /geo/1.0/direct response."""
    if not isinstance(payload, list):
        return []
    places: list[GeoResult] = []
    for item in payload:
        if not isinstance(item, dict):
            continue
        label = _join_label(item.get("name"), item.get("state"), item.get("country"))
        place = _to_result(item.get("lat"), item.get("lon"), label)
        if place is not None:
            places.append(place)
    return places


def parse_open_meteo(payload: Any) -> list[GeoResult]:
    """Parse an Open-Meteo geocoding response (no "results" key = no match)."""
    if not isinstance(payload, dict):
        return []
    places: list[GeoResult] = []
    for item in payload.get("results") or []:
        if not isinstance(item, dict):
            continue
        label = _join_label(item.get("name"), item.get("admin1"), item.get("country_code"))
        place = _to_result(item.get("latitude"), item.get("longitude"), label)
        if place is not None:
            places.append(place)
    return places


class GeocodingResolver:
    """Turns free-text place queries into a GeoResult."""

    def __init__(
        self,
        api_key: str = "",
        *,
        provider: str = OPENWEATHER,
        default_region: str = "GH",
        limit: int = 5,
        base_url: str = OWM_BASE_URL,
        open_meteo_url: str = OPEN_METEO_GEOCODING_URL,
        timeout: float = REQUEST_TIMEOUT,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        if provider not in (OPENWEATHER, OPEN_METEO):
            raise ConfigurationError(f"Unknown geocoding provider: {provider!r}")
        if provider == OPENWEATHER and not api_key:
            raise ConfigurationError(
                "RAINCHECK_OWM_API_KEY is not set; OpenWeather geocoding needs it"
            )
        self.api_key = api_key
        self.provider = provider
        self.default_region = default_region
        self.limit = limit
        self.base_url = base_url.rstrip("/")
        self.open_meteo_url = open_meteo_url
        self.timeout = timeout
        self._client = client

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        client: Optional[httpx.AsyncClient] = None,
    ) -> "GeocodingResolver":
        return cls(
            settings.owm_api_key,
            provider=settings.geocoding_provider,
            default_region=settings.default_region,
            limit=settings.geocoding_limit,
            base_url=settings.owm_base_url,
            open_meteo_url=settings.open_meteo_geocoding_url,
            timeout=settings.request_timeout,
            client=client,
        )

    def candidates(self, raw_query: str) -> list[str]:
        """Ordered query formulations: as typed, then region-hinted."""
        query = normalize(raw_query)
        hinted = with_region_hint(query, self.default_region)
        return [query] if hinted == query else [query, hinted]

    async def resolve(self, raw_query: str) -> GeoResult:
        """Resolve a raw query to the provider's top match.

        Raises:
            EmptyQueryError: the query is blank after normalization.
            ProviderAuthError: the credential was rejected.
            PlaceNotFoundError: no formulation matched anything.
        """
        candidates = self.candidates(raw_query)

        async with open_client(self._client, self.timeout) as client:
            for query in candidates:
                attempt = await self._lookup(client, query)

                if isinstance(attempt.error, ProviderAuthError):
                    raise attempt.error
                if attempt.error is not None:
                    logger.warning(
                        "Geocoding attempt %r failed, trying next: %s",
                        query, attempt.error,
                    )
                    continue
                if attempt.places:
                    top = attempt.places[0]
                    logger.info(
                        "Geocoded %r -> %s (%.4f, %.4f)",
                        query, top.label, top.latitude, top.longitude,
                    )
                    return top
                logger.debug("Geocoding %r returned no matches", query)

        raise PlaceNotFoundError(candidates[0], self.default_region)

    async def _lookup(self, client: httpx.AsyncClient, query: str) -> _Attempt:
        """Issue one provider lookup, capturing provider/network failures."""
        if self.provider == OPEN_METEO:
            url = self.open_meteo_url
            params: dict[str, Any] = {
                "name": query,
                "count": self.limit,
                "language": "en",
                "format": "json",
            }
            parse = parse_open_meteo
        else:
            url = f"{self.base_url}/geo/1.0/direct"
            params = {"q": query, "limit": self.limit, "appid": self.api_key}
            parse = parse_openweather

        try:
            payload = await get_json(client, url, params, label="Geocoding")
        except (ProviderError, NetworkError) as exc:
            return _Attempt(query=query, error=exc)
        return _Attempt(query=query, places=parse(payload))
