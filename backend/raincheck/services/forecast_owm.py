"""OpenWeather forecast client.

Fetches current conditions plus hourly/daily forecasts for a coordinate
pair. The One Call 3.0 endpoint is tried first; on any failure the client
falls back to the free 2.5 pair (current weather + 5 day / 3 hour forecast)
and synthesizes daily entries from the 3-hour steps, which also
serve as the hourly series.

Both payload shapes are carried as a tagged union (OneCallPayload |
LegacyPayload) and turned into a ForecastBundle by normalize_forecast().

OpenWeather API docs: https://openweathermap.org/api
"""

import asyncio
import logging
import math
from dataclasses import dataclass
from typing import Any, Optional, Union

import httpx

from ..config import Settings
from .bundle import (
    CurrentSample,
    DailySample,
    ForecastBundle,
    HourlySample,
    clamp_probability,
)
from .errors import (
    ConfigurationError,
    InvalidCoordinatesError,
    NetworkError,
    ProviderError,
)
from .http import REQUEST_TIMEOUT, get_json, open_client

logger = logging.getLogger(__name__)

OWM_BASE_URL = "https://api.openweathermap.org"

UNITS = ("metric", "imperial", "standard")

SOURCE_ONECALL = "onecall-3.0"
SOURCE_LEGACY = "legacy-2.5"

SECONDS_PER_DAY = 86400


# --- Raw provider payloads ---

@dataclass(frozen=True)
class OneCallPayload:
    """Body of /data/3.0/onecall."""
    data: dict


@dataclass(frozen=True)
class LegacyPayload:
    """Bodies of /data/2.5/weather and /data/2.5/forecast."""
    current: dict
    forecast: dict


RawForecast = Union[OneCallPayload, LegacyPayload]


# --- Field helpers ---

def _num(value: Any, default: float = 0.0) -> float:
    if value is None:
        return default
    try:
        result = float(value)
    except (TypeError, ValueError):
        return default
    return result if math.isfinite(result) else default


def _int(value: Any, default: int = 0) -> int:
    return int(round(_num(value, default)))


def _section(value: Any) -> dict:
    """A nested object such as "main" or "temp", or {} if it is anything else."""
    return value if isinstance(value, dict) else {}


def _weather(item: dict) -> dict:
    """First entry of an OpenWeather "weather" array, or {}."""
    weather = item.get("weather")
    if isinstance(weather, list) and weather and isinstance(weather[0], dict):
        return weather[0]
    return {}


def _amount(block: Any, key: str) -> float:
    """Precipitation volume from e.g. {"1h": 0.4}; plain numbers pass through."""
    if isinstance(block, dict):
        return _num(block.get(key))
    return _num(block)


def _require_dict(value: Any, what: str) -> dict:
    if not isinstance(value, dict) or not value:
        raise ProviderError(f"OpenWeather response missing {what}")
    return value


# --- Normalization ---

def _current_from_onecall(cur: dict) -> CurrentSample:
    weather = _weather(cur)
    visibility = cur.get("visibility")
    uvi = cur.get("uvi")
    return CurrentSample(
        timestamp_utc=_int(cur.get("dt")),
        temperature=_num(cur.get("temp")),
        feels_like=_num(cur.get("feels_like")),
        humidity_pct=_int(cur.get("humidity")),
        pressure_hpa=_int(cur.get("pressure")),
        wind_speed=_num(cur.get("wind_speed")),
        clouds_pct=_int(cur.get("clouds")),
        visibility_m=_int(visibility) if visibility is not None else None,
        weather_code=_int(weather.get("id")),
        description=str(weather.get("description") or ""),
        uv_index=_num(uvi) if uvi is not None else None,
    )


def _current_from_legacy(cur: dict) -> CurrentSample:
    main = _section(cur.get("main"))
    wind = _section(cur.get("wind"))
    clouds = _section(cur.get("clouds"))
    weather = _weather(cur)
    visibility = cur.get("visibility")
    return CurrentSample(
        timestamp_utc=_int(cur.get("dt")),
        temperature=_num(main.get("temp")),
        feels_like=_num(main.get("feels_like")),
        humidity_pct=_int(main.get("humidity")),
        pressure_hpa=_int(main.get("pressure")),
        wind_speed=_num(wind.get("speed")),
        clouds_pct=_int(clouds.get("all")),
        visibility_m=_int(visibility) if visibility is not None else None,
        weather_code=_int(weather.get("id")),
        description=str(weather.get("description") or ""),
        uv_index=None,
    )


def _hourly_samples(items: Any, period: str) -> list[HourlySample]:
    """Map forecast steps to HourlySample, sorted by time.

    period is the precipitation accumulation key: "1h" for One Call hours,
    "3h" for the 2.5 forecast steps.
    """
    samples = [
        HourlySample(
            timestamp_utc=_int(h.get("dt")),
            precipitation_probability=clamp_probability(_num(h.get("pop"))),
            weather_code=_int(_weather(h).get("id")),
            rain_mm=_amount(h.get("rain"), period),
            snow_mm=_amount(h.get("snow"), period),
        )
        for h in (items if isinstance(items, list) else [])
        if isinstance(h, dict)
    ]
    samples.sort(key=lambda s: s.timestamp_utc)
    return samples


def _from_onecall(data: dict) -> ForecastBundle:
    current = _current_from_onecall(_require_dict(data.get("current"), "current conditions"))

    hourly = _hourly_samples(data.get("hourly"), "1h")

    daily = []
    daily_items = data.get("daily")
    for d in daily_items if isinstance(daily_items, list) else []:
        if not isinstance(d, dict):
            continue
        temp = _section(d.get("temp"))
        daily.append(DailySample(
            timestamp_utc=_int(d.get("dt")),
            precipitation_probability=clamp_probability(_num(d.get("pop"))),
            rain_mm_total=_num(d.get("rain")),
            temperature_max=_num(temp.get("max")),
            temperature_min=_num(temp.get("min")),
            weather_code=_int(_weather(d).get("id")),
        ))
    daily.sort(key=lambda s: s.timestamp_utc)

    return ForecastBundle(
        current=current,
        hourly=hourly,
        daily=daily,
        timezone_offset_seconds=_int(data.get("timezone_offset")),
        source=SOURCE_ONECALL,
    )


def synthesize_daily(steps: list[dict], offset_seconds: int) -> list[DailySample]:
    """Group fixed-interval forecast steps into local calendar days.

    Days are bounded by the location's own midnight (offset_seconds from
    UTC). Each day keeps the max of the step maxima, the min of the step
    minima, the weather code of its latest step and the highest step pop.
    Rain totals are not reported per day by this endpoint and stay 0.
    """
    by_day: dict[int, list[dict]] = {}
    for step in sorted(steps, key=lambda s: _int(s.get("dt"))):
        day_index = (_int(step.get("dt")) + offset_seconds) // SECONDS_PER_DAY
        by_day.setdefault(day_index, []).append(step)

    daily: list[DailySample] = []
    for day_index in sorted(by_day):
        group = by_day[day_index]
        maxima = [_num(_section(s.get("main")).get("temp_max"), -math.inf) for s in group]
        minima = [_num(_section(s.get("main")).get("temp_min"), math.inf) for s in group]
        high = max(maxima)
        low = min(minima)
        daily.append(DailySample(
            timestamp_utc=day_index * SECONDS_PER_DAY - offset_seconds,
            precipitation_probability=clamp_probability(
                max(_num(s.get("pop")) for s in group)
            ),
            rain_mm_total=0.0,
            temperature_max=high if math.isfinite(high) else 0.0,
            temperature_min=low if math.isfinite(low) else 0.0,
            weather_code=_int(_weather(group[-1]).get("id")),
        ))
    return daily


def _legacy_offset(current: dict, forecast: dict) -> int:
    if current.get("timezone") is not None:
        return _int(current.get("timezone"))
    return _int(_section(forecast.get("city")).get("timezone"))


def _from_legacy(current: dict, forecast: dict) -> ForecastBundle:
    current = _require_dict(current, "current conditions")
    offset = _legacy_offset(current, forecast)
    items = forecast.get("list")
    steps = [s for s in (items if isinstance(items, list) else []) if isinstance(s, dict)]
    return ForecastBundle(
        current=_current_from_legacy(current),
        hourly=_hourly_samples(steps, "3h"),
        daily=synthesize_daily(steps, offset),
        timezone_offset_seconds=offset,
        source=SOURCE_LEGACY,
    )


def normalize_forecast(raw: RawForecast) -> ForecastBundle:
    """Turn either provider payload into a ForecastBundle.

    A body that is not shaped like the endpoint's documented response
    raises ProviderError, so callers treat it like any other provider failure.
    """
    if not isinstance(raw, (OneCallPayload, LegacyPayload)):
        raise TypeError(f"Unsupported forecast payload: {type(raw).__name__}")
    try:
        if isinstance(raw, OneCallPayload):
            return _from_onecall(raw.data)
        return _from_legacy(raw.current, raw.forecast)
    except (KeyError, TypeError, AttributeError, ValueError) as exc:
        raise ProviderError(f"OpenWeather response malformed: {exc!r}") from exc


# --- Client ---

def validate_coordinates(lat: Optional[float], lon: Optional[float]) -> tuple[float, float]:
    """Return (lat, lon) as floats or raise InvalidCoordinatesError."""
    if lat is None or lon is None:
        raise InvalidCoordinatesError("Missing coordinates")
    try:
        lat_f = float(lat)
        lon_f = float(lon)
    except (TypeError, ValueError) as exc:
        raise InvalidCoordinatesError(f"Invalid coordinates: {lat}, {lon}") from exc
    if not (math.isfinite(lat_f) and math.isfinite(lon_f)):
        raise InvalidCoordinatesError(f"Coordinates must be finite: {lat}, {lon}")
    if not (-90.0 <= lat_f <= 90.0 and -180.0 <= lon_f <= 180.0):
        raise InvalidCoordinatesError(f"Coordinates out of range: {lat}, {lon}")
    return lat_f, lon_f


def _check_units(units: str) -> str:
    if units not in UNITS:
        raise ValueError(f"Unknown unit system {units!r}; expected one of {', '.join(UNITS)}")
    return units


class ForecastClient:
    """Retrieves a ForecastBundle for a coordinate pair."""

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = OWM_BASE_URL,
        units: str = "metric",
        timeout: float = REQUEST_TIMEOUT,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        if not api_key:
            raise ConfigurationError(
                "RAINCHECK_OWM_API_KEY is not set; the forecast client needs it"
            )
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.units = _check_units(units)
        self.timeout = timeout
        self._client = client

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        client: Optional[httpx.AsyncClient] = None,
    ) -> "ForecastClient":
        return cls(
            settings.owm_api_key,
            base_url=settings.owm_base_url,
            units=settings.units,
            timeout=settings.request_timeout,
            client=client,
        )

    def _params(self, lat: float, lon: float, units: str) -> dict[str, Any]:
        return {"lat": lat, "lon": lon, "units": units, "appid": self.api_key}

    async def fetch(
        self,
        lat: Optional[float],
        lon: Optional[float],
        units: Optional[str] = None,
    ) -> ForecastBundle:
        """Fetch and normalize the forecast for (lat, lon).

        Raises:
            InvalidCoordinatesError: before any request is made.
            ProviderAuthError / ProviderError / NetworkError: only when the
                legacy fallback fails too; the primary's failure is logged.
        """
        lat, lon = validate_coordinates(lat, lon)
        units = _check_units(units or self.units)

        async with open_client(self._client, self.timeout) as client:
            try:
                raw: RawForecast = await self._fetch_onecall(client, lat, lon, units)
                bundle = normalize_forecast(raw)
            except (ProviderError, NetworkError) as exc:
                logger.warning(
                    "One Call 3.0 failed for (%s, %s), falling back to 2.5: %s",
                    lat, lon, exc,
                )
                raw = await self._fetch_legacy(client, lat, lon, units)
                bundle = normalize_forecast(raw)

        logger.info(
            "Forecast fetched for (%s, %s) via %s: %d hourly, %d daily",
            lat, lon, bundle.source, len(bundle.hourly), len(bundle.daily),
        )
        return bundle

    async def fetch_current(
        self,
        lat: Optional[float],
        lon: Optional[float],
        units: Optional[str] = None,
    ) -> CurrentSample:
        """Current conditions only, from the 2.5 current-weather endpoint."""
        lat, lon = validate_coordinates(lat, lon)
        units = _check_units(units or self.units)

        async with open_client(self._client, self.timeout) as client:
            data = await get_json(
                client,
                f"{self.base_url}/data/2.5/weather",
                self._params(lat, lon, units),
                label="Current weather",
            )
        return _current_from_legacy(_require_dict(data, "current conditions"))

    async def _fetch_onecall(
        self,
        client: httpx.AsyncClient,
        lat: float,
        lon: float,
        units: str,
    ) -> OneCallPayload:
        params = self._params(lat, lon, units)
        params["exclude"] = "minutely,alerts"
        data = await get_json(
            client,
            f"{self.base_url}/data/3.0/onecall",
            params,
            label="One Call v3.0",
        )
        return OneCallPayload(data=_require_dict(data, "One Call body"))

    async def _fetch_legacy(
        self,
        client: httpx.AsyncClient,
        lat: float,
        lon: float,
        units: str,
    ) -> LegacyPayload:
        params = self._params(lat, lon, units)
        results = await asyncio.gather(
            get_json(client, f"{self.base_url}/data/2.5/weather", params, label="Current weather"),
            get_json(client, f"{self.base_url}/data/2.5/forecast", params, label="Forecast"),
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, BaseException):
                raise result
        current, forecast = results
        return LegacyPayload(
            current=_require_dict(current, "current conditions"),
            forecast=forecast if isinstance(forecast, dict) else {},
        )
