"""Normalized forecast data shared by the forecast client and rain inference.

All timestamps are Unix seconds (UTC). Probabilities are fractions in [0, 1].
"""

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class CurrentSample:
    """Conditions right now."""
    timestamp_utc: int
    temperature: float
    feels_like: float
    humidity_pct: int
    pressure_hpa: int
    wind_speed: float
    clouds_pct: int
    visibility_m: Optional[int]
    weather_code: int
    description: str
    uv_index: Optional[float] = None  # Not available from the legacy endpoint


@dataclass(frozen=True)
class HourlySample:
    timestamp_utc: int
    precipitation_probability: float
    weather_code: int
    rain_mm: float = 0.0
    snow_mm: float = 0.0


@dataclass(frozen=True)
class DailySample:
    timestamp_utc: int
    precipitation_probability: float
    rain_mm_total: float
    temperature_max: float
    temperature_min: float
    weather_code: int


@dataclass(frozen=True)
class ForecastBundle:
    """One forecast snapshot, whichever provider version supplied it."""
    current: CurrentSample
    hourly: list[HourlySample] = field(default_factory=list)  # sorted by time
    daily: list[DailySample] = field(default_factory=list)  # sorted by date
    timezone_offset_seconds: int = 0
    source: str = ""  # "onecall-3.0" or "legacy-2.5"


@dataclass(frozen=True)
class RainAssessment:
    will_rain: bool = False
    chance_percent: int = 0
    first_rainy_local_time: str = ""  # "HH:MM" in the location's local time
    amount_mm: float = 0.0


def clamp_probability(value: float) -> float:
    return min(max(value, 0.0), 1.0)
