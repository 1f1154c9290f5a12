"""Rain-today inference.

Decides whether precipitation is expected during the queried location's
current calendar day (local midnight to local midnight, using the
location's UTC offset rather than the caller's).

Hourly data is preferred. An hour counts as rain-likely when any of:
  - its weather code is thunderstorm, drizzle or rain (200 <= code < 600)
  - it reports measured rain or snow
  - its precipitation probability is at least 30%
When no hourly data exists the day's daily entry is used instead.
"""

import math
import time
from datetime import datetime, timezone
from typing import Optional

from .bundle import DailySample, ForecastBundle, HourlySample, RainAssessment

SECONDS_PER_DAY = 86400

# Weather code range covering thunderstorm (2xx), drizzle (3xx) and rain (5xx).
RAIN_CODE_MIN = 200
RAIN_CODE_MAX = 600  # exclusive

# Per-hour probability that marks an hour as rain-likely.
HOURLY_POP_THRESHOLD = 0.30

# Window-wide maximum probability that alone implies rain.
WINDOW_POP_THRESHOLD = 0.50

# Daily fallback: chance (percent) that implies rain.
DAILY_CHANCE_THRESHOLD = 30


def local_day_window(now_utc: int, offset_seconds: int) -> tuple[int, int]:
    """Return [start, end) in UTC seconds for the location's current day."""
    local_now = now_utc + offset_seconds
    start = (local_now // SECONDS_PER_DAY) * SECONDS_PER_DAY - offset_seconds
    return start, start + SECONDS_PER_DAY


def format_local_time(timestamp_utc: int, offset_seconds: int) -> str:
    """HH:MM of a UTC timestamp at the given UTC offset."""
    local = datetime.fromtimestamp(timestamp_utc + offset_seconds, tz=timezone.utc)
    return f"{local.hour:02d}:{local.minute:02d}"


def is_rain_likely(sample: HourlySample) -> bool:
    rainy_code = RAIN_CODE_MIN <= sample.weather_code < RAIN_CODE_MAX
    measured = sample.rain_mm + sample.snow_mm > 0
    return rainy_code or measured or sample.precipitation_probability >= HOURLY_POP_THRESHOLD


def to_percent(probability: float) -> int:
    """Probability in [0, 1] as a whole percent, halves rounded up."""
    return int(math.floor(probability * 100 + 0.5))


def _day_entry(daily: list[DailySample], start: int, end: int) -> Optional[DailySample]:
    for entry in daily:
        if start <= entry.timestamp_utc < end:
            return entry
    return None


def _assess_daily(entry: DailySample) -> RainAssessment:
    chance = to_percent(entry.precipitation_probability)
    amount = entry.rain_mm_total
    return RainAssessment(
        will_rain=chance >= DAILY_CHANCE_THRESHOLD or amount > 0,
        chance_percent=chance,
        first_rainy_local_time="",
        amount_mm=amount,
    )


def assess(bundle: Optional[ForecastBundle], now_utc: Optional[int] = None) -> RainAssessment:
    """Assess rain for the location's current local day.

    Pure and deterministic for a given now_utc (defaults to the wall clock).
    Never raises: missing data yields a zero-valued assessment.
    """
    if bundle is None:
        return RainAssessment()
    if now_utc is None:
        now_utc = int(time.time())

    offset = bundle.timezone_offset_seconds
    start, end = local_day_window(now_utc, offset)

    if not bundle.hourly:
        entry = _day_entry(bundle.daily, start, end)
        return _assess_daily(entry) if entry is not None else RainAssessment()

    window = [h for h in bundle.hourly if start <= h.timestamp_utc < end]

    first: Optional[HourlySample] = None
    for sample in window:
        if is_rain_likely(sample):
            first = sample
            break

    max_pop = max((h.precipitation_probability for h in window), default=0.0)

    return RainAssessment(
        will_rain=first is not None or max_pop >= WINDOW_POP_THRESHOLD,
        chance_percent=to_percent(max_pop),
        first_rainy_local_time=format_local_time(first.timestamp_utc, offset) if first else "",
        amount_mm=(first.rain_mm + first.snow_mm) if first else 0.0,
    )
