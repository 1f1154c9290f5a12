"""Command-line entry point for raincheck.

Usage:
    raincheck rain "Koforidua"            Will it rain today there?
    raincheck rain "Accra, GH" --units imperial
    raincheck serve                       Start the HTTP API
    raincheck status                      Check configuration
"""

import argparse
import asyncio
import logging
import sys
from datetime import datetime, timedelta, timezone

from .config import Settings, get_settings
from .services.errors import ConfigurationError, WeatherServiceError
from .services.forecast_owm import UNITS, ForecastClient
from .services.geocoding import GeocodingResolver
from .services.pipeline import CityWeather, fetch_by_city

logger = logging.getLogger(__name__)

_TEMP_SYMBOL = {"metric": "°C", "imperial": "°F", "standard": "K"}

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def heading(msg: str) -> None:
    print(f"\n{'=' * 60}")
    print(f"  {msg}")
    print(f"{'=' * 60}\n")


def ok(msg: str) -> None:
    print(f"  [OK] {msg}")


def warn(msg: str) -> None:
    print(f"  [!!] {msg}")


def fail(msg: str) -> None:
    print(f"  [FAIL] {msg}", file=sys.stderr)


def format_report(result: CityWeather, units: str) -> list[str]:
    """Human-readable lines for a city lookup."""
    cur = result.forecast.current
    rain = result.rain
    symbol = _TEMP_SYMBOL.get(units, "")
    tz = timezone(timedelta(seconds=result.forecast.timezone_offset_seconds))
    observed = datetime.fromtimestamp(cur.timestamp_utc, tz=tz)

    lines = [
        f"{result.place.label} ({result.place.latitude:.4f}, {result.place.longitude:.4f})",
        f"Now ({observed:%H:%M} local): {cur.temperature:.1f}{symbol}, "
        f"feels like {cur.feels_like:.1f}{symbol}, {cur.description or 'n/a'}",
        f"Humidity {cur.humidity_pct}%  Pressure {cur.pressure_hpa} hPa  "
        f"Wind {cur.wind_speed:g}  Clouds {cur.clouds_pct}%",
    ]
    if rain.will_rain:
        when = f" from {rain.first_rainy_local_time}" if rain.first_rainy_local_time else ""
        amount = f", about {rain.amount_mm:g} mm" if rain.amount_mm else ""
        lines.append(f"Rain likely today{when} ({rain.chance_percent}% chance{amount})")
    else:
        lines.append(f"No rain expected today ({rain.chance_percent}% chance)")
    lines.append(f"Source: {result.forecast.source}")
    return lines


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def cmd_rain(args: argparse.Namespace, settings: Settings) -> int:
    """Look up a place and report today's rain outlook."""
    units = args.units or settings.units
    try:
        resolver = GeocodingResolver.from_settings(settings)
        client = ForecastClient.from_settings(settings)
        result = asyncio.run(fetch_by_city(args.place, resolver, client, units=units))
    except KeyboardInterrupt:
        logger.info("Lookup for %r cancelled by user", args.place)
        warn("Lookup cancelled")
        return 130
    except WeatherServiceError as exc:
        fail(str(exc))
        return 1

    for line in format_report(result, units):
        print(line)
    return 0


def cmd_serve(args: argparse.Namespace, settings: Settings) -> int:
    """Start the HTTP API under uvicorn."""
    import uvicorn

    try:
        GeocodingResolver.from_settings(settings)
        ForecastClient.from_settings(settings)
    except ConfigurationError as exc:
        fail(str(exc))
        return 1

    uvicorn.run(
        "raincheck.main:app",
        host=args.host or settings.host,
        port=args.port or settings.port,
    )
    return 0


def cmd_status(_args: argparse.Namespace, settings: Settings) -> int:
    """Check configuration state."""
    heading("Configuration status")

    if settings.owm_api_key:
        ok("OpenWeather API key: set")
    else:
        warn("OpenWeather API key: not set (RAINCHECK_OWM_API_KEY)")

    ok(f"Geocoding provider: {settings.geocoding_provider}")
    ok(f"Default region: {settings.default_region}")
    ok(f"Units: {settings.units}")
    ok(f"Request timeout: {settings.request_timeout:g}s")

    return 0 if settings.owm_api_key else 1


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="raincheck",
        description="Will it rain today? Geocode a place and check its forecast.",
    )
    sub = parser.add_subparsers(dest="command")

    rain = sub.add_parser("rain", help="Report today's rain outlook for a place")
    rain.add_argument("place", help='Place name, e.g. "Koforidua" or "Accra, GH"')
    rain.add_argument("--units", choices=UNITS, default=None)

    serve = sub.add_parser("serve", help="Start the HTTP API")
    serve.add_argument("--host", default=None)
    serve.add_argument("--port", type=int, default=None)

    sub.add_parser("status", help="Check configuration")

    args = parser.parse_args(argv)

    commands = {
        "rain": cmd_rain,
        "serve": cmd_serve,
        "status": cmd_status,
    }

    if args.command is None:
        parser.print_help()
        return 0

    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(levelname)s: %(name)s - %(message)s",
    )
    return commands[args.command](args, settings)


if __name__ == "__main__":
    sys.exit(main())
