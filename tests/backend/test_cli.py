"""Tests for the command-line entry point and settings."""

import pytest

from conftest import MIDNIGHT
from raincheck import cli
from raincheck.config import Settings, get_settings
from raincheck.services.bundle import CurrentSample, ForecastBundle, RainAssessment
from raincheck.services.errors import PlaceNotFoundError
from raincheck.services.geocoding import GeoResult
from raincheck.services.pipeline import CityWeather


def _result(rain: RainAssessment) -> CityWeather:
    current = CurrentSample(
        timestamp_utc=MIDNIGHT + 9 * 3600,
        temperature=27.3,
        feels_like=29.0,
        humidity_pct=84,
        pressure_hpa=1010,
        wind_speed=3.2,
        clouds_pct=90,
        visibility_m=8000,
        weather_code=500,
        description="light rain",
    )
    return CityWeather(
        place=GeoResult(6.0941, -0.2591, "Koforidua, Eastern Region, GH"),
        forecast=ForecastBundle(current=current, timezone_offset_seconds=0, source="onecall-3.0"),
        rain=rain,
    )


@pytest.fixture
def settings(monkeypatch):
    monkeypatch.setenv("RAINCHECK_OWM_API_KEY", "test-key")
    get_settings.cache_clear()
    yield get_settings()
    get_settings.cache_clear()


class TestSettings:
    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("RAINCHECK_DEFAULT_REGION", "NG")
        monkeypatch.setenv("RAINCHECK_REQUEST_TIMEOUT", "3.5")
        s = Settings(_env_file=None)
        assert s.default_region == "NG"
        assert s.request_timeout == 3.5

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("RAINCHECK_OWM_API_KEY", raising=False)
        s = Settings(_env_file=None)
        assert s.owm_api_key == ""
        assert s.default_region == "GH"
        assert s.units == "metric"
        assert s.geocoding_provider == "openweather"

    def test_base_url_trailing_slash_removed(self):
        s = Settings(_env_file=None, owm_base_url="https://example.test/")
        assert s.owm_base_url == "https://example.test"


class TestFormatReport:
    def test_rainy(self):
        lines = cli.format_report(
            _result(RainAssessment(True, 70, "14:00", 1.2)), "metric",
        )
        assert lines[0] == "Koforidua, Eastern Region, GH (6.0941, -0.2591)"
        assert "09:00 local" in lines[1]
        assert "27.3°C" in lines[1]
        assert lines[3] == "Rain likely today from 14:00 (70% chance, about 1.2 mm)"
        assert lines[4] == "Source: onecall-3.0"

    def test_dry(self):
        lines = cli.format_report(_result(RainAssessment(False, 20, "", 0.0)), "imperial")
        assert "°F" in lines[1]
        assert lines[3] == "No rain expected today (20% chance)"


class TestMain:
    def test_no_command_prints_help(self, capsys):
        assert cli.main([]) == 0
        assert "usage" in capsys.readouterr().out

    def test_rain_success(self, settings, monkeypatch, capsys):
        async def fake_fetch(place, resolver, client, units=None):
            assert place == "Koforidua"
            assert units == "metric"
            return _result(RainAssessment(True, 40, "", 2.0))

        monkeypatch.setattr(cli, "fetch_by_city", fake_fetch)

        assert cli.main(["rain", "Koforidua"]) == 0
        out = capsys.readouterr().out
        assert "Rain likely today (40% chance, about 2 mm)" in out

    def test_rain_error_is_reported(self, settings, monkeypatch, capsys):
        async def fake_fetch(place, resolver, client, units=None):
            raise PlaceNotFoundError(place)

        monkeypatch.setattr(cli, "fetch_by_city", fake_fetch)

        assert cli.main(["rain", "Atlantis"]) == 1
        assert "City not found" in capsys.readouterr().err

    def test_rain_without_key_fails(self, monkeypatch, capsys):
        monkeypatch.setenv("RAINCHECK_OWM_API_KEY", "")
        get_settings.cache_clear()
        try:
            assert cli.main(["rain", "Accra"]) == 1
        finally:
            get_settings.cache_clear()
        assert "RAINCHECK_OWM_API_KEY" in capsys.readouterr().err

    def test_status(self, settings, capsys):
        assert cli.main(["status"]) == 0
        assert "API key: set" in capsys.readouterr().out
