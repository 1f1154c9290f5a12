"""Shared fixtures: canned OpenWeather payloads and mock HTTP clients."""

from typing import Callable

import httpx
import pytest

# 2023-11-15 00:00:00 UTC
MIDNIGHT = 1_700_006_400


class Recorder:
    """Routes requests by URL path and remembers what was asked."""

    def __init__(self, routes: dict[str, Callable[[httpx.Request], httpx.Response]]):
        self.routes = routes
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.routes.get(request.url.path)
        if handler is None:
            return httpx.Response(404, text=f"no route for {request.url.path}")
        return handler(request)

    def paths(self) -> list[str]:
        return [r.url.path for r in self.requests]

    def params(self, key: str) -> list[str]:
        return [r.url.params.get(key) for r in self.requests]


@pytest.fixture
def mock_client():
    """Factory: mock_client({path: handler}) -> (AsyncClient, Recorder)."""

    def _build(routes):
        recorder = Recorder(routes)
        client = httpx.AsyncClient(transport=httpx.MockTransport(recorder))
        return client, recorder

    return _build


def json_response(payload, status: int = 200) -> Callable[[httpx.Request], httpx.Response]:
    return lambda request: httpx.Response(status, json=payload)


def text_response(text: str, status: int) -> Callable[[httpx.Request], httpx.Response]:
    return lambda request: httpx.Response(status, text=text)


@pytest.fixture
def onecall_payload() -> dict:
    """A trimmed One Call 3.0 body for a UTC location (offset 0)."""
    return {
        "lat": 6.0941,
        "lon": -0.2591,
        "timezone": "Africa/Accra",
        "timezone_offset": 0,
        "current": {
            "dt": MIDNIGHT + 1800,
            "temp": 24.5,
            "feels_like": 25.1,
            "pressure": 1011,
            "humidity": 88,
            "uvi": 0,
            "clouds": 75,
            "visibility": 10000,
            "wind_speed": 1.8,
            "weather": [{"id": 803, "main": "Clouds", "description": "broken clouds"}],
        },
        "hourly": [
            {
                "dt": MIDNIGHT + 7200,
                "pop": 0.45,
                "weather": [{"id": 500, "description": "light rain"}],
                "rain": {"1h": 0.6},
            },
            {
                "dt": MIDNIGHT + 3600,
                "pop": 0.1,
                "weather": [{"id": 803, "description": "broken clouds"}],
            },
            {
                "dt": MIDNIGHT + 10800,
                "pop": 1.3,
                "weather": [{"id": 501, "description": "moderate rain"}],
                "rain": {"1h": 2.1},
                "snow": {"1h": 0.0},
            },
        ],
        "daily": [
            {
                "dt": MIDNIGHT + 86400 + 43200,
                "pop": 0.2,
                "temp": {"min": 22.0, "max": 30.0},
                "weather": [{"id": 802}],
            },
            {
                "dt": MIDNIGHT + 43200,
                "pop": 0.8,
                "rain": 5.4,
                "temp": {"min": 23.1, "max": 29.4},
                "weather": [{"id": 501}],
            },
        ],
    }


@pytest.fixture
def legacy_current_payload() -> dict:
    """A /data/2.5/weather body for a UTC+1 location."""
    return {
        "dt": MIDNIGHT,
        "timezone": 3600,
        "main": {
            "temp": 11.2,
            "feels_like": 10.4,
            "humidity": 71,
            "pressure": 1019,
        },
        "wind": {"speed": 4.1},
        "clouds": {"all": 40},
        "visibility": 9000,
        "weather": [{"id": 802, "description": "scattered clouds"}],
    }


@pytest.fixture
def legacy_forecast_payload() -> dict:
    """A /data/2.5/forecast body spanning a local midnight at UTC+1."""
    return {
        "city": {"timezone": 3600},
        "list": [
            {
                "dt": MIDNIGHT - 7200,  # 23:00 local, previous day
                "main": {"temp_min": 8.0, "temp_max": 9.5},
                "weather": [{"id": 800}],
                "pop": 0.0,
            },
            {
                "dt": MIDNIGHT + 7200,  # 03:00 local
                "main": {"temp_min": 6.5, "temp_max": 12.0},
                "weather": [{"id": 500}],
                "pop": 0.55,
                "rain": {"3h": 0.9},
            },
            {
                "dt": MIDNIGHT - 3600,  # 00:00 local
                "main": {"temp_min": 7.0, "temp_max": 8.0},
                "weather": [{"id": 801}],
                "pop": 0.2,
            },
        ],
    }
