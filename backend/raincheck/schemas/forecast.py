"""Pydantic schemas for the geocoding, forecast and rain API."""

from pydantic import BaseModel

_ORM = {"from_attributes": True}


class PlaceResponse(BaseModel):
    latitude: float
    longitude: float
    label: str

    model_config = _ORM


class CurrentResponse(BaseModel):
    timestamp_utc: int
    temperature: float
    feels_like: float
    humidity_pct: int
    pressure_hpa: int
    wind_speed: float
    clouds_pct: int
    visibility_m: int | None = None
    weather_code: int
    description: str
    uv_index: float | None = None

    model_config = _ORM


class HourlyResponse(BaseModel):
    timestamp_utc: int
    precipitation_probability: float
    weather_code: int
    rain_mm: float
    snow_mm: float

    model_config = _ORM


class DailyResponse(BaseModel):
    timestamp_utc: int
    precipitation_probability: float
    rain_mm_total: float
    temperature_max: float
    temperature_min: float
    weather_code: int

    model_config = _ORM


class ForecastResponse(BaseModel):
    current: CurrentResponse
    hourly: list[HourlyResponse]
    daily: list[DailyResponse]
    timezone_offset_seconds: int
    source: str

    model_config = _ORM


class RainResponse(BaseModel):
    will_rain: bool
    chance_percent: int
    first_rainy_local_time: str
    amount_mm: float

    model_config = _ORM


class CityWeatherResponse(BaseModel):
    place: PlaceResponse
    forecast: ForecastResponse
    rain: RainResponse

    model_config = _ORM
