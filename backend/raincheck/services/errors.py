"""Error taxonomy for the geocoding and forecast pipeline.

Every error carries a message that can be shown to an end user as-is.
"""

from typing import Optional


class WeatherServiceError(Exception):
    """Base class for all pipeline errors."""


class ConfigurationError(WeatherServiceError):
    """A required setting (usually a provider credential) is missing."""


class EmptyQueryError(WeatherServiceError):
    def __init__(self, message: str = "Please enter a city") -> None:
        super().__init__(message)


class PlaceNotFoundError(WeatherServiceError):
    def __init__(self, query: str, region: str = "GH") -> None:
        self.query = query
        super().__init__(
            f'City not found: "{query}". '
            f'Try adding the country (e.g., "Koforidua, {region}").'
        )


class InvalidCoordinatesError(WeatherServiceError):
    """Coordinates missing, non-finite, or out of range."""


class NetworkError(WeatherServiceError):
    """Transport-level failure (DNS, refused connection, no connectivity)."""


class ProviderError(WeatherServiceError):
    """Provider answered with a non-success status or an unusable body.

    status is None when no response was received (request timed out).
    """

    def __init__(self, message: str, status: Optional[int] = None, body: str = "") -> None:
        self.status = status
        self.body = body
        super().__init__(message)


class ProviderAuthError(ProviderError):
    def __init__(self, label: str = "Request", body: str = "") -> None:
        super().__init__(
            f"{label}: OpenWeather API key rejected (401). "
            "Check RAINCHECK_OWM_API_KEY.",
            status=401,
            body=body,
        )
