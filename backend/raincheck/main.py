"""FastAPI application factory and lifespan for the raincheck API."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api.router import api_router
from .config import get_settings
from .services.errors import ConfigurationError
from .services.forecast_owm import ForecastClient
from .services.geocoding import GeocodingResolver

# Configure logging for our app (uvicorn only configures its own loggers)
logging.basicConfig(
    level=get_settings().log_level.upper(),
    format="%(levelname)s:     %(name)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Fail fast on missing credentials instead of on the first request."""
    settings = get_settings()
    GeocodingResolver.from_settings(settings)
    ForecastClient.from_settings(settings)
    logger.info(
        "raincheck ready: geocoding=%s, units=%s, default region=%s",
        settings.geocoding_provider, settings.units, settings.default_region,
    )
    yield
    logger.info("Application shutdown complete")


async def _configuration_error(request: Request, exc: ConfigurationError) -> JSONResponse:
    logger.error("Configuration error on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=500, content={"detail": str(exc)})


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="raincheck",
        version="0.1.0",
        lifespan=lifespan,
    )

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(ConfigurationError, _configuration_error)

    # API routes
    app.include_router(api_router)

    return app


# Application instance
app = create_app()

if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(app, host=settings.host, port=settings.port)
