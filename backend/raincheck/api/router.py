"""Top-level API router aggregation."""

from fastapi import APIRouter

from . import forecast, geocode, rain

api_router = APIRouter(prefix="/api")

api_router.include_router(geocode.router)
api_router.include_router(forecast.router)
api_router.include_router(rain.router)


@api_router.get("/health")
def health():
    return {"status": "ok"}
