"""API endpoints for the Pulse weather service."""

import logging
from typing import Optional

import httpx
from fastapi import APIRouter, HTTPException, Path, Query
from fastapi.responses import Response
from fastapi_cache.decorator import cache
from pydantic import ValidationError

from pulse_weather.config import (
    DEFAULT_LAT, DEFAULT_LON, DEFAULT_CITY,
    CACHE_EXPIRE_SECONDS, FORECAST_DAYS, TILE_LAYERS, TILE_CACHE_MAX_AGE_SECONDS, UNITS
)
from pulse_weather.weather.client import LocationNotFoundError, WeatherServiceError
from pulse_weather.weather.models import ForecastResponse, LocationResponse, WeatherReport
from pulse_weather.weather.service import WeatherService

logger = logging.getLogger(__name__)

# Create router
router = APIRouter(prefix="/weather", tags=["weather"])


def get_weather_service() -> WeatherService:
    """Dependency to get weather service instance."""
    return WeatherService()


def _raise_http_error(e: Exception, action: str) -> None:
    """Translate service errors into HTTP errors."""
    if isinstance(e, LocationNotFoundError):
        logger.warning(f"Location not found while {action}: {e}")
        raise HTTPException(status_code=404, detail=str(e))
    if isinstance(e, ValueError) and not isinstance(e, ValidationError):
        logger.error(f"Invalid request while {action}: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    if isinstance(e, ValidationError):
        logger.error(f"Data validation error while {action}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error: data validation failed")
    if isinstance(e, (WeatherServiceError, httpx.HTTPError)):
        logger.error(f"Upstream error while {action}: {e}")
        raise HTTPException(status_code=502, detail=str(e) or "Weather service temporarily unavailable")

    logger.error(f"Unexpected error while {action}: {e}")
    raise HTTPException(status_code=502, detail="Weather service temporarily unavailable")


@router.get("/", response_model=WeatherReport)
@cache(expire=CACHE_EXPIRE_SECONDS)
async def get_weather(
    lat: Optional[float] = Query(
        None,
        ge=-90,
        le=90,
        description="Latitude in decimal degrees (use with lon)"
    ),
    lon: Optional[float] = Query(
        None,
        ge=-180,
        le=180,
        description="Longitude in decimal degrees (use with lat)"
    ),
    q: Optional[str] = Query(
        None,
        min_length=1,
        description="City name or US ZIP code (alternative to lat/lon, not both)"
    )
) -> WeatherReport:
    """Get current weather, place name and daily forecast.

    Args:
        lat: Latitude in decimal degrees (must provide with lon)
        lon: Longitude in decimal degrees (must provide with lat)
        q: City name or ZIP code as alternative to lat/lon

    Returns:
        WeatherReport for the location

    Raises:
        HTTPException: If parameters are invalid or the weather API fails
    """
    lat, lon, q = validate_weather_parameters(lat, lon, q)

    try:
        weather_service = get_weather_service()
        async with weather_service:
            report = await weather_service.get_weather_report(query=q, lat=lat, lon=lon)

        logger.info(f"Successfully built weather report for {report.current.name}")
        return report

    except Exception as e:
        _raise_http_error(e, "getting weather report")


@router.get("/forecast", response_model=ForecastResponse)
@cache(expire=CACHE_EXPIRE_SECONDS)
async def get_forecast(
    lat: float = Query(..., ge=-90, le=90, description="Latitude in decimal degrees"),
    lon: float = Query(..., ge=-180, le=180, description="Longitude in decimal degrees")
) -> ForecastResponse:
    """Get daily forecast summaries for the next days, excluding today."""
    try:
        weather_service = get_weather_service()
        async with weather_service:
            days = await weather_service.get_forecast(lat, lon)

        logger.info(f"Successfully retrieved forecast with {len(days)} days")
        return ForecastResponse(lat=lat, lon=lon, units=UNITS, days=days)

    except Exception as e:
        _raise_http_error(e, "getting forecast")


@router.get("/location", response_model=LocationResponse)
@cache(expire=CACHE_EXPIRE_SECONDS)
async def get_location(
    lat: float = Query(..., ge=-90, le=90, description="Latitude in decimal degrees"),
    lon: float = Query(..., ge=-180, le=180, description="Longitude in decimal degrees")
) -> LocationResponse:
    """Get the most city-like place name for coordinates."""
    weather_service = get_weather_service()
    async with weather_service:
        location = await weather_service.get_location(lat, lon)

    return LocationResponse(lat=lat, lon=lon, location=location)


@router.get("/tiles/{layer}/{z}/{x}/{y}.png", response_class=Response)
async def get_tile(
    layer: str,
    z: int = Path(..., ge=0, le=20),
    x: int = Path(..., ge=0),
    y: int = Path(..., ge=0)
) -> Response:
    """Proxy a weather map overlay tile."""
    if layer not in TILE_LAYERS:
        raise HTTPException(
            status_code=400,
            detail=f"Unknown tile layer '{layer}'. Use one of: {', '.join(sorted(TILE_LAYERS))}"
        )

    try:
        weather_service = get_weather_service()
        async with weather_service:
            content = await weather_service.get_tile(layer, z, x, y)
    except httpx.HTTPError as e:
        logger.error(f"Error fetching tile {layer}/{z}/{x}/{y}: {e}")
        raise HTTPException(status_code=502, detail="Failed to fetch weather data")

    return Response(
        content=content,
        media_type="image/png",
        headers={"Cache-Control": f"public, max-age={TILE_CACHE_MAX_AGE_SECONDS}"}
    )


def validate_weather_parameters(
    lat: Optional[float],
    lon: Optional[float],
    q: Optional[str]
) -> tuple[Optional[float], Optional[float], Optional[str]]:
    """
    Validate and normalize weather request parameters.

    Args:
        lat: Latitude in decimal degrees
        lon: Longitude in decimal degrees
        q: City name or ZIP code

    Returns:
        Tuple of (latitude, longitude, query)

    Raises:
        HTTPException: If validation fails
    """
    has_coordinates = lat is not None or lon is not None
    has_query = q is not None and q.strip() != ""

    if has_coordinates and has_query:
        raise HTTPException(
            status_code=400,
            detail="Cannot provide both coordinates and a search query. Use either lat/lon OR q."
        )

    if not has_coordinates and not has_query:
        logger.info(f"Using default location: {DEFAULT_CITY}")
        return DEFAULT_LAT, DEFAULT_LON, None

    if has_coordinates and (lat is None or lon is None):
        raise HTTPException(
            status_code=400,
            detail="Both latitude and longitude must be provided when using coordinates."
        )

    return lat, lon, q


@router.get("/health")
async def health_check() -> dict:
    """Health check endpoint.

    Returns:
        Health status response
    """
    return {"status": "healthy", "service": "pulse-weather"}


@router.get("/info")
async def get_service_info() -> dict:
    """Get service information.

    Returns:
        Service information including default location and features
    """
    return {
        "service": "Pulse Weather Service",
        "version": "0.1.0",
        "units": UNITS,
        "forecast_days": FORECAST_DAYS,
        "default_location": {
            "city": DEFAULT_CITY,
            "latitude": DEFAULT_LAT,
            "longitude": DEFAULT_LON
        },
        "tile_layers": sorted(TILE_LAYERS),
        "features": [
            "Current weather by coordinates, city or US ZIP code",
            "Daily forecast summaries with high, low and dominant condition",
            "City-level place names from reverse geocoding",
            "Weather map overlay tiles"
        ],
        "data_source": "OpenWeatherMap API"
    }
