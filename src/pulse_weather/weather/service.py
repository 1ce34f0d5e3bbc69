"""Weather service combining current conditions, place names and forecasts."""

import logging
import re
from datetime import date, datetime, timezone
from typing import List, Optional

import httpx
from pydantic import ValidationError

from pulse_weather.config import FORECAST_DAYS
from pulse_weather.weather.client import (
    OpenWeatherClient, WeatherServiceError, LocationNotFoundError
)
from pulse_weather.weather.location import resolve_location_name
from pulse_weather.weather.models import (
    CurrentWeather, DaySummary, GeocodeCandidate, WeatherReport
)
from pulse_weather.weather.summary import summarize_forecast

logger = logging.getLogger(__name__)

ZIP_CODE_PATTERN = re.compile(r"^\d{5}(-\d{4})?$")

NOT_FOUND_MESSAGE = (
    "Location not found. Please check the spelling and try again. "
    "For US cities, try format like 'Miami, FL' or 'Miami, Florida'."
)


def is_zip_code(query: str) -> bool:
    """Check whether a search query is a US ZIP or ZIP+4 code."""
    return bool(ZIP_CODE_PATTERN.match(query.strip()))


def us_retry_query(query: str) -> Optional[str]:
    """Return the query to retry with after a miss, or None if no retry applies.

    Only "City, Region" style queries are retried, with ",US" appended unless
    the query already mentions US.
    """
    if is_zip_code(query) or ',' not in query:
        return None
    return query if 'US' in query else f"{query},US"


class WeatherService:
    """Service for assembling weather data for one location."""

    def __init__(self, client: Optional[OpenWeatherClient] = None):
        """Initialize the weather service.

        Args:
            client: OpenWeatherMap client instance (creates default if None)
        """
        self.client = client or OpenWeatherClient()

    async def get_weather_report(
        self,
        *,
        query: Optional[str] = None,
        lat: Optional[float] = None,
        lon: Optional[float] = None
    ) -> WeatherReport:
        """
        Get current weather, place name and forecast for a query or coordinates.

        Args:
            query: City name or US ZIP code
            lat: Latitude in decimal degrees (use with lon)
            lon: Longitude in decimal degrees (use with lat)

        Returns:
            WeatherReport; location and forecast are None when unavailable

        Raises:
            LocationNotFoundError: If the query matches no location
            WeatherServiceError: If current weather cannot be fetched
            ValueError: If neither a query nor coordinates are given
        """
        if query and query.strip():
            current = await self._current_weather_for_query(query.strip())
        elif lat is not None and lon is not None:
            current = await self.client.get_current_weather(lat=lat, lon=lon)
        else:
            raise ValueError("Must provide either a search query or coordinates")

        logger.info(f"Current weather for {current.name} at ({current.lat}, {current.lon})")

        location = await self.get_location(current.lat, current.lon)

        forecast: Optional[List[DaySummary]] = None
        try:
            forecast = await self.get_forecast(current.lat, current.lon)
        except (WeatherServiceError, httpx.HTTPError, ValidationError) as e:
            logger.error(f"Forecast unavailable for ({current.lat}, {current.lon}): {e}")

        return WeatherReport(
            current=current,
            location=location,
            forecast=forecast,
            units=self.client.units
        )

    async def _current_weather_for_query(self, query: str) -> CurrentWeather:
        """Fetch current weather for a search query, retrying US-style queries once."""
        try:
            if is_zip_code(query):
                return await self.client.get_current_weather(zip_code=query)
            return await self.client.get_current_weather(query=query)

        except LocationNotFoundError:
            retry_query = us_retry_query(query)
            if retry_query is None:
                raise LocationNotFoundError(NOT_FOUND_MESSAGE)

            logger.info(f"No match for '{query}', retrying as '{retry_query}'")
            try:
                return await self.client.get_current_weather(query=retry_query)
            except WeatherServiceError as e:
                logger.warning(f"Retry as '{retry_query}' failed: {e}")
                raise LocationNotFoundError(NOT_FOUND_MESSAGE)

    async def get_forecast(
        self,
        lat: float,
        lon: float,
        today: Optional[date] = None
    ) -> List[DaySummary]:
        """Get daily forecast summaries, excluding today.

        Args:
            lat: Latitude in decimal degrees
            lon: Longitude in decimal degrees
            today: Day to leave out (current UTC date if None)

        Returns:
            Up to FORECAST_DAYS daily summaries
        """
        observations = await self.client.get_forecast(lat, lon)
        reference_day = today or datetime.now(timezone.utc).date()

        days = summarize_forecast(observations, reference_day, max_days=FORECAST_DAYS)
        logger.info(f"Summarized {len(observations)} observations into {len(days)} days")
        return days

    async def get_location(self, lat: float, lon: float) -> Optional[GeocodeCandidate]:
        """Get the most city-like place name for coordinates.

        Returns:
            Selected candidate, or None if lookup fails or finds nothing
        """
        try:
            candidates = await self.client.reverse_geocode(lat, lon)
        except (WeatherServiceError, httpx.HTTPError, ValidationError) as e:
            logger.warning(f"Could not fetch location details for ({lat}, {lon}): {e}")
            return None

        location = resolve_location_name(candidates)
        if location:
            logger.info(f"Resolved ({lat}, {lon}) to '{location.name}'")
        else:
            logger.info(f"No place name found for ({lat}, {lon})")
        return location

    async def get_tile(self, layer: str, z: int, x: int, y: int) -> bytes:
        """Get a map overlay tile as PNG bytes."""
        return await self.client.get_tile(layer, z, x, y)

    async def aclose(self):
        """Close the weather client."""
        if self.client:
            try:
                await self.client.aclose()
            except Exception as e:
                logger.error(f"Error closing weather client: {e}")

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.aclose()
