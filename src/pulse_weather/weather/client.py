"""HTTP client for the OpenWeatherMap API."""

import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from pulse_weather.config import (
    OPENWEATHER_API_KEY, UNITS, REQUEST_TIMEOUT_SECONDS,
    CURRENT_WEATHER_URL, FORECAST_URL, REVERSE_GEOCODING_URL, TILE_URL_TEMPLATE,
    GEOCODING_RESULT_LIMIT
)
from pulse_weather.weather.models import CurrentWeather, GeocodeCandidate, Observation

logger = logging.getLogger(__name__)

# 1x1 transparent PNG served when an overlay tile is unavailable
TRANSPARENT_PNG: bytes = bytes([
    0x89, 0x50, 0x4E, 0x47, 0x0D, 0x0A, 0x1A, 0x0A, 0x00, 0x00, 0x00, 0x0D,
    0x49, 0x48, 0x44, 0x52, 0x00, 0x00, 0x00, 0x01, 0x00, 0x00, 0x00, 0x01,
    0x08, 0x06, 0x00, 0x00, 0x00, 0x1F, 0x15, 0xC4, 0x89, 0x00, 0x00, 0x00,
    0x0A, 0x49, 0x44, 0x41, 0x54, 0x78, 0x9C, 0x63, 0x00, 0x01, 0x00, 0x00,
    0x05, 0x00, 0x01, 0x0D, 0x0A, 0x2D, 0xB4, 0x00, 0x00, 0x00, 0x00, 0x49,
    0x45, 0x4E, 0x44, 0xAE, 0x42, 0x60, 0x82,
])


class WeatherServiceError(Exception):
    """Raised when the upstream weather API fails."""
    pass


class LocationNotFoundError(WeatherServiceError):
    """Raised when the upstream weather API does not know a location."""
    pass


def _validate_coordinates(lat: float, lon: float) -> None:
    if not (-90 <= lat <= 90) or not (-180 <= lon <= 180):
        raise ValueError(f"Invalid coordinates: lat={lat}, lon={lon}")


def _first_condition(entry: Dict[str, Any]) -> Dict[str, Any]:
    conditions = entry.get('weather') or []
    return conditions[0] if conditions else {}


class OpenWeatherClient:
    """Async client for fetching weather data from OpenWeatherMap."""

    def __init__(
        self,
        api_key: str = OPENWEATHER_API_KEY,
        units: str = UNITS,
        client: Optional[httpx.AsyncClient] = None
    ):
        """Initialize the weather client.

        Args:
            api_key: OpenWeatherMap API key
            units: Unit system requested from the API ('imperial', 'metric', 'standard')
            client: HTTP client to use (creates default if None)
        """
        if not api_key:
            logger.warning("OPENWEATHER_API_KEY is not set, upstream requests will be rejected")
        self.api_key = api_key
        self.units = units
        self.client = client or httpx.AsyncClient(timeout=REQUEST_TIMEOUT_SECONDS)

    async def _get_json(self, url: str, params: Dict[str, Any]) -> Any:
        """Send a GET request and decode the JSON body.

        Raises:
            LocationNotFoundError: If the API answers 404
            WeatherServiceError: If the API answers with any other error status
            httpx.RequestError: If the request could not be sent
        """
        request_params = {**params, "appid": self.api_key}
        try:
            response = await self.client.get(url, params=request_params)
            response.raise_for_status()
            return response.json()

        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.error(f"HTTP error from OpenWeatherMap: {status} - {e.response.text}")
            if status == 404:
                raise LocationNotFoundError("Location not found") from e
            if status >= 500:
                raise WeatherServiceError("Weather service is temporarily unavailable") from e
            raise WeatherServiceError(f"Weather service error: {status}") from e
        except httpx.RequestError as e:
            logger.error(f"Request error to OpenWeatherMap: {e}")
            raise

    async def get_current_weather(
        self,
        *,
        lat: Optional[float] = None,
        lon: Optional[float] = None,
        query: Optional[str] = None,
        zip_code: Optional[str] = None
    ) -> CurrentWeather:
        """Fetch current conditions by coordinates, city query or US ZIP code.

        Args:
            lat: Latitude in decimal degrees (use with lon)
            lon: Longitude in decimal degrees (use with lat)
            query: Free-text city query, e.g. "Miami, FL"
            zip_code: US ZIP code

        Returns:
            Current weather at the matched location

        Raises:
            ValueError: If no location or invalid coordinates are given
            LocationNotFoundError: If the location is unknown to the API
            WeatherServiceError: If the API request fails
        """
        params: Dict[str, Any] = {"units": self.units}
        if lat is not None and lon is not None:
            _validate_coordinates(lat, lon)
            params.update(lat=round(lat, 4), lon=round(lon, 4))
        elif zip_code:
            params["zip"] = f"{zip_code},US"
        elif query:
            params["q"] = query
        else:
            raise ValueError("Missing required location parameters")

        logger.info(f"Fetching current weather for {params}")
        data = await self._get_json(CURRENT_WEATHER_URL, params)
        return self._parse_current_weather(data)

    async def get_forecast(self, lat: float, lon: float) -> List[Observation]:
        """Fetch the 3-hourly forecast for given coordinates.

        Args:
            lat: Latitude in decimal degrees
            lon: Longitude in decimal degrees

        Returns:
            Forecast observations in the order the API returns them
        """
        _validate_coordinates(lat, lon)
        params = {"lat": round(lat, 4), "lon": round(lon, 4), "units": self.units}

        logger.info(f"Fetching forecast for lat={lat}, lon={lon}")
        data = await self._get_json(FORECAST_URL, params)

        observations = self._parse_forecast(data)
        logger.info(f"Successfully fetched forecast with {len(observations)} entries")
        return observations

    async def reverse_geocode(
        self,
        lat: float,
        lon: float,
        limit: int = GEOCODING_RESULT_LIMIT
    ) -> List[GeocodeCandidate]:
        """Look up place names near coordinates.

        Args:
            lat: Latitude in decimal degrees
            lon: Longitude in decimal degrees
            limit: Maximum number of candidates to request

        Returns:
            Candidates in the API's relevance order
        """
        _validate_coordinates(lat, lon)
        params = {"lat": round(lat, 4), "lon": round(lon, 4), "limit": limit}

        logger.info(f"Reverse geocoding coordinates: ({lat}, {lon})")
        data = await self._get_json(REVERSE_GEOCODING_URL, params)

        candidates = [
            GeocodeCandidate(
                name=item.get('name'),
                state=item.get('state'),
                country=item.get('country'),
                lat=item.get('lat'),
                lon=item.get('lon'),
            )
            for item in data or []
        ]
        logger.info(f"Found {len(candidates)} geocoding candidates for ({lat}, {lon})")
        return candidates

    async def get_tile(self, layer: str, z: int, x: int, y: int) -> bytes:
        """Fetch a weather map overlay tile.

        Returns:
            PNG bytes, a transparent tile if the API has no tile to give
        """
        url = TILE_URL_TEMPLATE.format(layer=layer, z=z, x=x, y=y)
        response = await self.client.get(url, params={"appid": self.api_key})

        if response.is_error:
            logger.warning(f"Tile {layer}/{z}/{x}/{y} unavailable ({response.status_code}), serving blank tile")
            return TRANSPARENT_PNG
        return response.content

    def _parse_current_weather(self, data: Dict[str, Any]) -> CurrentWeather:
        main = data.get('main', {})
        condition = _first_condition(data)
        return CurrentWeather(
            name=data.get('name') or "Unknown location",
            lat=data['coord']['lat'],
            lon=data['coord']['lon'],
            temperature=main['temp'],
            feels_like=main.get('feels_like'),
            temp_min=main.get('temp_min'),
            temp_max=main.get('temp_max'),
            humidity=main.get('humidity'),
            pressure=main.get('pressure'),
            wind_speed=data.get('wind', {}).get('speed'),
            condition_code=condition.get('icon'),
            condition_text=condition.get('description'),
            country=data.get('sys', {}).get('country'),
            observed_at=data.get('dt'),
        )

    def _parse_forecast(self, data: Dict[str, Any]) -> List[Observation]:
        observations = []
        for entry in data.get('list', []):
            try:
                condition = _first_condition(entry)
                observations.append(Observation(
                    timestamp=entry['dt'],
                    temperature=entry['main']['temp'],
                    condition_code=condition.get('icon'),
                    condition_text=condition.get('description'),
                ))
            except (KeyError, TypeError, ValidationError) as e:
                logger.warning(f"Skipping invalid forecast entry: {e}")
                continue
        return observations

    async def aclose(self):
        """Close the async HTTP client."""
        await self.client.aclose()

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.aclose()
