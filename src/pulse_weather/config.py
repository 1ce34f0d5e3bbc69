"""Configuration settings for the Pulse weather service."""

import os
from typing import Final, FrozenSet
from dotenv import load_dotenv

load_dotenv()

# OpenWeatherMap configuration
OPENWEATHER_API_KEY: str = os.getenv("OPENWEATHER_API_KEY", "")
CURRENT_WEATHER_URL: Final[str] = "https://pro.openweathermap.org/data/2.5/weather"
FORECAST_URL: Final[str] = "https://pro.openweathermap.org/data/2.5/forecast"
REVERSE_GEOCODING_URL: Final[str] = "https://api.openweathermap.org/geo/1.0/reverse"
TILE_URL_TEMPLATE: Final[str] = "https://tile.openweathermap.org/map/{layer}/{z}/{x}/{y}.png"
UNITS: str = os.getenv("OPENWEATHER_UNITS", "imperial")
REQUEST_TIMEOUT_SECONDS: float = float(os.getenv("REQUEST_TIMEOUT_SECONDS", "30"))

# Forecast and geocoding settings
FORECAST_DAYS: int = int(os.getenv("FORECAST_DAYS", "5"))
GEOCODING_RESULT_LIMIT: int = int(os.getenv("GEOCODING_RESULT_LIMIT", "5"))
TILE_LAYERS: Final[FrozenSet[str]] = frozenset({
    "clouds_new",
    "precipitation_new",
    "pressure_new",
    "wind_new",
    "temp_new",
})
TILE_CACHE_MAX_AGE_SECONDS: int = int(os.getenv("TILE_CACHE_MAX_AGE_SECONDS", "3600"))

# Default location (Miami)
DEFAULT_LAT: Final[float] = 25.7617
DEFAULT_LON: Final[float] = -80.1918
DEFAULT_CITY: Final[str] = "Miami"

# Server configuration
HOST: str = os.getenv("HOST", "0.0.0.0")
PORT: int = int(os.getenv("PORT", "8000"))
DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "DEBUG" if DEBUG else "INFO").upper()

# Redis cache configuration
REDIS_URL: str = os.getenv("REDIS_URL", "redis://localhost:6379")
CACHE_EXPIRE_SECONDS: int = int(os.getenv("CACHE_EXPIRE_SECONDS", "300"))
CACHE_PREFIX: str = os.getenv("CACHE_PREFIX", "pulse-weather")

# Rate limiting configuration
RATE_LIMIT_REQUESTS_PER_SECOND: int = int(os.getenv("RATE_LIMIT_REQUESTS_PER_SECOND", "20"))
RATE_LIMIT_WINDOW_SECONDS: float = float(os.getenv("RATE_LIMIT_WINDOW_SECONDS", "1"))
RATE_LIMIT_REDIS_KEY_PREFIX: str = os.getenv("RATE_LIMIT_REDIS_KEY_PREFIX", "pulse_rate_limit")
RATE_LIMIT_ENABLED: bool = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"
