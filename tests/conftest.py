from __future__ import annotations

import os

os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("OPENWEATHER_API_KEY", "test-key")

from datetime import date, datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional

import httpx
import pytest

from pulse_weather.weather.client import OpenWeatherClient
from pulse_weather.weather.models import Observation
from pulse_weather.weather.service import WeatherService


def epoch(year: int, month: int, day: int, hour: int = 0) -> int:
    return int(datetime(year, month, day, hour, tzinfo=timezone.utc).timestamp())


@pytest.fixture
def today() -> date:
    return date(2024, 6, 1)


@pytest.fixture
def make_observation() -> Callable[..., Observation]:
    def _make(
        day: int,
        hour: int = 12,
        temperature: float = 70.0,
        code: Optional[str] = "01d",
        text: Optional[str] = "clear sky",
    ) -> Observation:
        return Observation(
            timestamp=epoch(2024, 6, day, hour),
            temperature=temperature,
            condition_code=code,
            condition_text=text,
        )

    return _make


def forecast_entry(timestamp: int, temp: float, icon: str = "01d", description: str = "clear sky") -> dict:
    return {
        "dt": timestamp,
        "main": {"temp": temp, "humidity": 50},
        "weather": [{"id": 800, "main": "Clear", "icon": icon, "description": description}],
    }


def current_weather_payload(name: str = "Miami", lat: float = 25.7743, lon: float = -80.1937) -> dict:
    return {
        "coord": {"lat": lat, "lon": lon},
        "name": name,
        "dt": epoch(2024, 6, 1, 15),
        "main": {
            "temp": 88.5,
            "feels_like": 95.1,
            "temp_min": 86.0,
            "temp_max": 90.2,
            "humidity": 62,
            "pressure": 1014,
        },
        "wind": {"speed": 9.2},
        "weather": [{"id": 802, "main": "Clouds", "icon": "03d", "description": "scattered clouds"}],
        "sys": {"country": "US"},
    }


def three_hourly_forecast(start: date, days: int) -> List[dict]:
    entries = []
    for offset in range(days):
        day = start + timedelta(days=offset)
        for hour in range(0, 24, 3):
            entries.append(forecast_entry(epoch(day.year, day.month, day.day, hour), 60.0 + hour))
    return entries


class FakeOpenWeather:
    """Routes OpenWeatherMap requests by path and records them."""

    def __init__(
        self,
        known_queries=("Miami", "Miami, FL,US"),
        forecast_status=200,
        geocode_status=200,
        forecast_start: date = date(2024, 6, 1),
        query_statuses: Optional[Dict[str, int]] = None,
    ):
        self.known_queries = known_queries
        self.forecast_start = forecast_start
        self.query_statuses = query_statuses or {}
        self.forecast_status = forecast_status
        self.geocode_status = geocode_status
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        params = request.url.params

        if path == "/data/2.5/weather":
            if params.get("q") in self.query_statuses:
                return httpx.Response(self.query_statuses[params["q"]])
            if "q" in params and params["q"] not in self.known_queries:
                return httpx.Response(404, json={"cod": "404", "message": "city not found"})
            return httpx.Response(200, json=current_weather_payload())
        if path == "/data/2.5/forecast":
            if self.forecast_status != 200:
                return httpx.Response(self.forecast_status)
            return httpx.Response(200, json={"list": three_hourly_forecast(self.forecast_start, 7)})
        if path == "/geo/1.0/reverse":
            if self.geocode_status != 200:
                return httpx.Response(self.geocode_status)
            return httpx.Response(200, json=[
                {"name": "Miami-Dade County", "state": "Florida", "country": "US"},
                {"name": "Miami", "state": "Florida", "country": "US"},
            ])
        if path.startswith("/map/"):
            return httpx.Response(200, content=b"tile")
        return httpx.Response(404)

    def queries(self) -> List[str]:
        return [r.url.params["q"] for r in self.requests if "q" in r.url.params]


def make_service(fake: FakeOpenWeather) -> WeatherService:
    client = OpenWeatherClient(
        api_key="test-key",
        client=httpx.AsyncClient(transport=httpx.MockTransport(fake)),
    )
    return WeatherService(client=client)
