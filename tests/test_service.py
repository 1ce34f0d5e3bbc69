"""Tests for the weather service."""

from __future__ import annotations

from datetime import date

import pytest

from conftest import FakeOpenWeather, make_service
from pulse_weather.weather.client import LocationNotFoundError, WeatherServiceError
from pulse_weather.weather.service import is_zip_code, us_retry_query


def test_is_zip_code() -> None:
    assert is_zip_code("33101")
    assert is_zip_code(" 33101-1234 ")
    assert not is_zip_code("3310")
    assert not is_zip_code("Miami")


def test_us_retry_query() -> None:
    assert us_retry_query("Miami, FL") == "Miami, FL,US"
    assert us_retry_query("Miami, FL, US") == "Miami, FL, US"
    assert us_retry_query("Miami") is None
    assert us_retry_query("33101") is None


async def test_report_by_coordinates() -> None:
    fake = FakeOpenWeather()

    async with make_service(fake) as service:
        report = await service.get_weather_report(lat=25.77, lon=-80.19)

    assert report.current.name == "Miami"
    assert report.location.name == "Miami"
    assert report.units == "imperial"
    assert report.forecast is not None
    assert 0 < len(report.forecast) <= 5


async def test_report_retries_with_us_suffix() -> None:
    fake = FakeOpenWeather()

    async with make_service(fake) as service:
        report = await service.get_weather_report(query="Miami, FL")

    assert fake.queries() == ["Miami, FL", "Miami, FL,US"]
    assert report.current.name == "Miami"


async def test_report_not_found_without_comma() -> None:
    fake = FakeOpenWeather()

    async with make_service(fake) as service:
        with pytest.raises(LocationNotFoundError, match="Miami, FL"):
            await service.get_weather_report(query="Atlantis")

    assert fake.queries() == ["Atlantis"]


async def test_report_not_found_after_retry() -> None:
    fake = FakeOpenWeather(known_queries=())

    async with make_service(fake) as service:
        with pytest.raises(LocationNotFoundError):
            await service.get_weather_report(query="Springfield, ZZ")

    assert fake.queries() == ["Springfield, ZZ", "Springfield, ZZ,US"]


async def test_report_by_zip_code() -> None:
    fake = FakeOpenWeather()

    async with make_service(fake) as service:
        await service.get_weather_report(query="33101")

    assert fake.requests[0].url.params["zip"] == "33101,US"


async def test_report_requires_location() -> None:
    async with make_service(FakeOpenWeather()) as service:
        with pytest.raises(ValueError):
            await service.get_weather_report()


async def test_report_survives_forecast_and_geocoding_failures() -> None:
    fake = FakeOpenWeather(forecast_status=503, geocode_status=500)

    async with make_service(fake) as service:
        report = await service.get_weather_report(lat=25.77, lon=-80.19)

    assert report.current.name == "Miami"
    assert report.forecast is None
    assert report.location is None


async def test_forecast_excludes_today() -> None:
    async with make_service(FakeOpenWeather()) as service:
        days = await service.get_forecast(25.77, -80.19, today=date(2024, 6, 1))

    assert [d.date for d in days] == [
        "2024-06-02", "2024-06-03", "2024-06-04", "2024-06-05", "2024-06-06"
    ]
    assert days[0].low == 60.0
    assert days[0].high == 81.0
    assert days[0].condition_code == "01d"


async def test_forecast_propagates_upstream_errors() -> None:
    async with make_service(FakeOpenWeather(forecast_status=503)) as service:
        with pytest.raises(WeatherServiceError, match="temporarily unavailable"):
            await service.get_forecast(25.77, -80.19)


@pytest.mark.parametrize("status", [500, 503, 401])
async def test_report_failed_retry_reads_as_not_found(status) -> None:
    fake = FakeOpenWeather(known_queries=(), query_statuses={"Miami, FL,US": status})

    async with make_service(fake) as service:
        with pytest.raises(LocationNotFoundError, match="Miami, FL"):
            await service.get_weather_report(query="Miami, FL")

    assert fake.queries() == ["Miami, FL", "Miami, FL,US"]


async def test_report_first_lookup_outage_is_not_retried() -> None:
    fake = FakeOpenWeather(query_statuses={"Miami, FL": 503})

    async with make_service(fake) as service:
        with pytest.raises(WeatherServiceError, match="temporarily unavailable") as excinfo:
            await service.get_weather_report(query="Miami, FL")

    assert not isinstance(excinfo.value, LocationNotFoundError)
    assert fake.queries() == ["Miami, FL"]
