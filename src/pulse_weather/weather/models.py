"""Data models for the Pulse weather service."""

from typing import List, Optional

from pydantic import BaseModel, Field


class Observation(BaseModel):
    """Single weather reading at a point in time."""
    timestamp: int = Field(..., description="Seconds since epoch")
    temperature: float = Field(..., description="Temperature in the upstream API's units")
    condition_code: Optional[str] = Field(None, description="Condition icon code, e.g. '01d'")
    condition_text: Optional[str] = Field(None, description="Human-readable condition")


class DaySummary(BaseModel):
    """Aggregated forecast for one UTC calendar day."""
    date: str = Field(..., description="Date in YYYY-MM-DD format (UTC)")
    timestamp: int = Field(..., description="Timestamp of the first observation seen for the day")
    high: float = Field(..., description="Highest temperature of the day")
    low: float = Field(..., description="Lowest temperature of the day")
    condition_code: Optional[str] = Field(None, description="Most frequent condition code")
    condition_text: Optional[str] = Field(None, description="Most frequent condition description")


class GeocodeCandidate(BaseModel):
    """Location match returned by a geocoding lookup."""
    name: Optional[str] = Field(None, description="Short place name")
    state: Optional[str] = Field(None, description="Region or province name")
    country: Optional[str] = Field(None, description="Country name or code")
    lat: Optional[float] = Field(None, ge=-90, le=90, description="Latitude in decimal degrees")
    lon: Optional[float] = Field(None, ge=-180, le=180, description="Longitude in decimal degrees")


class CurrentWeather(BaseModel):
    """Current conditions at a location."""
    name: str = Field(..., description="Place name reported by the weather API")
    lat: float = Field(..., ge=-90, le=90, description="Latitude in decimal degrees")
    lon: float = Field(..., ge=-180, le=180, description="Longitude in decimal degrees")
    temperature: float = Field(..., description="Current temperature")
    feels_like: Optional[float] = Field(None, description="Apparent temperature")
    temp_min: Optional[float] = Field(None, description="Minimum temperature currently observed")
    temp_max: Optional[float] = Field(None, description="Maximum temperature currently observed")
    humidity: Optional[int] = Field(None, description="Relative humidity in percent")
    pressure: Optional[int] = Field(None, description="Pressure in hPa")
    wind_speed: Optional[float] = Field(None, description="Wind speed")
    condition_code: Optional[str] = Field(None, description="Condition icon code")
    condition_text: Optional[str] = Field(None, description="Human-readable condition")
    country: Optional[str] = Field(None, description="Country code")
    observed_at: Optional[int] = Field(None, description="Observation time, seconds since epoch")


class ForecastResponse(BaseModel):
    """Forecast endpoint response model."""
    lat: float = Field(..., description="Latitude in decimal degrees")
    lon: float = Field(..., description="Longitude in decimal degrees")
    units: str = Field(..., description="Unit system of temperatures")
    days: List[DaySummary] = Field(..., description="Daily forecast summaries")


class LocationResponse(BaseModel):
    """Location endpoint response model."""
    lat: float = Field(..., description="Latitude in decimal degrees")
    lon: float = Field(..., description="Longitude in decimal degrees")
    location: Optional[GeocodeCandidate] = Field(None, description="Best place match, if any")


class WeatherReport(BaseModel):
    """Current weather, location details and forecast for one location."""
    current: CurrentWeather = Field(..., description="Current conditions")
    location: Optional[GeocodeCandidate] = Field(None, description="Resolved place name")
    forecast: Optional[List[DaySummary]] = Field(None, description="Daily forecast, None if unavailable")
    units: str = Field(..., description="Unit system of temperatures")

