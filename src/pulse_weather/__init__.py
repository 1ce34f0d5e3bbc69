"""Pulse weather service: current conditions, daily forecasts and place names."""

__version__ = "0.1.0"
