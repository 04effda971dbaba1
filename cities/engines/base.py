from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

from .types import (
    AirQualityReading,
    CityLocation,
    CitySuggestion,
    WeatherReading,
)


class LocationLookup(ABC):
    """Abstract base for city metadata providers."""

    name: str

    @abstractmethod
    async def resolve(self, city_id: int) -> CityLocation:
        """Return city metadata or raise `LocationNotFound`/`UpstreamError`."""

    @abstractmethod
    async def search(
        self, query: str, limit: int
    ) -> tuple[Sequence[CitySuggestion], int]:
        """Return suggestions matching a name prefix and the total count."""


class AirQualityLookup(ABC):
    """Abstract base for air-quality providers."""

    name: str

    @abstractmethod
    async def fetch(
        self, latitude: float, longitude: float, radius_m: int | None = None
    ) -> AirQualityReading | None:
        """Return the nearest station reading, or None if none is nearby."""


class WeatherLookup(ABC):
    """Abstract base for current-weather providers."""

    name: str

    @abstractmethod
    async def fetch(self, latitude: float, longitude: float) -> WeatherReading:
        """Return current conditions or raise `UpstreamError`."""
