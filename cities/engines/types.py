from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class CitySuggestion:
    id: int
    name: str
    country: str
    region: str | None
    latitude: float
    longitude: float
    population: int


@dataclass(frozen=True)
class CityLocation:
    id: int
    name: str
    country: str
    latitude: float
    longitude: float
    population: int
    population_density: float | None = None
    region: str | None = None
    timezone: str | None = None
    raw: dict[str, Any] | None = field(
        default=None, compare=False, repr=False
    )


@dataclass(frozen=True)
class AirQualityReading:
    pm25: float | None = None
    pm10: float | None = None
    no2: float | None = None
    so2: float | None = None
    o3: float | None = None
    co: float | None = None
    last_updated: datetime | None = None
    source: str | None = None
    raw: dict[str, Any] | None = field(
        default=None, compare=False, repr=False
    )

    @classmethod
    def empty(cls) -> AirQualityReading:
        """Reading used when no station data could be obtained."""

        return cls()


@dataclass(frozen=True)
class WeatherReading:
    temperature: float | None = None
    humidity: float | None = None
    pressure: float | None = None
    visibility: float | None = None
    wind_speed: float | None = None
    description: str | None = None
    icon: str | None = None
    location_name: str | None = None
    raw: dict[str, Any] | None = field(
        default=None, compare=False, repr=False
    )

    @classmethod
    def empty(cls) -> WeatherReading:
        return cls()


@dataclass(frozen=True)
class AggregatedCityRecord:
    location: CityLocation
    air_quality: AirQualityReading = field(
        default_factory=AirQualityReading.empty
    )
    weather: WeatherReading = field(default_factory=WeatherReading.empty)

    @property
    def city(self) -> str:
        return self.location.name

    @property
    def country(self) -> str:
        return self.location.country

    @property
    def latitude(self) -> float:
        return self.location.latitude

    @property
    def longitude(self) -> float:
        return self.location.longitude

    @property
    def population(self) -> int:
        return self.location.population

    @property
    def population_density(self) -> float | None:
        return self.location.population_density

    @property
    def raw_data(self) -> dict[str, Any]:
        """Upstream payloads keyed by provider; null where none arrived."""

        return {
            "geodb": self.location.raw,
            "openaq": self.air_quality.raw,
            "openweather": self.weather.raw,
        }
