from __future__ import annotations

from dataclasses import dataclass

from .base import AirQualityLookup, LocationLookup, WeatherLookup
from .geodb import GeoDbLocationLookup
from .openaq import OpenAqAirQualityLookup
from .openweather import OpenWeatherLookup


@dataclass(frozen=True)
class CityDataSources:
    locations: LocationLookup
    air_quality: AirQualityLookup
    weather: WeatherLookup


def build_sources() -> CityDataSources:
    """Instantiate the configured upstream clients."""

    return CityDataSources(
        locations=GeoDbLocationLookup(),
        air_quality=OpenAqAirQualityLookup(),
        weather=OpenWeatherLookup(),
    )
