"""Errors raised while resolving and enriching city data.

Only location resolution failures are fatal to an aggregation. Enrichment
failures are absorbed by `cities.services.aggregate_city` and replaced by
all-null readings.
"""

from __future__ import annotations


class CityDataError(Exception):
    """Base class for upstream city data failures."""

    def __init__(self, message: str, *, source: str) -> None:
        super().__init__(message)
        self.source = source


class LocationNotFound(CityDataError):
    """The location lookup has no city for the requested id."""

    def __init__(self, city_id: int | str, *, source: str = "geodb") -> None:
        super().__init__(f"City not found: {city_id}", source=source)
        self.city_id = city_id


class UpstreamError(CityDataError):
    """Transport or parse failure talking to an upstream API."""


class EnrichmentUnavailable(CityDataError):
    """Air-quality or weather data could not be obtained for a city."""
