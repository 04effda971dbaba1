from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Sequence
from typing import TypeVar

from .engines.registry import CityDataSources, build_sources
from .engines.types import (
    AggregatedCityRecord,
    AirQualityReading,
    CityLocation,
    CitySuggestion,
    WeatherReading,
)
from .errors import EnrichmentUnavailable
from .metrics import (
    city_enrichment_fallbacks_total,
    city_upstream_errors_total,
    city_upstream_latency_seconds,
    city_upstream_requests_total,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

SOURCES = build_sources()


async def _observe(source: str, endpoint: str, call: Awaitable[T]) -> T:
    start_time = time.perf_counter()
    city_upstream_requests_total.labels(
        source=source, endpoint=endpoint
    ).inc()
    try:
        return await call
    except Exception as exc:
        city_upstream_errors_total.labels(
            source=source,
            endpoint=endpoint,
            error_type=exc.__class__.__name__,
        ).inc()
        raise
    finally:
        duration = time.perf_counter() - start_time
        city_upstream_latency_seconds.labels(
            source=source, endpoint=endpoint
        ).observe(duration)


async def search_cities(
    query: str,
    limit: int,
    sources: CityDataSources | None = None,
) -> tuple[Sequence[CitySuggestion], int]:
    lookup = (sources or SOURCES).locations
    return await _observe(
        lookup.name, "search", lookup.search(query.strip(), limit)
    )


async def get_city(
    city_id: int, sources: CityDataSources | None = None
) -> CityLocation:
    lookup = (sources or SOURCES).locations
    return await _observe(lookup.name, "resolve", lookup.resolve(city_id))


async def get_air_quality(
    latitude: float,
    longitude: float,
    radius_m: int | None = None,
    sources: CityDataSources | None = None,
) -> AirQualityReading | None:
    lookup = (sources or SOURCES).air_quality
    return await _observe(
        lookup.name, "latest", lookup.fetch(latitude, longitude, radius_m)
    )


async def get_weather(
    latitude: float,
    longitude: float,
    sources: CityDataSources | None = None,
) -> WeatherReading:
    lookup = (sources or SOURCES).weather
    return await _observe(
        lookup.name, "current", lookup.fetch(latitude, longitude)
    )


async def _enrich(source: str, call: Awaitable[T]) -> T:
    try:
        return await call
    except Exception as exc:
        raise EnrichmentUnavailable(str(exc), source=source) from exc


async def aggregate_city(
    city_id: int, sources: CityDataSources | None = None
) -> AggregatedCityRecord:
    """Resolve a city and enrich it with air-quality and weather data.

    Location resolution errors propagate. The two enrichment requests run
    concurrently and each one falls back to an all-null reading on failure,
    so the returned record always carries both readings.
    """

    active = sources or SOURCES
    location = await get_city(city_id, active)

    air_outcome, weather_outcome = await asyncio.gather(
        _enrich(
            "air_quality",
            get_air_quality(
                location.latitude, location.longitude, sources=active
            ),
        ),
        _enrich(
            "weather",
            get_weather(location.latitude, location.longitude, active),
        ),
        return_exceptions=True,
    )

    air_quality = AirQualityReading.empty()
    if isinstance(air_outcome, AirQualityReading):
        air_quality = air_outcome
    elif air_outcome is None:
        logger.info(
            "cities.enrichment.empty source=air_quality city_id=%s", city_id
        )
        city_enrichment_fallbacks_total.labels(
            source="air_quality", reason="no_station"
        ).inc()
    else:
        _absorb(city_id, air_outcome)

    weather = WeatherReading.empty()
    if isinstance(weather_outcome, WeatherReading):
        weather = weather_outcome
    else:
        _absorb(city_id, weather_outcome)

    return AggregatedCityRecord(
        location=location,
        air_quality=air_quality,
        weather=weather,
    )


def _absorb(city_id: int, outcome: BaseException) -> None:
    if not isinstance(outcome, EnrichmentUnavailable):
        raise outcome
    cause = outcome.__cause__
    logger.warning(
        "cities.enrichment.failed source=%s city_id=%s error_type=%s err=%s",
        outcome.source,
        city_id,
        cause.__class__.__name__ if cause else None,
        outcome,
    )
    city_enrichment_fallbacks_total.labels(
        source=outcome.source, reason="error"
    ).inc()
