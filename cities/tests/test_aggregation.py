from __future__ import annotations

# ruff: noqa: S101
import asyncio
import logging
from datetime import UTC, datetime

import pytest

from cities.engines.types import (
    AggregatedCityRecord,
    AirQualityReading,
    WeatherReading,
)
from cities.errors import LocationNotFound, UpstreamError
from cities.metrics import (
    city_enrichment_fallbacks_total,
    city_upstream_errors_total,
    city_upstream_requests_total,
)
from cities.scoring import score
from cities.services import (
    aggregate_city,
    get_air_quality,
    get_city,
    search_cities,
)
from cities.tests.fakes import (
    BERLIN,
    FakeAirQuality,
    FakeLocations,
    FakeWeather,
    build_fake_sources,
    upstream_down,
)

AIR = AirQualityReading(
    pm25=8.2,
    pm10=14.0,
    no2=21.5,
    last_updated=datetime(2024, 5, 1, 12, 0, tzinfo=UTC),
    source="Berlin Mitte",
)
WEATHER = WeatherReading(
    temperature=19.4,
    humidity=62,
    pressure=1013,
    visibility=10.0,
    wind_speed=3.6,
    description="scattered clouds",
)


def test_aggregate_city_merges_all_sources() -> None:
    air = FakeAirQuality(reading=AIR)
    weather = FakeWeather(reading=WEATHER)
    sources = build_fake_sources(air_quality=air, weather=weather)

    record = asyncio.run(aggregate_city(BERLIN.id, sources))

    assert record == AggregatedCityRecord(
        location=BERLIN, air_quality=AIR, weather=WEATHER
    )
    assert record.city == "Berlin"
    assert record.population_density == 4090.0
    assert air.calls == [(BERLIN.latitude, BERLIN.longitude)]
    assert weather.calls == [(BERLIN.latitude, BERLIN.longitude)]


def test_aggregate_city_absorbs_air_quality_failure(
    caplog: pytest.LogCaptureFixture,
) -> None:
    counter = city_enrichment_fallbacks_total.labels(
        source="air_quality", reason="error"
    )
    before = counter._value.get()
    sources = build_fake_sources(
        air_quality=FakeAirQuality(error=upstream_down("openaq")),
        weather=FakeWeather(reading=WEATHER),
    )

    with caplog.at_level(logging.WARNING, logger="cities.services"):
        record = asyncio.run(aggregate_city(BERLIN.id, sources))

    assert record.air_quality == AirQualityReading.empty()
    assert record.weather == WEATHER
    assert counter._value.get() == before + 1
    assert "cities.enrichment.failed source=air_quality" in caplog.text
    assert "error_type=UpstreamError" in caplog.text


def test_aggregate_city_absorbs_weather_failure() -> None:
    sources = build_fake_sources(
        air_quality=FakeAirQuality(reading=AIR),
        weather=FakeWeather(error=RuntimeError("boom")),
    )

    record = asyncio.run(aggregate_city(BERLIN.id, sources))

    assert record.air_quality == AIR
    assert record.weather == WeatherReading.empty()


def test_aggregate_city_survives_both_enrichments_failing() -> None:
    sources = build_fake_sources(
        air_quality=FakeAirQuality(error=upstream_down("openaq")),
        weather=FakeWeather(error=upstream_down("openweather")),
    )

    record = asyncio.run(aggregate_city(BERLIN.id, sources))

    assert record.location == BERLIN
    assert record.air_quality == AirQualityReading.empty()
    assert record.weather == WeatherReading.empty()

    result = score(record)
    assert result.air == 50
    assert result.temperature == 50
    assert result.population == 60


def test_aggregate_city_treats_missing_station_as_null_reading(
    caplog: pytest.LogCaptureFixture,
) -> None:
    counter = city_enrichment_fallbacks_total.labels(
        source="air_quality", reason="no_station"
    )
    before = counter._value.get()
    sources = build_fake_sources(
        air_quality=FakeAirQuality(reading=None),
        weather=FakeWeather(reading=WEATHER),
    )

    with caplog.at_level(logging.INFO, logger="cities.services"):
        record = asyncio.run(aggregate_city(BERLIN.id, sources))

    assert record.air_quality == AirQualityReading.empty()
    assert counter._value.get() == before + 1
    assert "cities.enrichment.empty source=air_quality" in caplog.text


def test_aggregate_city_propagates_location_not_found() -> None:
    air = FakeAirQuality(reading=AIR)
    weather = FakeWeather(reading=WEATHER)
    sources = build_fake_sources(air_quality=air, weather=weather)

    with pytest.raises(LocationNotFound) as excinfo:
        asyncio.run(aggregate_city(999, sources))

    assert excinfo.value.city_id == 999
    assert air.calls == []
    assert weather.calls == []


def test_aggregate_city_propagates_location_upstream_error() -> None:
    sources = build_fake_sources(
        locations=FakeLocations(error=upstream_down("geodb")),
    )

    with pytest.raises(UpstreamError):
        asyncio.run(aggregate_city(BERLIN.id, sources))


def test_aggregate_city_fetches_enrichments_concurrently() -> None:
    async def run() -> AggregatedCityRecord:
        air_started = asyncio.Event()
        weather_started = asyncio.Event()
        # Each fetch waits for the other to start; a sequential
        # implementation would never finish.
        sources = build_fake_sources(
            air_quality=FakeAirQuality(
                reading=AIR, started=air_started, wait_for=weather_started
            ),
            weather=FakeWeather(
                reading=WEATHER, started=weather_started, wait_for=air_started
            ),
        )
        return await asyncio.wait_for(
            aggregate_city(BERLIN.id, sources), timeout=2
        )

    record = asyncio.run(run())

    assert record.air_quality == AIR
    assert record.weather == WEATHER


def test_get_city_records_upstream_metrics() -> None:
    locations = FakeLocations(error=upstream_down("geodb"))
    sources = build_fake_sources(locations=locations)
    requests = city_upstream_requests_total.labels(
        source=locations.name, endpoint="resolve"
    )
    errors = city_upstream_errors_total.labels(
        source=locations.name,
        endpoint="resolve",
        error_type="UpstreamError",
    )
    requests_before = requests._value.get()
    errors_before = errors._value.get()

    with pytest.raises(UpstreamError):
        asyncio.run(get_city(BERLIN.id, sources))

    assert requests._value.get() == requests_before + 1
    assert errors._value.get() == errors_before + 1


def test_search_cities_strips_query_and_returns_total() -> None:
    sources = build_fake_sources()

    suggestions, total = asyncio.run(search_cities("  ber ", 5, sources))

    assert total == 1
    assert [s.name for s in suggestions] == ["Berlin"]


def test_get_air_quality_passes_none_through() -> None:
    sources = build_fake_sources(air_quality=FakeAirQuality(reading=None))

    assert asyncio.run(get_air_quality(1.0, 2.0, sources=sources)) is None
