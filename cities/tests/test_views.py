from __future__ import annotations

# ruff: noqa: S101
import dataclasses
from datetime import UTC, datetime

import pytest
from pytest_django.fixtures import SettingsWrapper
from rest_framework.test import APIClient

from cities.engines.types import (
    AggregatedCityRecord,
    AirQualityReading,
    CityLocation,
    CitySuggestion,
    WeatherReading,
)
from cities.errors import LocationNotFound, UpstreamError
from cities.tests.fakes import (
    BERLIN,
    FakeAirQuality,
    FakeLocations,
    FakeWeather,
    build_fake_sources,
    upstream_down,
)

CLIENT_KEY = "test-client-key"


@pytest.fixture
def api_client(settings: SettingsWrapper) -> APIClient:
    settings.CITYSCORE_CLIENT_API_KEY = CLIENT_KEY
    client = APIClient()
    client.credentials(HTTP_X_API_KEY=CLIENT_KEY)
    return client


def test_city_endpoints_require_client_key(settings: SettingsWrapper) -> None:
    settings.CITYSCORE_CLIENT_API_KEY = CLIENT_KEY

    missing = APIClient().get("/api/v1/cities/search/", {"query": "Ber"})
    wrong = APIClient().get(
        "/api/v1/aggregate/1/", HTTP_X_API_KEY="not-the-key"
    )

    assert missing.status_code == 403
    assert wrong.status_code == 403
    body = wrong.json()
    assert body["status"] == 1
    assert body["message"] == "Invalid or missing API key."


def test_city_endpoints_deny_when_key_not_configured(
    settings: SettingsWrapper,
) -> None:
    settings.CITYSCORE_CLIENT_API_KEY = ""

    response = APIClient().get("/api/v1/aggregate/1/", HTTP_X_API_KEY="")

    assert response.status_code == 403


def test_search_returns_suggestions(
    api_client: APIClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    captured: dict[str, object] = {}

    async def fake_search(
        query: str, limit: int
    ) -> tuple[list[CitySuggestion], int]:
        captured["query"] = query
        captured["limit"] = limit
        return (
            [
                CitySuggestion(
                    id=1,
                    name="Berlin",
                    country="Germany",
                    region="Berlin",
                    latitude=52.52,
                    longitude=13.405,
                    population=3_644_826,
                )
            ],
            3,
        )

    monkeypatch.setattr("cities.views.search_cities", fake_search)

    response = api_client.get(
        "/api/v1/cities/search/", {"query": "  Ber ", "limit": 50}
    )

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == 0
    assert body["data"]["total"] == 3
    assert body["data"]["cities"][0]["name"] == "Berlin"
    assert captured == {"query": "Ber", "limit": 10}


def test_search_rejects_short_query(api_client: APIClient) -> None:
    response = api_client.get("/api/v1/cities/search/", {"query": " B "})

    assert response.status_code == 400
    body = response.json()
    assert body["status"] == 1
    assert body["errors"]["query"] == [
        "Query must be at least 2 characters long."
    ]


def test_search_maps_upstream_failure_to_502(
    api_client: APIClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    async def fake_search(
        query: str, limit: int
    ) -> tuple[list[CitySuggestion], int]:
        raise UpstreamError("timeout", source="geodb")

    monkeypatch.setattr("cities.views.search_cities", fake_search)

    response = api_client.get("/api/v1/cities/search/", {"query": "Ber"})

    assert response.status_code == 502


def test_city_detail_returns_location(
    api_client: APIClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    async def fake_get_city(city_id: int) -> CityLocation:
        return BERLIN

    monkeypatch.setattr("cities.views.get_city", fake_get_city)

    response = api_client.get("/api/v1/cities/1/")

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["name"] == "Berlin"
    assert data["population_density"] == 4090.0
    assert data["timezone"] == "Europe/Berlin"


def test_city_detail_not_found(
    api_client: APIClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    async def fake_get_city(city_id: int) -> CityLocation:
        raise LocationNotFound(city_id)

    monkeypatch.setattr("cities.views.get_city", fake_get_city)

    response = api_client.get("/api/v1/cities/999/")

    assert response.status_code == 404
    assert response.json()["message"] == "City not found."


def test_air_quality_without_station(
    api_client: APIClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    captured: dict[str, object] = {}

    async def fake_air_quality(
        latitude: float, longitude: float, radius_m: int | None = None
    ) -> AirQualityReading | None:
        captured["radius"] = radius_m
        return None

    monkeypatch.setattr("cities.views.get_air_quality", fake_air_quality)

    response = api_client.get(
        "/api/v1/air-quality/",
        {"latitude": 10, "longitude": 20, "radius": 90000},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == (
        "No air quality data available for this location"
    )
    assert body["data"] == {"air_quality": None, "search_radius": 25000}
    assert captured["radius"] == 25000


def test_air_quality_rejects_bad_coordinates(api_client: APIClient) -> None:
    response = api_client.get(
        "/api/v1/air-quality/", {"latitude": 120, "longitude": 20}
    )

    assert response.status_code == 400
    assert "latitude" in response.json()["errors"]


def test_weather_maps_upstream_failure_to_502(
    api_client: APIClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    async def fake_weather(
        latitude: float, longitude: float
    ) -> WeatherReading:
        raise UpstreamError("bad gateway", source="openweather")

    monkeypatch.setattr("cities.views.get_weather", fake_weather)

    response = api_client.get(
        "/api/v1/weather/", {"latitude": 10, "longitude": 20}
    )

    assert response.status_code == 502
    assert response.json()["status"] == 1


def test_aggregate_returns_record_and_score(
    api_client: APIClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    geodb_payload = {"id": BERLIN.id, "name": "Berlin", "wikiDataId": "Q64"}
    record = AggregatedCityRecord(
        location=dataclasses.replace(BERLIN, raw=geodb_payload),
        air_quality=AirQualityReading(
            pm25=3,
            last_updated=datetime(2024, 5, 1, 12, 0, tzinfo=UTC),
            source="Berlin Mitte",
        ),
        weather=WeatherReading(
            temperature=22.5,
            description="clear sky",
            icon="01d",
            location_name="Mitte",
        ),
    )

    async def fake_aggregate(city_id: int) -> AggregatedCityRecord:
        assert city_id == BERLIN.id
        return record

    monkeypatch.setattr("cities.views.aggregate_city", fake_aggregate)

    response = api_client.get(f"/api/v1/aggregate/{BERLIN.id}/")

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["id"] == BERLIN.id
    assert data["city"] == "Berlin"
    assert data["air_quality"]["pm25"] == 3
    assert data["air_quality"]["last_updated"] == "2024-05-01T12:00:00+00:00"
    assert data["weather"]["humidity"] is None
    assert data["weather"]["icon"] == "01d"
    assert data["weather"]["location_name"] == "Mitte"
    assert data["raw_data"] == {
        "geodb": geodb_payload,
        "openaq": None,
        "openweather": None,
    }
    assert data["score"] == {
        "total": 88,
        "air": 100,
        "temperature": 100,
        "population": 60,
        "grade": "A",
    }


def test_aggregate_unknown_city_is_404(
    api_client: APIClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    async def fake_aggregate(city_id: int) -> AggregatedCityRecord:
        raise LocationNotFound(city_id)

    monkeypatch.setattr("cities.views.aggregate_city", fake_aggregate)

    response = api_client.get("/api/v1/aggregate/404/")

    assert response.status_code == 404
    body = response.json()
    assert body["status"] == 1
    assert body["message"] == "City not found."


def test_aggregate_degrades_failed_enrichments_to_neutral_scores(
    api_client: APIClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    air = FakeAirQuality(error=upstream_down("openaq"))
    weather = FakeWeather(error=upstream_down("openweather"))
    monkeypatch.setattr(
        "cities.services.SOURCES",
        build_fake_sources(air_quality=air, weather=weather),
    )

    response = api_client.get(f"/api/v1/aggregate/{BERLIN.id}/")

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["city"] == "Berlin"
    assert data["air_quality"]["pm25"] is None
    assert data["weather"]["temperature"] is None
    assert data["score"]["air"] == 50
    assert data["score"]["temperature"] == 50
    assert data["raw_data"]["openaq"] is None
    assert data["raw_data"]["openweather"] is None
    assert air.calls == weather.calls == [(BERLIN.latitude, BERLIN.longitude)]


def test_aggregate_location_upstream_failure_is_502(
    api_client: APIClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    air = FakeAirQuality()
    monkeypatch.setattr(
        "cities.services.SOURCES",
        build_fake_sources(
            locations=FakeLocations(error=upstream_down("geodb")),
            air_quality=air,
        ),
    )

    response = api_client.get(f"/api/v1/aggregate/{BERLIN.id}/")

    assert response.status_code == 502
    assert response.json()["status"] == 1
    assert air.calls == []
