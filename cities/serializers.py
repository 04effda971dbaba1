from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import ClassVar

from django.conf import settings
from rest_framework import serializers

from config.api.responses import JSONValue

from .engines.openaq import MAX_RADIUS_M
from .scoring import WellbeingScore

MAX_SEARCH_LIMIT = int(getattr(settings, "CITY_SEARCH_MAX_LIMIT", 10))


class CitySearchParamsSerializer(serializers.Serializer):
    query: ClassVar[serializers.CharField] = serializers.CharField(
        trim_whitespace=True, max_length=100
    )
    limit: ClassVar[serializers.IntegerField] = serializers.IntegerField(
        required=False, default=5, min_value=1
    )

    def validate_query(self, value: str) -> str:
        if len(value) < 2:
            raise serializers.ValidationError(
                "Query must be at least 2 characters long."
            )
        return value

    def validate_limit(self, value: int) -> int:
        return min(value, MAX_SEARCH_LIMIT)


class CoordinatesParamsSerializer(serializers.Serializer):
    latitude: ClassVar[serializers.FloatField] = serializers.FloatField(
        min_value=-90.0, max_value=90.0
    )
    longitude: ClassVar[serializers.FloatField] = serializers.FloatField(
        min_value=-180.0, max_value=180.0
    )


class AirQualityParamsSerializer(CoordinatesParamsSerializer):
    radius: ClassVar[serializers.IntegerField] = serializers.IntegerField(
        required=False, default=MAX_RADIUS_M, min_value=1
    )

    def validate_radius(self, value: int) -> int:
        return min(value, MAX_RADIUS_M)


class CitySuggestionSerializer(serializers.Serializer):
    id: ClassVar[serializers.IntegerField] = serializers.IntegerField()
    name: ClassVar[serializers.CharField] = serializers.CharField()
    country: ClassVar[serializers.CharField] = serializers.CharField()
    region: ClassVar[serializers.CharField] = serializers.CharField(
        allow_null=True
    )
    latitude: ClassVar[serializers.FloatField] = serializers.FloatField()
    longitude: ClassVar[serializers.FloatField] = serializers.FloatField()
    population: ClassVar[serializers.IntegerField] = (
        serializers.IntegerField()
    )


class CityLocationSerializer(CitySuggestionSerializer):
    population_density: ClassVar[serializers.FloatField] = (
        serializers.FloatField(allow_null=True)
    )
    timezone: ClassVar[serializers.CharField] = serializers.CharField(
        allow_null=True
    )


class AirQualityReadingSerializer(serializers.Serializer):
    pm25: ClassVar[serializers.FloatField] = serializers.FloatField(
        allow_null=True
    )
    pm10: ClassVar[serializers.FloatField] = serializers.FloatField(
        allow_null=True
    )
    no2: ClassVar[serializers.FloatField] = serializers.FloatField(
        allow_null=True
    )
    so2: ClassVar[serializers.FloatField] = serializers.FloatField(
        allow_null=True
    )
    o3: ClassVar[serializers.FloatField] = serializers.FloatField(
        allow_null=True
    )
    co: ClassVar[serializers.FloatField] = serializers.FloatField(
        allow_null=True
    )
    last_updated: ClassVar[serializers.DateTimeField] = (
        serializers.DateTimeField(allow_null=True)
    )
    source: ClassVar[serializers.CharField] = serializers.CharField(  # type: ignore[misc,assignment]
        allow_null=True
    )


class WeatherReadingSerializer(serializers.Serializer):
    temperature: ClassVar[serializers.FloatField] = serializers.FloatField(
        allow_null=True
    )
    humidity: ClassVar[serializers.FloatField] = serializers.FloatField(
        allow_null=True
    )
    pressure: ClassVar[serializers.FloatField] = serializers.FloatField(
        allow_null=True
    )
    visibility: ClassVar[serializers.FloatField] = serializers.FloatField(
        allow_null=True
    )
    wind_speed: ClassVar[serializers.FloatField] = serializers.FloatField(
        allow_null=True
    )
    description: ClassVar[serializers.CharField] = serializers.CharField(
        allow_null=True
    )
    icon: ClassVar[serializers.CharField] = serializers.CharField(
        allow_null=True
    )
    location_name: ClassVar[serializers.CharField] = serializers.CharField(
        allow_null=True
    )


class WellbeingScoreSerializer(serializers.Serializer):
    total: ClassVar[serializers.IntegerField] = serializers.IntegerField()
    air: ClassVar[serializers.IntegerField] = serializers.IntegerField()
    temperature: ClassVar[serializers.IntegerField] = (
        serializers.IntegerField()
    )
    population: ClassVar[serializers.IntegerField] = (
        serializers.IntegerField()
    )
    grade: ClassVar[serializers.CharField] = serializers.CharField()


class AggregatedCityRecordSerializer(serializers.Serializer):
    id: ClassVar[serializers.IntegerField] = serializers.IntegerField(
        source="location.id"
    )
    city: ClassVar[serializers.CharField] = serializers.CharField()
    country: ClassVar[serializers.CharField] = serializers.CharField()
    latitude: ClassVar[serializers.FloatField] = serializers.FloatField()
    longitude: ClassVar[serializers.FloatField] = serializers.FloatField()
    population: ClassVar[serializers.IntegerField] = (
        serializers.IntegerField()
    )
    population_density: ClassVar[serializers.FloatField] = (
        serializers.FloatField(allow_null=True)
    )
    air_quality: ClassVar[AirQualityReadingSerializer] = (
        AirQualityReadingSerializer()
    )
    weather: ClassVar[WeatherReadingSerializer] = WeatherReadingSerializer()
    raw_data: ClassVar[serializers.JSONField] = serializers.JSONField(
        help_text="Upstream payloads keyed by provider, for saving as-is."
    )


def serialize_suggestions(
    suggestions: Sequence[object],
) -> list[dict[str, JSONValue]]:
    serializer = CitySuggestionSerializer(suggestions, many=True)
    return list(serializer.data)


def serialize_location(location: object) -> dict[str, JSONValue]:
    return dict(CityLocationSerializer(location).data)


def serialize_air_quality(reading: object) -> dict[str, JSONValue]:
    data = dict(AirQualityReadingSerializer(reading).data)
    last_updated = getattr(reading, "last_updated", None)
    if isinstance(last_updated, datetime):
        data["last_updated"] = last_updated.isoformat()
    return data


def serialize_weather(reading: object) -> dict[str, JSONValue]:
    return dict(WeatherReadingSerializer(reading).data)


def serialize_aggregate(
    record: object, wellbeing: WellbeingScore
) -> dict[str, JSONValue]:
    data = dict(AggregatedCityRecordSerializer(record).data)
    data["air_quality"] = serialize_air_quality(
        getattr(record, "air_quality", None)
    )
    data["score"] = dict(WellbeingScoreSerializer(wellbeing).data)
    return data
