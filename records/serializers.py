from __future__ import annotations

from typing import Any

from django.conf import settings
from rest_framework import serializers

from .models import Record

MAX_PAGE_SIZE = int(getattr(settings, "RECORDS_MAX_PAGE_SIZE", 50))
MAX_LEADERBOARD_LIMIT = int(getattr(settings, "LEADERBOARD_MAX_LIMIT", 100))
SORTABLE_FIELDS = ("created_at", "total_score", "city", "country")
# Upper bound of PositiveBigIntegerField.
MAX_POPULATION = 9_223_372_036_854_775_807


class RecordAirQualitySerializer(serializers.Serializer):
    pm25 = serializers.FloatField(allow_null=True, default=None)
    pm10 = serializers.FloatField(allow_null=True, default=None)
    no2 = serializers.FloatField(allow_null=True, default=None)
    so2 = serializers.FloatField(allow_null=True, default=None)
    o3 = serializers.FloatField(allow_null=True, default=None)
    co = serializers.FloatField(allow_null=True, default=None)
    last_updated = serializers.DateTimeField(
        source="air_last_updated", allow_null=True, default=None
    )
    source = serializers.CharField(  # type: ignore[misc,assignment]
        source="air_source", allow_null=True, default=None, max_length=200
    )


class RecordWeatherSerializer(serializers.Serializer):
    temperature = serializers.FloatField(allow_null=True, default=None)
    humidity = serializers.FloatField(
        allow_null=True, default=None, min_value=0, max_value=100
    )
    pressure = serializers.FloatField(allow_null=True, default=None)
    visibility = serializers.FloatField(allow_null=True, default=None)
    wind_speed = serializers.FloatField(allow_null=True, default=None)
    description = serializers.CharField(
        source="weather_description",
        allow_null=True,
        default=None,
        max_length=200,
    )


class RecordSerializer(serializers.ModelSerializer):
    # Nested blocks map onto the flat model columns.
    air_quality = RecordAirQualitySerializer(source="*", required=False)
    weather = RecordWeatherSerializer(source="*", required=False)
    wellbeing_score = serializers.SerializerMethodField()
    city = serializers.CharField(max_length=100, trim_whitespace=True)
    country = serializers.CharField(max_length=100, trim_whitespace=True)
    latitude = serializers.FloatField(min_value=-90.0, max_value=90.0)
    longitude = serializers.FloatField(min_value=-180.0, max_value=180.0)
    population = serializers.IntegerField(
        min_value=0, max_value=MAX_POPULATION, default=0
    )
    population_density = serializers.FloatField(
        min_value=0, allow_null=True, default=None
    )

    class Meta:
        model = Record
        fields = [
            "id",
            "city",
            "country",
            "latitude",
            "longitude",
            "population",
            "population_density",
            "air_quality",
            "weather",
            "wellbeing_score",
            "raw_data",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "created_at", "updated_at"]
        extra_kwargs = {"raw_data": {"write_only": True, "required": False}}

    def get_wellbeing_score(self, obj: Record) -> dict[str, Any]:
        wellbeing = obj.wellbeing_score
        return {
            "total": wellbeing.total,
            "air": wellbeing.air,
            "temperature": wellbeing.temperature,
            "population": wellbeing.population,
            "grade": wellbeing.grade,
        }


class RecordListParamsSerializer(serializers.Serializer):
    city = serializers.CharField(required=False, max_length=100)
    country = serializers.CharField(required=False, max_length=100)
    sort_by = serializers.ChoiceField(
        choices=SORTABLE_FIELDS, required=False, default="created_at"
    )
    sort_order = serializers.ChoiceField(
        choices=("asc", "desc"), required=False, default="desc"
    )
    page = serializers.IntegerField(required=False, default=1, min_value=1)
    limit = serializers.IntegerField(required=False, default=10, min_value=1)

    def validate_limit(self, value: int) -> int:
        return min(value, MAX_PAGE_SIZE)


class LeaderboardParamsSerializer(serializers.Serializer):
    limit = serializers.IntegerField(required=False, default=20, min_value=1)
    min_records = serializers.IntegerField(
        required=False, default=1, min_value=1
    )

    def validate_limit(self, value: int) -> int:
        return min(value, MAX_LEADERBOARD_LIMIT)


class LeaderboardEntrySerializer(serializers.Serializer):
    city = serializers.CharField()
    country = serializers.CharField()
    wellbeing_score = serializers.FloatField()
    air_quality_score = serializers.FloatField()
    temperature_score = serializers.FloatField()
    population_score = serializers.FloatField()
    record_count = serializers.IntegerField()
    last_updated = serializers.DateTimeField()
    population = serializers.IntegerField()
