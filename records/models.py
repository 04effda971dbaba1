from __future__ import annotations

from typing import Any, Final

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from cities.engines.types import (
    AggregatedCityRecord,
    AirQualityReading,
    CityLocation,
    WeatherReading,
)
from cities.scoring import WellbeingScore, score

_LAT_MIN: Final[float] = -90.0
_LAT_MAX: Final[float] = 90.0
_LON_MIN: Final[float] = -180.0
_LON_MAX: Final[float] = 180.0

_SCORE_VALIDATORS = [MinValueValidator(0), MaxValueValidator(100)]


class Record(models.Model):
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="wellbeing_records",
    )

    city = models.CharField(max_length=100)
    country = models.CharField(max_length=100)
    latitude = models.FloatField(
        validators=[MinValueValidator(_LAT_MIN), MaxValueValidator(_LAT_MAX)]
    )
    longitude = models.FloatField(
        validators=[MinValueValidator(_LON_MIN), MaxValueValidator(_LON_MAX)]
    )
    population = models.PositiveBigIntegerField(default=0)
    population_density = models.FloatField(
        null=True, blank=True, validators=[MinValueValidator(0)]
    )

    # Air quality (OpenAQ)
    pm25 = models.FloatField(null=True, blank=True)
    pm10 = models.FloatField(null=True, blank=True)
    no2 = models.FloatField(null=True, blank=True)
    so2 = models.FloatField(null=True, blank=True)
    o3 = models.FloatField(null=True, blank=True)
    co = models.FloatField(null=True, blank=True)
    air_last_updated = models.DateTimeField(null=True, blank=True)
    air_source = models.CharField(max_length=200, null=True, blank=True)

    # Weather (OpenWeatherMap)
    temperature = models.FloatField(null=True, blank=True)
    humidity = models.FloatField(
        null=True,
        blank=True,
        validators=[MinValueValidator(0), MaxValueValidator(100)],
    )
    pressure = models.FloatField(null=True, blank=True)
    visibility = models.FloatField(null=True, blank=True)
    wind_speed = models.FloatField(null=True, blank=True)
    weather_description = models.CharField(
        max_length=200, null=True, blank=True
    )

    # Derived on save; never trusted from clients
    total_score = models.PositiveSmallIntegerField(
        default=0, validators=_SCORE_VALIDATORS
    )
    air_score = models.PositiveSmallIntegerField(
        default=0, validators=_SCORE_VALIDATORS
    )
    temperature_score = models.PositiveSmallIntegerField(
        default=0, validators=_SCORE_VALIDATORS
    )
    population_score = models.PositiveSmallIntegerField(
        default=0, validators=_SCORE_VALIDATORS
    )

    raw_data = models.JSONField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(
                fields=["owner", "-created_at"],
                name="records_rec_owner_i_3f1a2b_idx",
            ),
            models.Index(
                fields=["city", "country"],
                name="records_rec_city_5c7d1e_idx",
            ),
            models.Index(
                fields=["-total_score"],
                name="records_rec_total_s_9a8b4c_idx",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.location} ({self.owner_id})"

    @property
    def location(self) -> str:
        return f"{self.city}, {self.country}"

    def as_city_record(self) -> AggregatedCityRecord:
        return AggregatedCityRecord(
            location=CityLocation(
                id=0,
                name=self.city,
                country=self.country,
                latitude=self.latitude,
                longitude=self.longitude,
                population=self.population or 0,
                population_density=self.population_density,
            ),
            air_quality=AirQualityReading(
                pm25=self.pm25,
                pm10=self.pm10,
                no2=self.no2,
                so2=self.so2,
                o3=self.o3,
                co=self.co,
                last_updated=self.air_last_updated,
                source=self.air_source,
            ),
            weather=WeatherReading(
                temperature=self.temperature,
                humidity=self.humidity,
                pressure=self.pressure,
                visibility=self.visibility,
                wind_speed=self.wind_speed,
                description=self.weather_description,
            ),
        )

    def calculate_wellbeing_score(self) -> WellbeingScore:
        wellbeing = score(self.as_city_record())
        self.total_score = wellbeing.total
        self.air_score = wellbeing.air
        self.temperature_score = wellbeing.temperature
        self.population_score = wellbeing.population
        return wellbeing

    @property
    def wellbeing_score(self) -> WellbeingScore:
        return WellbeingScore(
            total=self.total_score,
            air=self.air_score,
            temperature=self.temperature_score,
            population=self.population_score,
        )

    def save(self, *args: Any, **kwargs: Any) -> None:
        self.calculate_wellbeing_score()
        update_fields = kwargs.get("update_fields")
        if update_fields is not None:
            kwargs["update_fields"] = {
                *update_fields,
                "total_score",
                "air_score",
                "temperature_score",
                "population_score",
            }
        super().save(*args, **kwargs)
