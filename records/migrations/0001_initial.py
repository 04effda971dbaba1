from __future__ import annotations

import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


def _score_field() -> models.PositiveSmallIntegerField:
    return models.PositiveSmallIntegerField(
        default=0,
        validators=[
            django.core.validators.MinValueValidator(0),
            django.core.validators.MaxValueValidator(100),
        ],
    )


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Record",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("city", models.CharField(max_length=100)),
                ("country", models.CharField(max_length=100)),
                (
                    "latitude",
                    models.FloatField(
                        validators=[
                            django.core.validators.MinValueValidator(-90.0),
                            django.core.validators.MaxValueValidator(90.0),
                        ]
                    ),
                ),
                (
                    "longitude",
                    models.FloatField(
                        validators=[
                            django.core.validators.MinValueValidator(-180.0),
                            django.core.validators.MaxValueValidator(180.0),
                        ]
                    ),
                ),
                ("population", models.PositiveBigIntegerField(default=0)),
                (
                    "population_density",
                    models.FloatField(
                        blank=True,
                        null=True,
                        validators=[
                            django.core.validators.MinValueValidator(0)
                        ],
                    ),
                ),
                ("pm25", models.FloatField(blank=True, null=True)),
                ("pm10", models.FloatField(blank=True, null=True)),
                ("no2", models.FloatField(blank=True, null=True)),
                ("so2", models.FloatField(blank=True, null=True)),
                ("o3", models.FloatField(blank=True, null=True)),
                ("co", models.FloatField(blank=True, null=True)),
                (
                    "air_last_updated",
                    models.DateTimeField(blank=True, null=True),
                ),
                (
                    "air_source",
                    models.CharField(blank=True, max_length=200, null=True),
                ),
                ("temperature", models.FloatField(blank=True, null=True)),
                (
                    "humidity",
                    models.FloatField(
                        blank=True,
                        null=True,
                        validators=[
                            django.core.validators.MinValueValidator(0),
                            django.core.validators.MaxValueValidator(100),
                        ],
                    ),
                ),
                ("pressure", models.FloatField(blank=True, null=True)),
                ("visibility", models.FloatField(blank=True, null=True)),
                ("wind_speed", models.FloatField(blank=True, null=True)),
                (
                    "weather_description",
                    models.CharField(blank=True, max_length=200, null=True),
                ),
                ("total_score", _score_field()),
                ("air_score", _score_field()),
                ("temperature_score", _score_field()),
                ("population_score", _score_field()),
                ("raw_data", models.JSONField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "owner",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="wellbeing_records",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "indexes": [
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
                ],
            },
        ),
    ]
