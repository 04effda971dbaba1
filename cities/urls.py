from __future__ import annotations

from django.urls import path

from .views import (
    AirQualityView,
    CityAggregateView,
    CityDetailView,
    CitySearchView,
    CityWeatherView,
)

urlpatterns = [
    path("cities/search/", CitySearchView.as_view(), name="city-search"),
    path(
        "cities/<int:city_id>/",
        CityDetailView.as_view(),
        name="city-detail",
    ),
    path("air-quality/", AirQualityView.as_view(), name="air-quality"),
    path("weather/", CityWeatherView.as_view(), name="city-weather"),
    path(
        "aggregate/<int:city_id>/",
        CityAggregateView.as_view(),
        name="city-aggregate",
    ),
]
