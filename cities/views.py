"""City lookup, enrichment and scoring endpoints.

Authentication: shared client key in `X-API-Key` (`HasClientApiKey`).
Responses: wrapped by `config.api.responses.success_response`
(status/message/data/errors).
"""

from __future__ import annotations

import logging
from typing import cast

from asgiref.sync import async_to_sync
from drf_spectacular.utils import (
    OpenApiParameter,
    OpenApiTypes,
    extend_schema,
    inline_serializer,
)
from rest_framework import serializers, status
from rest_framework.exceptions import APIException
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from config.api.openapi import (
    error_envelope_serializer,
    success_envelope_serializer,
)
from config.api.responses import JSONValue, success_response

from .errors import LocationNotFound, UpstreamError
from .metrics import wellbeing_scores_total
from .permissions import HasClientApiKey
from .scoring import score
from .serializers import (
    AggregatedCityRecordSerializer,
    AirQualityParamsSerializer,
    AirQualityReadingSerializer,
    CityLocationSerializer,
    CitySearchParamsSerializer,
    CitySuggestionSerializer,
    CoordinatesParamsSerializer,
    WeatherReadingSerializer,
    serialize_aggregate,
    serialize_air_quality,
    serialize_location,
    serialize_suggestions,
    serialize_weather,
)
from .services import (
    aggregate_city,
    get_air_quality,
    get_city,
    get_weather,
    search_cities,
)

logger = logging.getLogger(__name__)


class CityNotFound(APIException):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "City not found."
    default_code = "city_not_found"


class UpstreamUnavailable(APIException):
    status_code = status.HTTP_502_BAD_GATEWAY
    default_detail = "Upstream data provider unavailable."
    default_code = "upstream_unavailable"


city_error_schema = error_envelope_serializer("CityErrorResponse")

search_success_schema = success_envelope_serializer(
    "CitySearchSuccess",
    data=inline_serializer(
        name="CitySearchData",
        fields={
            "cities": CitySuggestionSerializer(many=True),
            "total": serializers.IntegerField(),
        },
    ),
)
detail_success_schema = success_envelope_serializer(
    "CityDetailSuccess", data=CityLocationSerializer()
)
air_quality_success_schema = success_envelope_serializer(
    "AirQualitySuccess",
    data=inline_serializer(
        name="AirQualityData",
        fields={
            "air_quality": AirQualityReadingSerializer(allow_null=True),
            "search_radius": serializers.IntegerField(),
        },
    ),
)
weather_success_schema = success_envelope_serializer(
    "CityWeatherSuccess", data=WeatherReadingSerializer()
)
aggregate_success_schema = success_envelope_serializer(
    "CityAggregateSuccess", data=AggregatedCityRecordSerializer()
)

COORDINATE_PARAMETERS = [
    OpenApiParameter(
        name="latitude",
        type=OpenApiTypes.FLOAT,
        location=OpenApiParameter.QUERY,
        required=True,
    ),
    OpenApiParameter(
        name="longitude",
        type=OpenApiTypes.FLOAT,
        location=OpenApiParameter.QUERY,
        required=True,
    ),
]


def _upstream_failure(
    exc: UpstreamError, action: str
) -> UpstreamUnavailable:
    logger.warning(
        "cities.upstream.failed action=%s source=%s err=%s",
        action,
        exc.source,
        exc,
    )
    return UpstreamUnavailable()


class CitySearchView(APIView):
    """Suggest cities by name prefix, most populous first."""

    authentication_classes = ()
    permission_classes = [HasClientApiKey]

    @extend_schema(
        parameters=[
            OpenApiParameter(
                name="query",
                type=OpenApiTypes.STR,
                location=OpenApiParameter.QUERY,
                required=True,
                description="City name prefix (at least 2 characters)",
            ),
            OpenApiParameter(
                name="limit",
                type=OpenApiTypes.INT,
                location=OpenApiParameter.QUERY,
                required=False,
                description="Maximum suggestions (default 5, max 10)",
            ),
        ],
        responses={
            200: search_success_schema,
            400: city_error_schema,
            403: city_error_schema,
            502: city_error_schema,
        },
    )
    def get(self, request: Request) -> Response:
        serializer = CitySearchParamsSerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        params = serializer.validated_data

        try:
            suggestions, total = async_to_sync(search_cities)(
                str(params["query"]), int(params["limit"])
            )
        except UpstreamError as exc:
            raise _upstream_failure(exc, "search") from exc

        return success_response(
            {
                "cities": cast(JSONValue, serialize_suggestions(suggestions)),
                "total": total,
            }
        )


class CityDetailView(APIView):
    """Return population and coordinates for one city."""

    authentication_classes = ()
    permission_classes = [HasClientApiKey]

    @extend_schema(
        responses={
            200: detail_success_schema,
            403: city_error_schema,
            404: city_error_schema,
            502: city_error_schema,
        },
    )
    def get(self, request: Request, city_id: int) -> Response:
        try:
            location = async_to_sync(get_city)(city_id)
        except LocationNotFound as exc:
            raise CityNotFound() from exc
        except UpstreamError as exc:
            raise _upstream_failure(exc, "resolve") from exc
        return success_response(serialize_location(location))


class AirQualityView(APIView):
    """Return the latest reading of the nearest monitoring station.

    `air_quality` is null when no station lies within the search radius.
    """

    authentication_classes = ()
    permission_classes = [HasClientApiKey]

    @extend_schema(
        parameters=[
            *COORDINATE_PARAMETERS,
            OpenApiParameter(
                name="radius",
                type=OpenApiTypes.INT,
                location=OpenApiParameter.QUERY,
                required=False,
                description="Search radius in metres (max 25000)",
            ),
        ],
        responses={
            200: air_quality_success_schema,
            400: city_error_schema,
            403: city_error_schema,
            502: city_error_schema,
        },
    )
    def get(self, request: Request) -> Response:
        serializer = AirQualityParamsSerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        params = serializer.validated_data
        radius = int(params["radius"])

        try:
            reading = async_to_sync(get_air_quality)(
                float(params["latitude"]),
                float(params["longitude"]),
                radius,
            )
        except UpstreamError as exc:
            raise _upstream_failure(exc, "air_quality") from exc

        if reading is None:
            return success_response(
                {"air_quality": None, "search_radius": radius},
                message="No air quality data available for this location",
            )
        return success_response(
            {
                "air_quality": serialize_air_quality(reading),
                "search_radius": radius,
            }
        )


class CityWeatherView(APIView):
    """Return current weather conditions in metric units."""

    authentication_classes = ()
    permission_classes = [HasClientApiKey]

    @extend_schema(
        parameters=COORDINATE_PARAMETERS,
        responses={
            200: weather_success_schema,
            400: city_error_schema,
            403: city_error_schema,
            502: city_error_schema,
        },
    )
    def get(self, request: Request) -> Response:
        serializer = CoordinatesParamsSerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        params = serializer.validated_data

        try:
            reading = async_to_sync(get_weather)(
                float(params["latitude"]), float(params["longitude"])
            )
        except UpstreamError as exc:
            raise _upstream_failure(exc, "weather") from exc
        return success_response(serialize_weather(reading))


class CityAggregateView(APIView):
    """Aggregate city, air-quality and weather data and score the result.

    Only a failed city lookup is an error; missing air-quality or weather
    data degrades to null readings scored with neutral defaults.
    """

    authentication_classes = ()
    permission_classes = [HasClientApiKey]

    @extend_schema(
        responses={
            200: aggregate_success_schema,
            403: city_error_schema,
            404: city_error_schema,
            502: city_error_schema,
        },
    )
    def get(self, request: Request, city_id: int) -> Response:
        try:
            record = async_to_sync(aggregate_city)(city_id)
        except LocationNotFound as exc:
            raise CityNotFound() from exc
        except UpstreamError as exc:
            raise _upstream_failure(exc, "aggregate") from exc

        wellbeing = score(record)
        wellbeing_scores_total.labels(grade=wellbeing.grade).inc()
        return success_response(serialize_aggregate(record, wellbeing))
