"""Saved wellbeing records and the city leaderboard.

Record endpoints require the client key (`X-API-Key`) and an authenticated
user (JWT); each user only sees and deletes their own records. The
leaderboard only requires the client key.
"""

from __future__ import annotations

import logging
from typing import cast

from django.db.models import QuerySet
from django.utils import timezone
from drf_spectacular.utils import extend_schema, inline_serializer
from rest_framework import serializers, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework.viewsets import GenericViewSet

from cities.permissions import HasClientApiKey
from config.api.openapi import (
    error_envelope_serializer,
    success_envelope_serializer,
)
from config.api.responses import JSONValue, success_response

from .models import Record
from .permissions import IsRecordOwner
from .serializers import (
    LeaderboardEntrySerializer,
    LeaderboardParamsSerializer,
    RecordListParamsSerializer,
    RecordSerializer,
)
from .services import build_leaderboard, paginate_records

logger = logging.getLogger(__name__)

record_error_schema = error_envelope_serializer("RecordErrorResponse")

record_created_schema = success_envelope_serializer(
    "RecordCreatedSuccess",
    data=inline_serializer(
        name="RecordCreatedData",
        fields={
            "record_id": serializers.IntegerField(),
            "wellbeing_score": serializers.JSONField(),
            "city": serializers.CharField(),
            "country": serializers.CharField(),
        },
    ),
)
record_list_schema = success_envelope_serializer(
    "RecordListSuccess",
    data=inline_serializer(
        name="RecordListData",
        fields={
            "records": RecordSerializer(many=True),
            "pagination": inline_serializer(
                name="RecordPagination",
                fields={
                    "total": serializers.IntegerField(),
                    "page": serializers.IntegerField(),
                    "limit": serializers.IntegerField(),
                    "pages": serializers.IntegerField(),
                },
            ),
        },
    ),
)
record_deleted_schema = success_envelope_serializer(
    "RecordDeletedSuccess", data=serializers.JSONField(allow_null=True)
)
leaderboard_schema = success_envelope_serializer(
    "LeaderboardSuccess",
    data=inline_serializer(
        name="LeaderboardData",
        fields={
            "leaderboard": LeaderboardEntrySerializer(many=True),
            "total": serializers.IntegerField(),
            "generated_at": serializers.DateTimeField(),
        },
    ),
)


class RecordViewSet(GenericViewSet):
    serializer_class = RecordSerializer
    permission_classes = [HasClientApiKey, IsAuthenticated, IsRecordOwner]

    def get_queryset(self) -> QuerySet[Record]:
        # Owner-only visibility
        user_id = getattr(self.request.user, "id", None)
        if user_id is None:
            return Record.objects.none()
        return Record.objects.filter(owner_id=cast(int, user_id))

    @extend_schema(
        parameters=[RecordListParamsSerializer],
        responses={
            200: record_list_schema,
            400: record_error_schema,
            401: record_error_schema,
            403: record_error_schema,
        },
    )
    def list(self, request: Request) -> Response:
        params_serializer = RecordListParamsSerializer(
            data=request.query_params
        )
        params_serializer.is_valid(raise_exception=True)
        params = params_serializer.validated_data

        page = paginate_records(
            self.get_queryset(),
            city=params.get("city"),
            country=params.get("country"),
            sort_by=params["sort_by"],
            sort_order=params["sort_order"],
            page=params["page"],
            limit=params["limit"],
        )
        records = RecordSerializer(page.records, many=True).data
        return success_response(
            {
                "records": cast(JSONValue, records),
                "pagination": {
                    "total": page.total,
                    "page": page.page,
                    "limit": page.limit,
                    "pages": page.pages,
                },
            }
        )

    @extend_schema(
        request=RecordSerializer,
        responses={
            201: record_created_schema,
            400: record_error_schema,
            401: record_error_schema,
            403: record_error_schema,
        },
    )
    def create(self, request: Request) -> Response:
        serializer = RecordSerializer(
            data=request.data, context={"request": request}
        )
        serializer.is_valid(raise_exception=True)
        # Prevents clients from spoofing owner
        record = cast(Record, serializer.save(owner=request.user))
        logger.info(
            "records.saved record_id=%s user_id=%s city=%s total=%s",
            record.id,
            record.owner_id,
            record.city,
            record.total_score,
        )

        scores = RecordSerializer(record).data["wellbeing_score"]
        return success_response(
            {
                "record_id": record.id,
                "wellbeing_score": cast(JSONValue, scores),
                "city": record.city,
                "country": record.country,
            },
            message="Data saved successfully",
            status_code=status.HTTP_201_CREATED,
        )

    @extend_schema(
        responses={
            200: record_deleted_schema,
            401: record_error_schema,
            403: record_error_schema,
            404: record_error_schema,
        },
    )
    def destroy(self, request: Request, pk: str | None = None) -> Response:
        record = self.get_object()
        record_id = record.id
        record.delete()
        logger.info(
            "records.deleted record_id=%s user_id=%s",
            record_id,
            getattr(request.user, "id", None),
        )
        return success_response(None, message="Record deleted successfully")


class LeaderboardView(APIView):
    """Rank cities by the average wellbeing score of all saved records."""

    authentication_classes = ()
    permission_classes = [HasClientApiKey]

    @extend_schema(
        parameters=[LeaderboardParamsSerializer],
        responses={
            200: leaderboard_schema,
            400: record_error_schema,
            403: record_error_schema,
        },
    )
    def get(self, request: Request) -> Response:
        serializer = LeaderboardParamsSerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        params = serializer.validated_data

        entries = build_leaderboard(
            limit=params["limit"], min_records=params["min_records"]
        )
        payload = LeaderboardEntrySerializer(entries, many=True).data
        return success_response(
            {
                "leaderboard": cast(JSONValue, payload),
                "total": len(entries),
                "generated_at": timezone.now().isoformat(),
            }
        )
