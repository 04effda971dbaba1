"""drf-spectacular helpers for documenting the response envelope.

`config.api.responses` and the DRF exception handler wrap every API response
in the same JSON envelope; these builders produce matching serializers for
the OpenAPI schema.
"""

from __future__ import annotations

from drf_spectacular.utils import inline_serializer
from rest_framework import serializers
from rest_framework.serializers import Serializer


def _envelope_fields(data: serializers.Field) -> dict[str, serializers.Field]:
    return {
        "status": serializers.IntegerField(),
        "message": serializers.CharField(),
        "data": data,
        "errors": serializers.JSONField(allow_null=True),
    }


def success_envelope_serializer(
    name: str,
    *,
    data: serializers.Field,
) -> Serializer:
    """Build an OpenAPI schema matching `success_response`."""

    return inline_serializer(name=name, fields=_envelope_fields(data))


def error_envelope_serializer(name: str) -> Serializer:
    """Build an OpenAPI schema matching `custom_exception_handler`."""

    return inline_serializer(
        name=name,
        fields=_envelope_fields(serializers.JSONField(allow_null=True)),
    )
