"""Project-level non-DRF views.

The root landing endpoint links to the interactive API documentation; the
health endpoint reports uptime for load balancers.
"""

from __future__ import annotations

import time

from django.conf import settings
from django.http import HttpRequest, JsonResponse
from django.utils import timezone

_STARTED_AT = time.monotonic()


def home(request: HttpRequest) -> JsonResponse:
    """Return basic service metadata and documentation links."""
    return JsonResponse(
        {
            "ok": True,
            "service": "city-wellbeing-api",
            "docs": "/api/docs/",
            "redoc": "/api/redoc/",
        }
    )


def health(request: HttpRequest) -> JsonResponse:
    return JsonResponse(
        {
            "status": "healthy",
            "timestamp": timezone.now().isoformat(),
            "uptime": round(time.monotonic() - _STARTED_AT, 3),
            "version": getattr(settings, "SERVICE_VERSION", "1.0.0"),
        }
    )
