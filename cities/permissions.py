from __future__ import annotations

import hmac
import logging

from django.conf import settings
from rest_framework.permissions import BasePermission
from rest_framework.request import Request

logger = logging.getLogger(__name__)


def get_header_key(request: Request) -> str | None:
    header_value = request.META.get("HTTP_X_API_KEY")
    if header_value:
        return str(header_value)
    return None


def client_ip(request: Request) -> str | None:
    forwarded_for = request.META.get("HTTP_X_FORWARDED_FOR")
    if forwarded_for:
        parts = str(forwarded_for).split(",")
        if parts:
            return parts[0].strip() or None
    remote_addr = request.META.get("REMOTE_ADDR")
    return str(remote_addr) if remote_addr else None


class HasClientApiKey(BasePermission):
    """Require the shared client key in the `X-API-Key` header.

    The key identifies the front-end client, not a user; combine with
    `IsAuthenticated` for user-owned resources.
    """

    message = "Invalid or missing API key."

    def has_permission(self, request: Request, view: object) -> bool:
        expected = str(getattr(settings, "CITYSCORE_CLIENT_API_KEY", ""))
        raw_key = get_header_key(request)
        if not expected or raw_key is None:
            reason = "not_configured" if not expected else "missing"
        elif hmac.compare_digest(raw_key.encode(), expected.encode()):
            return True
        else:
            reason = "mismatch"

        logger.warning(
            "client_key.denied reason=%s path=%s method=%s ip=%s",
            reason,
            getattr(request, "path", ""),
            getattr(request, "method", ""),
            client_ip(request),
        )
        return False
