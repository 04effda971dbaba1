"""Account endpoints backing saved wellbeing records.

Sign-up and sign-in are public and throttled per scope; both return the
profile and a JWT pair. The profile endpoint summarises the caller's saved
records. Every response uses the project envelope from
`config.api.responses`.
"""

from __future__ import annotations

import logging
from typing import cast

from django.contrib.auth.models import User
from drf_spectacular.utils import extend_schema, inline_serializer
from rest_framework import serializers, status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError
from rest_framework_simplejwt.serializers import TokenRefreshSerializer
from rest_framework_simplejwt.tokens import RefreshToken
from rest_framework_simplejwt.views import TokenRefreshView

from cities.permissions import client_ip
from config.api.openapi import (
    error_envelope_serializer,
    success_envelope_serializer,
)
from config.api.responses import JSONValue, success_response

from .serializers import LoginSerializer, ProfileSerializer, RegisterSerializer

logger = logging.getLogger(__name__)

account_error_schema = error_envelope_serializer("AccountErrorResponse")
session_schema = success_envelope_serializer(
    "AccountSessionSuccess",
    data=inline_serializer(
        name="AccountSession",
        fields={
            "user": ProfileSerializer(),
            "tokens": inline_serializer(
                name="AccountTokens",
                fields={
                    "access": serializers.CharField(),
                    "refresh": serializers.CharField(),
                },
            ),
        },
    ),
)
refreshed_schema = success_envelope_serializer(
    "AccountRefreshSuccess",
    data=inline_serializer(
        name="AccountAccessToken",
        fields={"access": serializers.CharField()},
    ),
)
profile_schema = success_envelope_serializer(
    "AccountProfileSuccess", data=ProfileSerializer()
)


def session_payload(user: User) -> dict[str, JSONValue]:
    """Profile plus a fresh access/refresh pair for `user`."""

    refresh = RefreshToken.for_user(user)
    profile = cast(dict[str, JSONValue], ProfileSerializer(user).data)
    return {
        "user": profile,
        "tokens": {
            "access": str(refresh.access_token),
            "refresh": str(refresh),
        },
    }


@extend_schema(auth=[])
class RegisterView(APIView):
    permission_classes = [AllowAny]
    throttle_scope = "register"

    @extend_schema(
        request=RegisterSerializer,
        responses={201: session_schema, 400: account_error_schema},
    )
    def post(self, request: Request) -> Response:
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = cast(User, serializer.save())

        logger.info(
            "accounts.registered user_id=%s ip=%s",
            user.pk,
            client_ip(request),
        )
        return success_response(
            session_payload(user),
            message="Registered successfully",
            status_code=status.HTTP_201_CREATED,
        )


@extend_schema(auth=[])
class LoginView(APIView):
    """Sign in with a username or an email address."""

    permission_classes = [AllowAny]
    throttle_scope = "login"

    @extend_schema(
        request=LoginSerializer,
        responses={
            200: session_schema,
            400: account_error_schema,
            401: account_error_schema,
        },
    )
    def post(self, request: Request) -> Response:
        serializer = LoginSerializer(
            data=request.data, context={"request": request}
        )
        serializer.is_valid(raise_exception=True)

        user = cast(User, serializer.validated_data["user"])
        return success_response(
            session_payload(user), message="Login successful"
        )


@extend_schema(auth=[])
class AccessTokenRefreshView(TokenRefreshView):
    throttle_scope = "token_refresh"

    @extend_schema(
        request=TokenRefreshSerializer,
        responses={
            200: refreshed_schema,
            400: account_error_schema,
            401: account_error_schema,
        },
    )
    def post(
        self, request: Request, *args: object, **kwargs: object
    ) -> Response:
        serializer = self.get_serializer(data=request.data)
        try:
            serializer.is_valid(raise_exception=True)
        except TokenError as exc:
            raise InvalidToken(exc.args[0]) from exc
        return success_response(
            {"access": cast(str, serializer.validated_data["access"])},
            message="Token refreshed",
        )


class ProfileView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        responses={200: profile_schema, 401: account_error_schema}
    )
    def get(self, request: Request) -> Response:
        profile = ProfileSerializer(cast(User, request.user)).data
        return success_response(
            cast(dict[str, JSONValue], profile), message="User profile"
        )
