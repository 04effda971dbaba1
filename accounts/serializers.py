from __future__ import annotations

from typing import Any

from django.contrib.auth import authenticate, password_validation
from django.contrib.auth.models import User
from django.db.models import Count, Max
from django.utils.translation import gettext_lazy as _
from drf_spectacular.utils import extend_schema_field
from rest_framework import serializers
from rest_framework.exceptions import AuthenticationFailed
from rest_framework.validators import UniqueValidator

from records.models import Record


def _unique_iexact(message: str) -> UniqueValidator:
    return UniqueValidator(
        queryset=User.objects.all(), lookup="iexact", message=message
    )


class RegisterSerializer(serializers.ModelSerializer):
    """Sign-up payload; `name` is split into first and last name."""

    name = serializers.CharField(
        max_length=150, required=False, allow_blank=True, write_only=True
    )
    password = serializers.CharField(write_only=True)
    password2 = serializers.CharField(write_only=True)

    class Meta:
        model = User
        fields = ["username", "email", "name", "password", "password2"]
        extra_kwargs = {
            "username": {
                "validators": [
                    User.username_validator,
                    _unique_iexact(
                        _("A user with that username already exists.")
                    ),
                ]
            },
            "email": {
                "required": True,
                "allow_blank": False,
                "validators": [
                    _unique_iexact(
                        _("A user with that email already exists.")
                    )
                ],
            },
        }

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:
        if attrs.get("password") != attrs.get("password2"):
            raise serializers.ValidationError(
                {"password2": _("Passwords do not match.")}
            )
        candidate = User(username=attrs["username"], email=attrs["email"])
        password_validation.validate_password(attrs["password"], candidate)
        return attrs

    def create(self, validated_data: dict[str, Any]) -> User:
        first, _sep, last = (
            validated_data.get("name") or ""
        ).strip().partition(" ")
        return User.objects.create_user(
            username=validated_data["username"],
            email=validated_data["email"],
            password=validated_data["password"],
            first_name=first,
            last_name=last.strip(),
        )


class LoginSerializer(serializers.Serializer):
    identifier = serializers.CharField(
        help_text="Username or email address."
    )
    password = serializers.CharField(write_only=True)

    def validate(self, attrs: dict[str, str]) -> dict[str, Any]:
        user = authenticate(
            request=self.context.get("request"),
            identifier=attrs["identifier"],
            password=attrs["password"],
        )
        if user is None:
            raise AuthenticationFailed(_("Invalid credentials."))
        return {"user": user}


class RecordSummarySerializer(serializers.Serializer):
    count = serializers.IntegerField()
    best_score = serializers.IntegerField(allow_null=True)
    last_saved_at = serializers.DateTimeField(allow_null=True)


class ProfileSerializer(serializers.ModelSerializer):
    """Account details plus a summary of the user's saved records."""

    name = serializers.CharField(source="get_full_name", read_only=True)
    records = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ["id", "username", "email", "name", "date_joined", "records"]
        read_only_fields = fields

    @extend_schema_field(RecordSummarySerializer)
    def get_records(self, user: User) -> dict[str, Any]:
        summary = Record.objects.filter(owner=user).aggregate(
            count=Count("id"),
            best_score=Max("total_score"),
            last_saved_at=Max("created_at"),
        )
        return dict(RecordSummarySerializer(summary).data)
