from __future__ import annotations

from typing import Any

from django.contrib.auth import get_user_model
from django.contrib.auth.backends import ModelBackend
from django.contrib.auth.base_user import AbstractBaseUser
from django.db.models import Q
from django.http import HttpRequest


class UsernameOrEmailBackend(ModelBackend):
    """Authenticate with a case-insensitive username or email.

    The login serializer passes `identifier`; Django's admin passes
    `username`. Both are accepted.
    """

    def authenticate(
        self,
        request: HttpRequest | None,
        username: str | None = None,
        password: str | None = None,
        **kwargs: Any,
    ) -> AbstractBaseUser | None:
        login = kwargs.get("identifier") or username
        if not isinstance(login, str) or not login or password is None:
            return None

        user_model = get_user_model()
        matches = user_model._default_manager.filter(
            Q(username__iexact=login) | Q(email__iexact=login)
        ).order_by("pk")
        user = next(
            (
                candidate
                for candidate in matches
                if candidate.check_password(password)
            ),
            None,
        )
        if user is None:
            # Hash anyway so a miss costs as much as a hit.
            user_model().set_password(password)
            return None
        return user if self.user_can_authenticate(user) else None
