from __future__ import annotations

from django.urls import path
from rest_framework.routers import SimpleRouter

from .views import LeaderboardView, RecordViewSet

router = SimpleRouter()
router.register("records", RecordViewSet, basename="record")

urlpatterns = [
    path("leaderboard/", LeaderboardView.as_view(), name="leaderboard"),
    *router.urls,
]
