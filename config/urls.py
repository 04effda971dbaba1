"""Root URL configuration.

Service routes live under /api/v1/; documentation, metrics and the admin
sit at the top level.
"""

from django.contrib import admin
from django.urls import include, path
from drf_spectacular.views import (
    SpectacularAPIView,
    SpectacularRedocView,
    SpectacularSwaggerView,
)

from .views import health, home

api_v1_patterns = [
    path("health/", health, name="health"),
    path("auth/", include("accounts.urls")),
    path("", include("cities.urls")),
    path("", include("records.urls")),
]

docs_patterns = [
    path("schema/", SpectacularAPIView.as_view(), name="schema"),
    path(
        "docs/",
        SpectacularSwaggerView.as_view(url_name="schema"),
        name="swagger-ui",
    ),
    path(
        "redoc/",
        SpectacularRedocView.as_view(url_name="schema"),
        name="redoc",
    ),
]

urlpatterns = [
    path("", home, name="home"),
    path("", include("django_prometheus.urls")),
    path("admin/", admin.site.urls),
    path("api/", include(docs_patterns)),
    path("api/v1/", include(api_v1_patterns)),
]
