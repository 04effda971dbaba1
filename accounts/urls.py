from django.urls import path

from . import views

app_name = "accounts"

urlpatterns = [
    path("register/", views.RegisterView.as_view(), name="register"),
    path("login/", views.LoginView.as_view(), name="login"),
    path(
        "token/refresh/",
        views.AccessTokenRefreshView.as_view(),
        name="token-refresh",
    ),
    path("me/", views.ProfileView.as_view(), name="profile"),
]
