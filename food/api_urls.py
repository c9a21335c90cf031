from django.urls import path
from rest_framework.routers import DefaultRouter

from . import account_views, views

router = DefaultRouter()
router.register("food", views.FoodListingViewSet, basename="food")
router.register("users", account_views.UserViewSet, basename="user")

urlpatterns = router.urls + [
    path("auth/register", account_views.register, name="auth-register"),
    path("auth/login", account_views.login, name="auth-login"),
    path("auth/logout", account_views.logout, name="auth-logout"),
    path("auth/me", account_views.me, name="auth-me"),
    path("auth/updateprofile", account_views.update_profile, name="auth-update-profile"),
]
