from django.apps import AppConfig
from django.conf import settings


class FoodConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'food'

    def ready(self):
        # Import signal handlers
        from . import signals  # noqa: F401
        from .cache import build_listing_cache

        self.listing_cache = build_listing_cache(settings)
