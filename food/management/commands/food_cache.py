from django.apps import apps
from django.core.management.base import BaseCommand


class Command(BaseCommand):
    help = (
        "Inspect or clear the food listing cache.\n"
        "  stats  show cached list/detail entry counts and Redis server info\n"
        "  flush  delete cached entries matching --pattern (default: food:*)"
    )

    def add_arguments(self, parser):
        parser.add_argument("action", choices=["stats", "flush"])
        parser.add_argument("--pattern", type=str, default="food:*", help="Key pattern for flush")

    def handle(self, *args, **options):
        cache = apps.get_app_config("food").listing_cache

        if options["action"] == "stats":
            for key, value in cache.stats().items():
                self.stdout.write(f"{key}: {value}")
            return

        pattern = options.get("pattern") or "food:*"
        removed = cache.flush(pattern)
        self.stdout.write(self.style.SUCCESS(f"Deleted {removed} cache entries matching {pattern}"))
