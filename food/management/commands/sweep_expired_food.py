from __future__ import annotations

from django.core.management.base import BaseCommand

from food.services.expiry import expired_listings, sweep_expired_listings


class Command(BaseCommand):
    help = "Mark eatable food listings past their expiry date as spoiled. Use --dry-run to preview."

    def add_arguments(self, parser):
        parser.add_argument("--dry-run", action="store_true", help="Preview counts; update nothing.")

    def handle(self, *args, **opts):
        pending = expired_listings()
        count = pending.count()
        self.stdout.write(f"Expired eatable listings: {count}")

        if opts.get("dry_run"):
            for listing in pending.order_by("expiry_date", "pk")[:20]:
                self.stdout.write(f"  #{listing.pk} {listing.title} (expired {listing.expiry_date:%Y-%m-%d %H:%M})")
            self.stdout.write(self.style.WARNING("Dry-run mode: no listings updated."))
            return

        updated = sweep_expired_listings()
        self.stdout.write(self.style.SUCCESS(f"Marked {updated} listings as spoiled."))
