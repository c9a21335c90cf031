from __future__ import annotations

from datetime import datetime

from django.utils import timezone

from food.models import FoodListing


def expired_listings(now: datetime | None = None):
    now = now or timezone.now()
    return FoodListing.objects.filter(
        expiry_status=FoodListing.EATABLE,
        expiry_date__lt=now,
    )


def sweep_expired_listings(now: datetime | None = None) -> int:
    """Mark every eatable listing past its expiry date as spoiled.

    Runs as one conditional bulk UPDATE, so listings already spoiled or not
    yet expired are never touched and the flip is never reversed. Cached
    listing responses are left to expire on their own TTL.
    """
    now = now or timezone.now()
    return expired_listings(now).update(
        expiry_status=FoodListing.SPOILED,
        updated_at=now,
    )
