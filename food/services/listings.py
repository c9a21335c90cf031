from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field

from django.db import transaction

from food.exceptions import AuthorizationError, NotFoundError, ValidationError
from food.filters import parse_listing_filters, parse_pagination, parse_sort
from food.models import FoodListing, format_quantity
from food.notifications import notify_later
from food.services.images import store_listing_image
from food.tasks import send_food_posted_message

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = (
    "title",
    "description",
    "quantity_unit",
    "location",
    "expiry_date",
    "status",
)


@dataclass
class ListingPage:
    items: list = field(default_factory=list)
    total: int = 0
    page: int = 1
    limit: int = 10

    @property
    def count(self) -> int:
        return len(self.items)

    @property
    def pagination(self) -> dict:
        start = (self.page - 1) * self.limit
        pagination = {}
        if start + self.limit < self.total:
            pagination["next"] = {"page": self.page + 1, "limit": self.limit}
        if start > 0:
            pagination["prev"] = {"page": self.page - 1, "limit": self.limit}
        pagination["total"] = self.total
        pagination["pages"] = math.ceil(self.total / self.limit)
        return pagination


def _base_queryset():
    return FoodListing.objects.select_related("created_by__profile").prefetch_related(
        "transactions"
    )


def list_listings(params) -> ListingPage:
    """Filter, sort and paginate listings from raw query parameters."""
    query = parse_listing_filters(params)
    ordering = parse_sort(params.get("sort"))
    page, limit = parse_pagination(params)

    qs = _base_queryset().filter(query).order_by(*ordering)
    total = qs.count()
    start = (page - 1) * limit
    return ListingPage(items=list(qs[start:start + limit]), total=total, page=page, limit=limit)


def get_listing(listing_id) -> FoodListing:
    try:
        return _base_queryset().get(pk=listing_id)
    except (FoodListing.DoesNotExist, ValueError, TypeError):
        raise NotFoundError("Food listing not found")


def _is_admin(user) -> bool:
    profile = getattr(user, "profile", None)
    return bool(profile and profile.is_admin)


def _check_can_manage(listing: FoodListing, user, verb: str) -> None:
    if not _is_admin(user):
        raise AuthorizationError(f"Only admins can {verb} food listings")
    if listing.created_by_id != user.pk:
        raise AuthorizationError(f"You can only {verb} your own food listings")


def create_listing(data: dict, user, cache=None) -> FoodListing:
    """Create a listing owned by ``user`` from already validated ``data``."""
    if not _is_admin(user):
        raise AuthorizationError("Only admins can create food listings")

    listing = FoodListing(
        title=data["title"],
        description=data["description"],
        quantity=data["quantity"],
        quantity_unit=data.get("quantity_unit") or FoodListing.UNIT_KG,
        remaining_quantity=data["quantity"],
        location=data["location"],
        expiry_date=data["expiry_date"],
        status=data.get("status") or FoodListing.STATUS_AVAILABLE,
        image=store_listing_image(data.get("image")),
        created_by=user,
    )
    listing.refresh_status()
    listing.save()

    if cache is not None:
        cache.invalidate_listing()
    notify_later(send_food_posted_message, listing.pk)
    logger.info(f"Listing #{listing.pk} created by {user.get_username()}")
    return listing


def resize_listing(listing: FoodListing, quantity, accepted) -> None:
    """Set a new total while keeping what was already taken off it."""
    if quantity < accepted:
        raise ValidationError(
            f"Quantity cannot be less than the amount already accepted "
            f"({format_quantity(accepted)} {listing.quantity_unit})"
        )
    listing.quantity = quantity
    listing.remaining_quantity = quantity - accepted


def update_listing(listing_id, data: dict, user, cache=None) -> FoodListing:
    """Apply an owner's edits; quantities keep what was already accepted."""
    with transaction.atomic():
        try:
            listing = FoodListing.objects.select_for_update().get(pk=listing_id)
        except (FoodListing.DoesNotExist, ValueError, TypeError):
            raise NotFoundError("Food listing not found")
        _check_can_manage(listing, user, "update")

        for name in EDITABLE_FIELDS:
            if name in data:
                setattr(listing, name, data[name])
        if "image" in data:
            listing.image = store_listing_image(data["image"])
        if "quantity" in data:
            resize_listing(listing, data["quantity"], listing.accepted_quantity)
        listing.refresh_status()
        listing.save()

    if cache is not None:
        cache.invalidate_listing(listing.pk)
    logger.info(f"Listing #{listing.pk} updated by {user.get_username()}")
    return get_listing(listing.pk)


def delete_listing(listing_id, user, cache=None) -> None:
    with transaction.atomic():
        try:
            listing = FoodListing.objects.select_for_update().get(pk=listing_id)
        except (FoodListing.DoesNotExist, ValueError, TypeError):
            raise NotFoundError("Food listing not found")
        _check_can_manage(listing, user, "delete")
        pk = listing.pk
        listing.delete()

    if cache is not None:
        cache.invalidate_listing(pk)
    logger.info(f"Listing #{pk} deleted by {user.get_username()}")
