from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from django.db import transaction

from food.exceptions import ConflictError, NotFoundError, ValidationError
from food.models import FoodListing, FoodTransaction, format_quantity

logger = logging.getLogger(__name__)

QUANTITY_STEP = Decimal("0.001")


def _q(x):
    return Decimal(x).quantize(QUANTITY_STEP, rounding=ROUND_HALF_UP)


def parse_accept_quantity(raw) -> Decimal:
    message = "Please specify a valid quantity to accept"
    if raw is None or isinstance(raw, bool) or raw == "":
        raise ValidationError(message)
    try:
        value = Decimal(str(raw).strip())
    except (InvalidOperation, ValueError):
        raise ValidationError(message)
    if not value.is_finite():
        raise ValidationError(message)
    value = _q(value)
    if value <= 0:
        raise ValidationError(message)
    return value


def display_name(user) -> str:
    return user.get_full_name() or user.get_username()


def accept_listing(listing_id, quantity, user, cache=None) -> FoodListing:
    """Take ``quantity`` from a listing on behalf of ``user``.

    The listing row stays locked from the availability checks until the
    decrement and the ledger entry are written, so concurrent accepts on the
    same listing are applied one after the other and can never take more
    than what is left.
    """
    quantity = parse_accept_quantity(quantity)

    with transaction.atomic():
        try:
            listing = FoodListing.objects.select_for_update().get(pk=listing_id)
        except (FoodListing.DoesNotExist, ValueError, TypeError):
            raise NotFoundError("Food listing not found")

        if listing.status == FoodListing.STATUS_COLLECTED:
            raise ConflictError("This food has already been fully collected")
        if quantity > listing.remaining_quantity:
            raise ConflictError(
                "Cannot accept more than the remaining quantity "
                f"({format_quantity(listing.remaining_quantity)} {listing.quantity_unit})"
            )

        listing.remaining_quantity = _q(listing.remaining_quantity) - quantity
        listing.refresh_status()
        listing.save(update_fields=["remaining_quantity", "status", "updated_at"])

        FoodTransaction.objects.create(
            listing=listing,
            user=user,
            user_name=display_name(user),
            quantity=quantity,
        )

    if cache is not None:
        cache.invalidate_listing(listing.pk)
    logger.info(
        f"{display_name(user)} accepted {format_quantity(quantity)} {listing.quantity_unit} "
        f"of listing #{listing.pk} ({format_quantity(listing.remaining_quantity)} left, {listing.status})"
    )
    return listing
