import logging

from celery import shared_task
from django.contrib.auth.models import User

from .models import FoodListing
from .notifications import (
    compose_food_posted_message,
    compose_welcome_message,
    send_whatsapp_message,
)
from .services.expiry import sweep_expired_listings

logger = logging.getLogger(__name__)


@shared_task
def mark_spoiled_listings():
    """Celery beat entry point for the expiry sweep.

    Errors are logged and swallowed so the next scheduled run still happens.
    """
    logger.info("Running food expiry check...")
    try:
        updated = sweep_expired_listings()
    except Exception as e:
        logger.error(f"Error in food expiry check: {e}", exc_info=True)
        return 0
    logger.info(f"Expiry check complete: {updated} food items marked as spoiled")
    return updated


@shared_task
def send_food_posted_message(listing_id):
    listing = (
        FoodListing.objects.select_related("created_by__profile")
        .filter(pk=listing_id)
        .first()
    )
    if listing is None:
        logger.info(f"Listing {listing_id} no longer exists; skipping notification")
        return False
    profile = getattr(listing.created_by, "profile", None)
    if not profile or not profile.phone:
        return False
    return send_whatsapp_message(profile.phone, compose_food_posted_message(listing))


@shared_task
def send_welcome_message(user_id):
    user = User.objects.select_related("profile").filter(pk=user_id).first()
    profile = getattr(user, "profile", None) if user else None
    if not profile or not profile.phone:
        return False
    return send_whatsapp_message(profile.phone, compose_welcome_message(user))
