"""WhatsApp notifications for listings and new accounts.

Delivery never affects the request that triggered it: callers queue a
Celery task through :func:`notify_later` and any failure is only logged.
"""
from __future__ import annotations

import logging

import requests
from django.conf import settings
from django.db import transaction
from django.utils import timezone

from .models import format_quantity

logger = logging.getLogger(__name__)


def format_phone(mobile: str) -> str:
    mobile = (mobile or "").strip().replace(" ", "")
    if not mobile or mobile.startswith("+"):
        return mobile
    return f"{settings.WHATSAPP_DEFAULT_COUNTRY_CODE}{mobile}"


def send_whatsapp_message(mobile: str, message: str) -> bool:
    """Send ``message`` through the WhatsApp gateway. Returns True on success."""
    token = getattr(settings, "WHATSAPP_API_TOKEN", "")
    if not token:
        logger.info("WhatsApp token not configured; skipping message")
        return False
    mobile = format_phone(mobile)
    if not mobile:
        return False

    url = f"{settings.WHATSAPP_API_URL.rstrip('/')}/send_sms"
    try:
        response = requests.post(
            url,
            params={"api_token": token, "mobile": mobile, "message": message},
            timeout=settings.WHATSAPP_TIMEOUT,
        )
        response.raise_for_status()
        payload = response.json()
    except (requests.RequestException, ValueError) as e:
        logger.error(f"WhatsApp message to {mobile} failed: {e}")
        return False

    if not payload.get("status"):
        logger.error(f"WhatsApp gateway rejected message to {mobile}: {payload.get('msg')}")
        return False
    logger.info(f"WhatsApp message sent to {mobile}")
    return True


def compose_food_posted_message(listing) -> str:
    description = listing.description or ""
    if len(description) > 50:
        description = f"{description[:50]}..."
    expires = timezone.localtime(listing.expiry_date).strftime("%B %d, %Y")
    link = f"{settings.CLIENT_URL.rstrip('/')}/food/{listing.pk}"
    lines = [
        "*New Food Listing Created*",
        "",
        "*Successfully Posted*",
        "",
        "*Food Details*:",
        f"*Title*: {listing.title}",
        f"*Description*: {description}",
        f"*Location*: {listing.location}",
        f"*Quantity*: {format_quantity(listing.quantity)} {listing.quantity_unit}",
        f"*Expires On*: {expires}",
        f"*Status*: {listing.status.capitalize()}",
        "",
        f"*View this listing*: {link}",
        "",
        "Thank you for helping reduce food waste!",
    ]
    return "\n".join(lines)


def compose_welcome_message(user) -> str:
    name = user.get_full_name() or user.get_username()
    return (
        "*Welcome to FoodResQ!*\n\n"
        f"Hello *{name}*,\n\n"
        "Your registration at *FoodResQ* is successful, and you're now part of "
        "our mission to reduce food waste.\n\n"
        "With FoodResQ, you can:\n"
        "- Find surplus food available near you\n"
        "- Get notified about new food listings\n"
        "- Connect with food donors\n\n"
        "*Best Regards,*\n*FoodResQ Team*"
    )


def notify_later(task, *args) -> None:
    """Queue ``task`` once the current transaction commits; never raises."""

    def _dispatch():
        try:
            task.delay(*args)
        except Exception as e:
            logger.error(f"Could not queue notification {getattr(task, 'name', task)}: {e}")

    transaction.on_commit(_dispatch)
