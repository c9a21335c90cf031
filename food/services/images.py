from __future__ import annotations

import base64
import binascii
import logging
import re
from uuid import uuid4

from django.core.files.base import ContentFile
from django.core.files.storage import default_storage

from food.exceptions import UnexpectedError, ValidationError
from food.models import FoodListing

logger = logging.getLogger(__name__)

UPLOAD_DIR = "food-donations"

_DATA_URI_RE = re.compile(
    r"^data:image/(?P<ext>[a-zA-Z0-9.+-]+);base64,(?P<payload>.+)$", re.DOTALL
)


def store_listing_image(value: str | None) -> str:
    """Resolve the ``image`` value of a listing payload to a stored URL.

    Absolute URLs are kept, base64 data URIs are written to the default
    storage, and an empty value falls back to the placeholder image.
    """
    if not value or value == FoodListing.DEFAULT_IMAGE:
        return FoodListing.DEFAULT_IMAGE
    value = value.strip()
    if value.startswith(("http://", "https://")):
        return value

    match = _DATA_URI_RE.match(value)
    if not match:
        raise ValidationError("Invalid image data")
    try:
        content = base64.b64decode(match.group("payload"), validate=True)
    except (binascii.Error, ValueError):
        raise ValidationError("Invalid image data")
    if not content:
        raise ValidationError("Invalid image data")

    ext = match.group("ext").lower().split("+")[0]
    name = f"{UPLOAD_DIR}/{uuid4().hex}.{ext}"
    try:
        saved = default_storage.save(name, ContentFile(content))
        url = default_storage.url(saved)
    except Exception as e:
        logger.error(f"Error storing listing image {name}: {e}", exc_info=True)
        raise UnexpectedError("Image upload failed")
    logger.info(f"Stored listing image {saved} ({len(content)} bytes)")
    return url
