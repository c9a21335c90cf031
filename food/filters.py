"""Translate listing query parameters into ORM filters.

Only allow-listed fields are filterable. A parameter is either a plain
equality (``status=partial``) or carries an operator suffix
(``quantity[gte]=5``, ``status[in]=available,partial``). Values are coerced
to the field's type before they reach the query.
"""
from __future__ import annotations

import re
from datetime import datetime, time
from decimal import Decimal, InvalidOperation

from django.db.models import Q
from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

from .exceptions import ValidationError
from .models import FoodListing

RESERVED_PARAMS = ("select", "sort", "page", "limit")
OPERATORS = ("gt", "gte", "lt", "lte", "in")
DEFAULT_SORT = ["-created_at"]
DEFAULT_LIMIT = 10
MAX_LIMIT = 100

_PARAM_RE = re.compile(r"^(?P<field>[a-z_]+)(?:\[(?P<op>[a-z]+)\])?$")


def _text(field, raw):
    return raw


def _decimal(field, raw):
    try:
        value = Decimal(str(raw).strip())
    except (InvalidOperation, ValueError):
        raise ValidationError(f"Invalid number '{raw}' for {field}")
    if not value.is_finite():
        raise ValidationError(f"Invalid number '{raw}' for {field}")
    return value


def _integer(field, raw):
    try:
        return int(str(raw).strip())
    except ValueError:
        raise ValidationError(f"Invalid id '{raw}' for {field}")


def _datetime(field, raw):
    raw = str(raw).strip()
    try:
        value = parse_datetime(raw)
        if value is None:
            day = parse_date(raw)
            if day is None:
                raise ValueError(raw)
            value = datetime.combine(day, time.min)
    except ValueError:
        raise ValidationError(f"Invalid date '{raw}' for {field}")
    if timezone.is_naive(value):
        value = timezone.make_aware(value, timezone.get_default_timezone())
    return value


def _choice(choices):
    allowed = {value for value, _label in choices}

    def coerce(field, raw):
        if raw not in allowed:
            raise ValidationError(f"Invalid value '{raw}' for {field}")
        return raw

    return coerce


FILTER_FIELDS = {
    "title": _text,
    "location": _text,
    "status": _choice(FoodListing.STATUS_CHOICES),
    "expiry_status": _choice(FoodListing.EXPIRY_STATUS_CHOICES),
    "quantity_unit": _choice(FoodListing.UNIT_CHOICES),
    "quantity": _decimal,
    "remaining_quantity": _decimal,
    "expiry_date": _datetime,
    "created_at": _datetime,
    "updated_at": _datetime,
    "created_by": _integer,
}

SORT_FIELDS = {
    "title",
    "location",
    "status",
    "expiry_status",
    "quantity_unit",
    "quantity",
    "remaining_quantity",
    "expiry_date",
    "created_at",
    "updated_at",
}


def parse_listing_filters(params) -> Q:
    """Build a ``Q`` for the recognised filter params in ``params``.

    Listings are limited to ``eatable`` ones unless the caller filters on
    ``expiry_status`` explicitly.
    """
    query = Q()
    freshness_given = False
    for key, raw in params.items():
        if key in RESERVED_PARAMS:
            continue
        match = _PARAM_RE.match(key)
        if not match or match.group("field") not in FILTER_FIELDS:
            continue
        field, op = match.group("field"), match.group("op")
        coerce = FILTER_FIELDS[field]
        if op is not None and op not in OPERATORS:
            raise ValidationError(f"Unsupported filter operator '{op}' for {field}")
        if op == "in":
            value = [coerce(field, part.strip()) for part in str(raw).split(",") if part.strip()]
        else:
            value = coerce(field, raw)
        lookup = field if op is None else f"{field}__{op}"
        query &= Q(**{lookup: value})
        if field == "expiry_status":
            freshness_given = True
    if not freshness_given:
        query &= Q(expiry_status=FoodListing.EATABLE)
    return query


def parse_sort(raw) -> list[str]:
    ordering = []
    for token in str(raw or "").split(","):
        token = token.strip()
        if not token:
            continue
        name = token.lstrip("-")
        if name not in SORT_FIELDS:
            raise ValidationError(f"Cannot sort by '{name}'")
        ordering.append(token)
    # Stable pages when the sort key has ties
    return (ordering or list(DEFAULT_SORT)) + ["-id"]


def _positive_int(raw, default):
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return default
    return value if value > 0 else default


def parse_pagination(params) -> tuple[int, int]:
    page = _positive_int(params.get("page"), 1)
    limit = min(_positive_int(params.get("limit"), DEFAULT_LIMIT), MAX_LIMIT)
    return page, limit


def parse_select(raw) -> list[str] | None:
    if not raw:
        return None
    fields = [f.strip() for f in str(raw).split(",") if f.strip()]
    return fields or None
