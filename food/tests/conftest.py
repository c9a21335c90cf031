from datetime import timedelta
from decimal import Decimal

import pytest
from django.contrib.auth.models import User
from django.core.cache import caches
from django.utils import timezone
from rest_framework.test import APIClient

from food.models import FoodListing, UserProfile


@pytest.fixture(autouse=True)
def clear_cache():
    caches["default"].clear()
    yield
    caches["default"].clear()


def make_user(username, role=UserProfile.USER, phone="", name=""):
    user = User.objects.create_user(
        username=username, email=username, password="secret123", first_name=name
    )
    user.profile.role = role
    user.profile.phone = phone
    user.profile.save()
    return user


def make_listing(owner, quantity="10", **overrides):
    quantity = Decimal(quantity)
    values = {
        "title": "Vegetable biryani",
        "description": "Leftover from the community kitchen",
        "quantity": quantity,
        "remaining_quantity": quantity,
        "quantity_unit": FoodListing.UNIT_KG,
        "location": "MG Road",
        "expiry_date": timezone.now() + timedelta(hours=6),
        "created_by": owner,
    }
    values.update(overrides)
    return FoodListing.objects.create(**values)


@pytest.fixture
def admin_user(db):
    return make_user("admin@example.com", role=UserProfile.ADMIN, name="Asha")


@pytest.fixture
def other_admin(db):
    return make_user("other-admin@example.com", role=UserProfile.ADMIN, name="Ravi")


@pytest.fixture
def member(db):
    return make_user("member@example.com", name="Meera")


@pytest.fixture
def api_client():
    return APIClient()
