from datetime import timedelta
from decimal import Decimal

import pytest
from django.contrib import admin
from django.test import RequestFactory
from django.utils import timezone

from food.admin import FoodListingAdminForm
from food.cache import ListingCache
from food.models import FoodListing
from food.services.acceptance import accept_listing

from .conftest import make_listing

pytestmark = pytest.mark.django_db


@pytest.fixture
def listing_admin():
    return admin.site._registry[FoodListing]


@pytest.fixture
def admin_request(admin_user):
    request = RequestFactory().post("/admin/food/foodlisting/")
    request.user = admin_user
    return request


def _form_data(listing, **overrides):
    data = {
        "title": listing.title,
        "description": listing.description,
        "quantity": str(listing.quantity),
        "quantity_unit": listing.quantity_unit,
        "location": listing.location,
        "expiry_date": listing.expiry_date.strftime("%Y-%m-%d %H:%M:%S"),
        "status": listing.status,
        "image": listing.image,
        "created_by": listing.created_by_id,
    }
    data.update(overrides)
    return data


def test_raising_quantity_keeps_accepted_amount(listing_admin, admin_request, admin_user, member):
    listing = make_listing(admin_user, quantity="10")
    accept_listing(listing.pk, "4", member)

    obj = FoodListing.objects.get(pk=listing.pk)
    obj.quantity = Decimal("20")
    listing_admin.save_model(admin_request, obj, None, True)

    listing.refresh_from_db()
    assert listing.quantity == Decimal("20")
    assert listing.remaining_quantity == Decimal("16")
    assert listing.status == FoodListing.STATUS_PARTIAL


def test_raising_untouched_quantity_stays_available(listing_admin, admin_request, admin_user):
    listing = make_listing(admin_user, quantity="10")
    listing.quantity = Decimal("20")
    listing_admin.save_model(admin_request, listing, None, True)

    listing.refresh_from_db()
    assert listing.remaining_quantity == Decimal("20")
    assert listing.status == FoodListing.STATUS_AVAILABLE


def test_new_listing_starts_full(listing_admin, admin_request, admin_user):
    listing = FoodListing(
        title="Pulao",
        description="Two trays",
        quantity=Decimal("3"),
        location="Aundh",
        expiry_date=timezone.now() + timedelta(hours=2),
        created_by=admin_user,
    )
    listing_admin.save_model(admin_request, listing, None, False)

    listing.refresh_from_db()
    assert listing.remaining_quantity == Decimal("3")
    assert listing.status == FoodListing.STATUS_AVAILABLE


def test_admin_save_and_delete_clear_cache(listing_admin, admin_request, admin_user):
    listing = make_listing(admin_user)
    cache = ListingCache(listing_admin.listing_cache.backend)
    cache.set_list({}, {"data": []})
    cache.set_detail(listing.pk, {"id": listing.pk})

    listing.title = "Renamed"
    listing_admin.save_model(admin_request, listing, None, True)
    assert cache.get_list({}) is None
    assert cache.get_detail(listing.pk) is None

    cache.set_detail(listing.pk, {"id": listing.pk})
    listing_admin.delete_model(admin_request, listing)
    assert cache.get_detail(listing.pk) is None


def test_form_rejects_quantity_below_accepted(admin_user, member):
    listing = make_listing(admin_user, quantity="10")
    accept_listing(listing.pk, "4", member)
    listing.refresh_from_db()

    form = FoodListingAdminForm(data=_form_data(listing, quantity="3"), instance=listing)
    assert not form.is_valid()
    assert form.errors["quantity"] == ["Quantity cannot be less than the amount already accepted (4 kg)"]


def test_form_rejects_non_positive_quantity(admin_user):
    listing = make_listing(admin_user)
    form = FoodListingAdminForm(data=_form_data(listing, quantity="0"), instance=listing)
    assert not form.is_valid()
    assert "quantity" in form.errors


def test_form_does_not_offer_partial_on_untouched_listing(admin_user):
    listing = make_listing(admin_user)
    form = FoodListingAdminForm(data=_form_data(listing, status="partial"), instance=listing)
    assert "partial" not in [value for value, _label in form.fields["status"].choices]
    assert not form.is_valid()
    assert "status" in form.errors


def test_form_keeps_partial_listing_editable(admin_user, member):
    listing = make_listing(admin_user, quantity="10")
    accept_listing(listing.pk, "4", member)
    listing.refresh_from_db()

    form = FoodListingAdminForm(data=_form_data(listing, title="Biryani (veg)"), instance=listing)
    assert form.is_valid(), form.errors
