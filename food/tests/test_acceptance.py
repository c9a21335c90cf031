import threading
from decimal import Decimal
from unittest import mock

import pytest
from django.db import connection

from food.exceptions import ConflictError, NotFoundError, ValidationError
from food.models import FoodListing, FoodTransaction
from food.services.acceptance import accept_listing, parse_accept_quantity

from .conftest import make_listing, make_user

pytestmark = pytest.mark.django_db


def test_partial_then_full_acceptance(admin_user, member):
    listing = make_listing(admin_user, quantity="10")

    listing = accept_listing(listing.pk, "4", member)
    assert listing.remaining_quantity == Decimal("6")
    assert listing.status == FoodListing.STATUS_PARTIAL

    listing = accept_listing(listing.pk, 6, member)
    assert listing.remaining_quantity == Decimal("0")
    assert listing.status == FoodListing.STATUS_COLLECTED

    entries = list(listing.transactions.values_list("user_name", "quantity"))
    assert entries == [("Meera", Decimal("4")), ("Meera", Decimal("6"))]


def test_collected_listing_rejects_further_accepts(admin_user, member):
    listing = make_listing(admin_user, quantity="10")
    accept_listing(listing.pk, "10", member)

    with pytest.raises(ConflictError) as exc:
        accept_listing(listing.pk, "1", member)
    assert str(exc.value) == "This food has already been fully collected"
    assert FoodTransaction.objects.filter(listing=listing).count() == 1


def test_over_accept_is_rejected_without_side_effects(admin_user, member):
    listing = make_listing(admin_user, quantity="10")
    accept_listing(listing.pk, "7", member)

    with pytest.raises(ConflictError) as exc:
        accept_listing(listing.pk, "5", member)
    assert str(exc.value) == "Cannot accept more than the remaining quantity (3 kg)"

    listing.refresh_from_db()
    assert listing.remaining_quantity == Decimal("3")
    assert listing.status == FoodListing.STATUS_PARTIAL
    assert listing.transactions.count() == 1


def test_transactions_sum_matches_taken_quantity(admin_user, member):
    other = make_user("second@example.com", name="Karan")
    listing = make_listing(admin_user, quantity="5.5")
    for user, qty in ((member, "1.25"), (other, "2"), (member, "0.75")):
        accept_listing(listing.pk, qty, user)

    listing.refresh_from_db()
    taken = sum(listing.transactions.values_list("quantity", flat=True))
    assert taken == listing.quantity - listing.remaining_quantity == Decimal("4")


def test_reserved_listing_can_be_accepted(admin_user, member):
    listing = make_listing(admin_user, status=FoodListing.STATUS_RESERVED)
    listing = accept_listing(listing.pk, "1", member)
    assert listing.status == FoodListing.STATUS_PARTIAL


def test_unknown_listing(member):
    with pytest.raises(NotFoundError):
        accept_listing(999999, "1", member)
    with pytest.raises(NotFoundError):
        accept_listing("not-an-id", "1", member)


@pytest.mark.parametrize("raw", [None, "", "0", "-2", "abc", "NaN", True])
def test_invalid_quantities(raw):
    with pytest.raises(ValidationError):
        parse_accept_quantity(raw)


def test_quantity_is_rounded_to_three_places():
    assert parse_accept_quantity("1.23456") == Decimal("1.235")


def test_successful_accept_invalidates_cache(admin_user, member):
    listing = make_listing(admin_user)
    cache = mock.Mock()
    accept_listing(listing.pk, "1", member, cache=cache)
    cache.invalidate_listing.assert_called_once_with(listing.pk)


def test_rejected_accept_leaves_cache_alone(admin_user, member):
    listing = make_listing(admin_user, quantity="1")
    cache = mock.Mock()
    with pytest.raises(ConflictError):
        accept_listing(listing.pk, "2", member, cache=cache)
    cache.invalidate_listing.assert_not_called()


def _accept_in_thread(listing_id, quantity, user, barrier, outcomes):
    try:
        barrier.wait(timeout=10)
        accept_listing(listing_id, quantity, user)
        outcomes.append("accepted")
    except ConflictError:
        outcomes.append("conflict")
    except Exception as e:
        outcomes.append(repr(e))
    finally:
        connection.close()


@pytest.mark.django_db(transaction=True)
def test_concurrent_accepts_never_oversell(admin_user, member):
    other = make_user("second@example.com", name="Karan")
    listing = make_listing(admin_user, quantity="10")

    barrier = threading.Barrier(2)
    outcomes = []
    threads = [
        threading.Thread(target=_accept_in_thread, args=(listing.pk, "6", user, barrier, outcomes))
        for user in (member, other)
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)

    assert sorted(outcomes) == ["accepted", "conflict"]
    listing.refresh_from_db()
    taken = sum(listing.transactions.values_list("quantity", flat=True))
    assert listing.transactions.count() == 1
    assert listing.remaining_quantity == listing.quantity - taken == Decimal("4")
    assert listing.status == FoodListing.STATUS_PARTIAL
