from decimal import Decimal

from django.contrib.auth.models import User
from django.db import models
from django.db.models import F, Q
from django.utils import timezone


class UserProfile(models.Model):
    """Extend Django’s User with a role, phone and location."""
    USER = "user"
    ADMIN = "admin"
    ROLE_CHOICES = [
        (USER, "User"),
        (ADMIN, "Admin"),
    ]

    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name="profile")
    role = models.CharField(max_length=10, choices=ROLE_CHOICES, default=USER)
    phone = models.CharField(max_length=20, blank=True)
    location = models.CharField(max_length=255, blank=True)

    def __str__(self):
        return f"{self.user.username} ({self.get_role_display()})"

    @property
    def is_admin(self):
        return self.role == self.ADMIN


def format_quantity(value) -> str:
    """Render a decimal quantity without trailing zeros (``6.000`` -> ``6``)."""
    value = Decimal(value)
    if value == value.to_integral_value():
        return f"{value.quantize(Decimal(1)):f}"
    return f"{value.normalize():f}"


def recompute_status(remaining, total, current):
    """Return the lifecycle status implied by the remaining quantity.

    An untouched listing (remaining == total) keeps whatever status was set
    explicitly; any partial take forces ``partial`` and an empty listing is
    always ``collected``.
    """
    if remaining <= 0:
        return FoodListing.STATUS_COLLECTED
    if remaining < total:
        return FoodListing.STATUS_PARTIAL
    return current or FoodListing.STATUS_AVAILABLE


class FoodListing(models.Model):
    UNIT_KG = "kg"
    UNIT_LITERS = "liters"
    UNIT_PIECES = "pieces"
    UNIT_BOXES = "boxes"
    UNIT_PACKETS = "packets"
    UNIT_CHOICES = [
        (UNIT_KG, "Kilograms"),
        (UNIT_LITERS, "Liters"),
        (UNIT_PIECES, "Pieces"),
        (UNIT_BOXES, "Boxes"),
        (UNIT_PACKETS, "Packets"),
    ]

    STATUS_AVAILABLE = "available"
    STATUS_RESERVED = "reserved"
    STATUS_COLLECTED = "collected"
    STATUS_PARTIAL = "partial"
    STATUS_CHOICES = [
        (STATUS_AVAILABLE, "Available"),
        (STATUS_RESERVED, "Reserved"),
        (STATUS_COLLECTED, "Collected"),
        (STATUS_PARTIAL, "Partially collected"),
    ]
    # Statuses an admin may set by hand; ``partial`` is always derived.
    SETTABLE_STATUSES = [STATUS_AVAILABLE, STATUS_RESERVED, STATUS_COLLECTED]

    EATABLE = "eatable"
    SPOILED = "spoiled"
    EXPIRY_STATUS_CHOICES = [
        (EATABLE, "Eatable"),
        (SPOILED, "Spoiled"),
    ]

    DEFAULT_IMAGE = "default-food.jpg"

    title = models.CharField(max_length=100)
    description = models.TextField(max_length=500)
    quantity = models.DecimalField(max_digits=12, decimal_places=3)
    quantity_unit = models.CharField(max_length=10, choices=UNIT_CHOICES, default=UNIT_KG)
    remaining_quantity = models.DecimalField(max_digits=12, decimal_places=3)
    location = models.CharField(max_length=255)
    expiry_date = models.DateTimeField(db_index=True)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_AVAILABLE)
    expiry_status = models.CharField(
        max_length=10, choices=EXPIRY_STATUS_CHOICES, default=EATABLE, db_index=True
    )
    image = models.CharField(max_length=500, default=DEFAULT_IMAGE)
    created_by = models.ForeignKey(User, on_delete=models.CASCADE, related_name="food_listings")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=Q(quantity__gt=0),
                name="food_quantity_positive",
            ),
            models.CheckConstraint(
                condition=Q(remaining_quantity__gte=0) & Q(remaining_quantity__lte=F("quantity")),
                name="food_remaining_within_quantity",
            ),
        ]

    def __str__(self):
        return f"{self.title} ({self.remaining_quantity}/{self.quantity} {self.quantity_unit})"

    @property
    def accepted_quantity(self):
        return (self.quantity or Decimal("0")) - (self.remaining_quantity or Decimal("0"))

    def refresh_status(self):
        self.status = recompute_status(self.remaining_quantity, self.quantity, self.status)
        return self.status


class FoodTransaction(models.Model):
    """One partial acceptance of a listing. Rows are append-only."""

    listing = models.ForeignKey(FoodListing, on_delete=models.CASCADE, related_name="transactions")
    # Keep the ledger when an account is removed; the name stays denormalized.
    user = models.ForeignKey(
        User, on_delete=models.SET_NULL, null=True, related_name="food_transactions"
    )
    user_name = models.CharField(max_length=150)
    quantity = models.DecimalField(max_digits=12, decimal_places=3)
    taken_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["taken_at", "id"]
        constraints = [
            models.CheckConstraint(
                condition=Q(quantity__gt=0),
                name="food_transaction_quantity_positive",
            ),
        ]

    def __str__(self):
        return f"{self.user_name} took {self.quantity} of #{self.listing_id}"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValueError("Food transactions are immutable once recorded")
        super().save(*args, **kwargs)
