from decimal import Decimal

from django.contrib.auth.models import User
from rest_framework import serializers

from .models import FoodListing, FoodTransaction, UserProfile


class DynamicFieldsModelSerializer(serializers.ModelSerializer):
    """ModelSerializer that takes an optional ``fields`` list to project on."""

    def __init__(self, *args, **kwargs):
        fields = kwargs.pop("fields", None)
        super().__init__(*args, **kwargs)
        if fields:
            keep = set(fields) | {"id"}
            for name in set(self.fields) - keep:
                self.fields.pop(name)


class ListingOwnerSerializer(serializers.ModelSerializer):
    name = serializers.CharField(source="first_name", read_only=True)
    role = serializers.CharField(source="profile.role", default=UserProfile.USER, read_only=True)

    class Meta:
        model = User
        fields = ["id", "name", "role"]


class FoodTransactionSerializer(serializers.ModelSerializer):
    class Meta:
        model = FoodTransaction
        fields = ["id", "user", "user_name", "quantity", "taken_at"]
        read_only_fields = fields


class FoodListingSerializer(DynamicFieldsModelSerializer):
    created_by = ListingOwnerSerializer(read_only=True)
    transactions = FoodTransactionSerializer(many=True, read_only=True)

    class Meta:
        model = FoodListing
        fields = [
            "id",
            "title",
            "description",
            "quantity",
            "quantity_unit",
            "remaining_quantity",
            "location",
            "expiry_date",
            "status",
            "expiry_status",
            "image",
            "created_by",
            "transactions",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class FoodListingWriteSerializer(serializers.Serializer):
    """Input for create and update; updates are validated with partial=True."""

    title = serializers.CharField(min_length=3, max_length=100)
    description = serializers.CharField(max_length=500)
    quantity = serializers.DecimalField(max_digits=12, decimal_places=3, min_value=Decimal("0.001"))
    quantity_unit = serializers.ChoiceField(choices=FoodListing.UNIT_CHOICES, required=False)
    location = serializers.CharField(max_length=255)
    expiry_date = serializers.DateTimeField()
    status = serializers.ChoiceField(choices=FoodListing.SETTABLE_STATUSES, required=False)
    image = serializers.CharField(required=False, allow_blank=True, trim_whitespace=True)


# ----- accounts -----

class UserSerializer(serializers.ModelSerializer):
    name = serializers.CharField(source="first_name", read_only=True)
    phone = serializers.CharField(source="profile.phone", default="", read_only=True)
    role = serializers.CharField(source="profile.role", default=UserProfile.USER, read_only=True)
    location = serializers.CharField(source="profile.location", default="", read_only=True)
    created_at = serializers.DateTimeField(source="date_joined", read_only=True)

    class Meta:
        model = User
        fields = ["id", "name", "email", "phone", "role", "location", "created_at"]
        read_only_fields = fields


class RegisterSerializer(serializers.Serializer):
    name = serializers.CharField(min_length=3, max_length=50)
    email = serializers.EmailField(max_length=150)
    password = serializers.CharField(min_length=6, write_only=True, trim_whitespace=False)
    phone = serializers.CharField(max_length=20, required=False, allow_blank=True)
    location = serializers.CharField(max_length=255, required=False, allow_blank=True)
    role = serializers.ChoiceField(choices=UserProfile.ROLE_CHOICES, required=False)


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(trim_whitespace=False)


class ProfileUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(min_length=3, max_length=50, required=False)
    email = serializers.EmailField(max_length=150, required=False)
    phone = serializers.CharField(max_length=20, required=False, allow_blank=True)
    location = serializers.CharField(max_length=255, required=False, allow_blank=True)
    currentPassword = serializers.CharField(
        source="current_password", required=False, write_only=True, trim_whitespace=False
    )
    newPassword = serializers.CharField(
        source="new_password", min_length=6, required=False, write_only=True, trim_whitespace=False
    )

    def validate(self, attrs):
        if attrs.get("new_password") and not attrs.get("current_password"):
            raise serializers.ValidationError({"currentPassword": "This field is required."})
        return attrs


class AdminUserUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(min_length=3, max_length=50, required=False)
    email = serializers.EmailField(max_length=150, required=False)
    password = serializers.CharField(min_length=6, required=False, write_only=True, trim_whitespace=False)
