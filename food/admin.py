from django import forms
from django.apps import apps
from django.contrib import admin
from django.db import transaction

from .models import FoodListing, FoodTransaction, UserProfile, format_quantity
from .services.listings import resize_listing


class FoodTransactionInline(admin.TabularInline):
    model = FoodTransaction
    extra = 0
    can_delete = False
    readonly_fields = ("user", "user_name", "quantity", "taken_at")

    def has_add_permission(self, request, obj=None):
        return False


class FoodListingAdminForm(forms.ModelForm):
    class Meta:
        model = FoodListing
        fields = [
            "title",
            "description",
            "quantity",
            "quantity_unit",
            "location",
            "expiry_date",
            "status",
            "image",
            "created_by",
        ]

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        if "status" in self.fields:
            # ``partial`` is derived; it only shows up when the listing already is partial
            allowed = set(FoodListing.SETTABLE_STATUSES)
            if self.instance.pk:
                allowed.add(self.instance.status)
            self.fields["status"].choices = [
                (value, label) for value, label in FoodListing.STATUS_CHOICES if value in allowed
            ]

    def clean_quantity(self):
        quantity = self.cleaned_data.get("quantity")
        if quantity is None or quantity <= 0:
            raise forms.ValidationError("Quantity must be greater than zero")
        if self.instance.pk:
            accepted = self.instance.accepted_quantity
            if quantity < accepted:
                raise forms.ValidationError(
                    f"Quantity cannot be less than the amount already accepted "
                    f"({format_quantity(accepted)} {self.instance.quantity_unit})"
                )
        return quantity


@admin.register(FoodListing)
class FoodListingAdmin(admin.ModelAdmin):
    form = FoodListingAdminForm
    list_display = (
        "id",
        "title",
        "quantity",
        "remaining_quantity",
        "quantity_unit",
        "status",
        "expiry_status",
        "expiry_date",
        "created_by",
    )
    list_filter = ("status", "expiry_status", "quantity_unit")
    search_fields = ("title", "location")
    readonly_fields = ("remaining_quantity", "expiry_status", "created_at", "updated_at")
    inlines = [FoodTransactionInline]

    @property
    def listing_cache(self):
        return apps.get_app_config("food").listing_cache

    def save_model(self, request, obj, form, change):
        with transaction.atomic():
            if change:
                stored = FoodListing.objects.select_for_update().get(pk=obj.pk)
                resize_listing(obj, obj.quantity, stored.accepted_quantity)
            else:
                obj.remaining_quantity = obj.quantity
            obj.refresh_status()
            super().save_model(request, obj, form, change)
        self.listing_cache.invalidate_listing(obj.pk)

    def delete_model(self, request, obj):
        pk = obj.pk
        super().delete_model(request, obj)
        self.listing_cache.invalidate_listing(pk)

    def delete_queryset(self, request, queryset):
        pks = list(queryset.values_list("pk", flat=True))
        super().delete_queryset(request, queryset)
        for pk in pks:
            self.listing_cache.invalidate_listing(pk)


@admin.register(UserProfile)
class UserProfileAdmin(admin.ModelAdmin):
    list_display = ("user", "role", "phone", "location")
    list_filter = ("role",)
    search_fields = ("user__username", "phone")
