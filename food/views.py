from django.apps import apps
from rest_framework import permissions, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from .exceptions import NotFoundError
from .filters import parse_select
from .models import UserProfile
from .serializers import FoodListingSerializer, FoodListingWriteSerializer
from .services.acceptance import accept_listing
from .services.listings import (
    create_listing,
    delete_listing,
    get_listing,
    list_listings,
    update_listing,
)


class IsAdmin(permissions.BasePermission):
    """DRF permission enforcing the admin role."""

    message = "User role is not authorized to access this route"

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False
        profile = getattr(request.user, "profile", None)
        return bool(profile and profile.role == UserProfile.ADMIN)


def _listing_id(raw) -> int:
    try:
        return int(str(raw).strip())
    except (TypeError, ValueError):
        raise NotFoundError("Food listing not found")


# ----- DRF ViewSets -----

class FoodListingViewSet(viewsets.ViewSet):
    """Food listings: public reads, admin writes, authenticated accepts.

    Reads go through the listing cache; every write invalidates it.
    """

    def get_permissions(self):
        if self.action in ("list", "retrieve"):
            return [permissions.AllowAny()]
        if self.action == "accept":
            return [permissions.IsAuthenticated()]
        return [permissions.IsAuthenticated(), IsAdmin()]

    @property
    def listing_cache(self):
        return apps.get_app_config("food").listing_cache

    def list(self, request):
        params = request.query_params.dict()
        cache = self.listing_cache
        cached = cache.get_list(params)
        if cached is not None:
            return Response({"success": True, **cached, "fromCache": True})

        page = list_listings(request.query_params)
        data = FoodListingSerializer(
            page.items, many=True, fields=parse_select(params.get("select"))
        ).data
        payload = {"count": page.count, "pagination": page.pagination, "data": data}
        cache.set_list(params, payload)
        return Response({"success": True, **payload, "fromCache": False})

    def retrieve(self, request, pk=None):
        # Detail entries are keyed by the integer id, the same key writes invalidate
        pk = _listing_id(pk)
        cache = self.listing_cache
        cached = cache.get_detail(pk)
        if cached is not None:
            return Response({"success": True, "data": cached, "fromCache": True})

        data = FoodListingSerializer(get_listing(pk)).data
        cache.set_detail(pk, data)
        return Response({"success": True, "data": data, "fromCache": False})

    def create(self, request):
        serializer = FoodListingWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        listing = create_listing(serializer.validated_data, request.user, cache=self.listing_cache)
        return Response(
            {"success": True, "data": FoodListingSerializer(listing).data}, status=201
        )

    def update(self, request, pk=None):
        # PUT and PATCH both accept any subset of the editable fields.
        serializer = FoodListingWriteSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        listing = update_listing(pk, serializer.validated_data, request.user, cache=self.listing_cache)
        return Response({"success": True, "data": FoodListingSerializer(listing).data})

    def partial_update(self, request, pk=None):
        return self.update(request, pk=pk)

    def destroy(self, request, pk=None):
        delete_listing(pk, request.user, cache=self.listing_cache)
        return Response({"success": True, "data": {}})

    @action(detail=True, methods=["post"], url_path="accept")
    def accept(self, request, pk=None):
        """Accept part (or all) of the remaining quantity of a listing."""
        listing = accept_listing(
            pk, request.data.get("quantity"), request.user, cache=self.listing_cache
        )
        return Response({"success": True, "data": FoodListingSerializer(listing).data})
