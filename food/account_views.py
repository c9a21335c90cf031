from django.contrib.auth.models import User
from rest_framework import permissions, viewsets
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from .serializers import (
    AdminUserUpdateSerializer,
    LoginSerializer,
    ProfileUpdateSerializer,
    RegisterSerializer,
    UserSerializer,
)
from .services.accounts import (
    get_user,
    login_user,
    logout_user,
    register_user,
    update_account,
)
from .views import IsAdmin


def _token_response(user, token, status=200):
    return Response(
        {"success": True, "token": token.key, "data": UserSerializer(user).data},
        status=status,
    )


@api_view(["POST"])
@permission_classes([permissions.AllowAny])
def register(request):
    serializer = RegisterSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    user, token = register_user(serializer.validated_data)
    return _token_response(user, token, status=201)


@api_view(["POST"])
@permission_classes([permissions.AllowAny])
def login(request):
    serializer = LoginSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    user, token = login_user(**serializer.validated_data)
    return _token_response(user, token)


@api_view(["GET"])
@permission_classes([permissions.IsAuthenticated])
def logout(request):
    logout_user(request.user)
    return Response({"success": True, "data": {}})


@api_view(["GET"])
@permission_classes([permissions.IsAuthenticated])
def me(request):
    return Response({"success": True, "data": UserSerializer(request.user).data})


@api_view(["PUT"])
@permission_classes([permissions.IsAuthenticated])
def update_profile(request):
    serializer = ProfileUpdateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    user = update_account(request.user, serializer.validated_data)
    return Response({"success": True, "data": UserSerializer(user).data})


class UserViewSet(viewsets.ViewSet):
    """Admin-only user management."""

    permission_classes = [permissions.IsAuthenticated, IsAdmin]

    def list(self, request):
        users = User.objects.select_related("profile").order_by("-date_joined")
        data = UserSerializer(users, many=True).data
        return Response({"success": True, "count": len(data), "data": data})

    def retrieve(self, request, pk=None):
        return Response({"success": True, "data": UserSerializer(get_user(pk)).data})

    def update(self, request, pk=None):
        serializer = AdminUserUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = update_account(get_user(pk), serializer.validated_data, allow_password_reset=True)
        return Response({"success": True, "data": UserSerializer(user).data})

    def partial_update(self, request, pk=None):
        return self.update(request, pk=pk)

    def destroy(self, request, pk=None):
        get_user(pk).delete()
        return Response({"success": True, "data": {}})
