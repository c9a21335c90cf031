from __future__ import annotations

import logging

from django.contrib.auth import authenticate
from django.contrib.auth.models import User
from django.db import IntegrityError, transaction
from rest_framework.authtoken.models import Token

from food.exceptions import AuthenticationError, NotFoundError, ValidationError
from food.models import UserProfile
from food.notifications import notify_later
from food.tasks import send_welcome_message

logger = logging.getLogger(__name__)

DUPLICATE_EMAIL = "User already exists"


def _email_taken(email: str, exclude_pk=None) -> bool:
    qs = User.objects.filter(username__iexact=email)
    if exclude_pk is not None:
        qs = qs.exclude(pk=exclude_pk)
    return qs.exists()


def register_user(data: dict) -> tuple[User, Token]:
    email = data["email"].lower()
    if _email_taken(email):
        raise ValidationError(DUPLICATE_EMAIL)
    try:
        with transaction.atomic():
            user = User.objects.create_user(
                username=email,
                email=email,
                password=data["password"],
                first_name=data["name"],
            )
            profile = user.profile
            profile.role = data.get("role") or UserProfile.USER
            profile.phone = data.get("phone", "")
            profile.location = data.get("location", "")
            profile.save()
    except IntegrityError:
        raise ValidationError(DUPLICATE_EMAIL)

    token, _ = Token.objects.get_or_create(user=user)
    if profile.phone:
        notify_later(send_welcome_message, user.pk)
    logger.info(f"Registered {email} as {profile.role}")
    return user, token


def login_user(email: str, password: str) -> tuple[User, Token]:
    user = authenticate(username=(email or "").lower(), password=password)
    if user is None:
        raise AuthenticationError("Invalid credentials")
    token, _ = Token.objects.get_or_create(user=user)
    return user, token


def logout_user(user) -> None:
    Token.objects.filter(user=user).delete()


def update_account(user: User, data: dict, allow_password_reset: bool = False) -> User:
    """Apply profile edits.

    Changing the password through one's own profile requires the current
    password; admins editing another account (``allow_password_reset``) set
    it directly.
    """
    profile = user.profile
    if "email" in data:
        email = data["email"].lower()
        if _email_taken(email, exclude_pk=user.pk):
            raise ValidationError(DUPLICATE_EMAIL)
        user.username = email
        user.email = email
    if "name" in data:
        user.first_name = data["name"]

    new_password = data.get("new_password") or data.get("password")
    if new_password:
        if not allow_password_reset and not user.check_password(data.get("current_password") or ""):
            raise AuthenticationError("Current password is incorrect")
        user.set_password(new_password)

    for name in ("phone", "location"):
        if name in data:
            setattr(profile, name, data[name])

    try:
        with transaction.atomic():
            user.save()
            profile.save()
    except IntegrityError:
        raise ValidationError(DUPLICATE_EMAIL)
    return user


def get_user(user_id) -> User:
    try:
        return User.objects.select_related("profile").get(pk=user_id)
    except (User.DoesNotExist, ValueError, TypeError):
        raise NotFoundError("User not found")
