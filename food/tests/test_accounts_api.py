import pytest
from django.contrib.auth.models import User
from rest_framework.authtoken.models import Token

from food.models import UserProfile

pytestmark = pytest.mark.django_db


def _register(client, **overrides):
    data = {
        "name": "Priya Nair",
        "email": "Priya@Example.com",
        "password": "hunter22",
        "phone": "9876543210",
        "location": "Indiranagar",
    }
    data.update(overrides)
    return client.post("/api/auth/register", data, format="json")


def test_register_returns_token_and_profile(api_client):
    response = _register(api_client)
    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["token"]
    assert body["data"]["email"] == "priya@example.com"
    assert body["data"]["role"] == "user"
    assert body["data"]["phone"] == "9876543210"
    assert Token.objects.filter(key=body["token"]).exists()


def test_register_duplicate_email(api_client):
    _register(api_client)
    response = _register(api_client, email="priya@example.com")
    assert response.status_code == 400
    assert response.json() == {"success": False, "error": "User already exists"}


def test_register_validation(api_client):
    response = _register(api_client, password="123")
    assert response.status_code == 400
    assert response.json()["error"].startswith("password:")


def test_login_and_me(api_client):
    _register(api_client)
    response = api_client.post(
        "/api/auth/login", {"email": "priya@example.com", "password": "hunter22"}, format="json"
    )
    assert response.status_code == 200
    token = response.json()["token"]

    api_client.credentials(HTTP_AUTHORIZATION=f"Token {token}")
    me = api_client.get("/api/auth/me").json()
    assert me["data"]["name"] == "Priya Nair"
    assert me["data"]["location"] == "Indiranagar"


def test_login_bad_password(api_client):
    _register(api_client)
    response = api_client.post(
        "/api/auth/login", {"email": "priya@example.com", "password": "wrong"}, format="json"
    )
    assert response.status_code == 401
    assert response.json()["error"] == "Invalid credentials"


def test_logout_revokes_token(api_client):
    token = _register(api_client).json()["token"]
    api_client.credentials(HTTP_AUTHORIZATION=f"Token {token}")
    assert api_client.get("/api/auth/logout").status_code == 200
    assert not Token.objects.filter(key=token).exists()
    assert api_client.get("/api/auth/me").status_code == 401


def test_update_profile_password_requires_current(api_client):
    _register(api_client)
    user = User.objects.get(username="priya@example.com")
    api_client.force_authenticate(user)

    response = api_client.put(
        "/api/auth/updateprofile",
        {"currentPassword": "nope", "newPassword": "better123"},
        format="json",
    )
    assert response.status_code == 401
    assert response.json()["error"] == "Current password is incorrect"

    response = api_client.put(
        "/api/auth/updateprofile",
        {"name": "Priya N", "currentPassword": "hunter22", "newPassword": "better123"},
        format="json",
    )
    assert response.status_code == 200
    user.refresh_from_db()
    assert user.check_password("better123")
    assert user.first_name == "Priya N"


def test_user_admin_endpoints(api_client, admin_user, member):
    api_client.force_authenticate(member)
    assert api_client.get("/api/users/").status_code == 403

    api_client.force_authenticate(admin_user)
    body = api_client.get("/api/users/").json()
    assert body["count"] == 2

    response = api_client.patch(f"/api/users/{member.id}/", {"name": "Meera K"}, format="json")
    assert response.json()["data"]["name"] == "Meera K"

    assert api_client.delete(f"/api/users/{member.id}/").status_code == 200
    assert not User.objects.filter(pk=member.id).exists()
    assert api_client.get(f"/api/users/{member.id}/").status_code == 404


def test_superuser_gets_admin_profile(db):
    root = User.objects.create_superuser("root", "root@example.com", "pw")
    assert root.profile.role == UserProfile.ADMIN
