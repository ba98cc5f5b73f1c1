import pytest
from fastapi import status
from focusflow.db.models import UserSettings

pytestmark = pytest.mark.users


def test_register_user(client, db):
    # Test user registration
    user_data = {
        "username": "newuser",
        "email": "newuser@example.com",
        "password": "password123",
    }

    response = client.post("/api/v1/auth/register", json=user_data)
    assert response.status_code == status.HTTP_201_CREATED

    data = response.json()
    assert data["username"] == user_data["username"]
    assert data["email"] == user_data["email"]
    assert "id" in data
    assert "password" not in data

    # Registration creates default settings
    settings = db.query(UserSettings).filter_by(user_id=data["id"]).first()
    assert settings is not None
    assert settings.pomodoro_duration == 1500


def test_register_duplicate_username(client, test_user):
    user_data = {
        "username": test_user.username,
        "email": "someone@example.com",
        "password": "password123",
    }

    response = client.post("/api/v1/auth/register", json=user_data)
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_register_short_password(client):
    user_data = {"username": "shorty", "email": "s@example.com", "password": "abc"}

    response = client.post("/api/v1/auth/register", json=user_data)
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_login(client, test_user):
    # Test login
    login_data = {"username": test_user.username, "password": "password123"}

    response = client.post("/api/v1/auth/token", data=login_data)
    assert response.status_code == status.HTTP_200_OK

    data = response.json()
    assert "access_token" in data
    assert data["token_type"] == "bearer"


def test_login_invalid_credentials(client, test_user):
    # Test login with invalid credentials
    login_data = {"username": test_user.username, "password": "wrongpassword"}

    response = client.post("/api/v1/auth/token", data=login_data)
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_get_me(authorized_client, test_user):
    # Test getting current user
    response = authorized_client.get("/api/v1/auth/me")
    assert response.status_code == status.HTTP_200_OK

    data = response.json()
    assert data["id"] == test_user.id
    assert data["username"] == test_user.username
    assert data["email"] == test_user.email


def test_get_me_unauthorized(client):
    # Test getting current user without authentication
    response = client.get("/api/v1/auth/me")
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_get_me_bad_token(client):
    client.headers = {**client.headers, "Authorization": "Bearer not-a-token"}

    response = client.get("/api/v1/auth/me")
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
