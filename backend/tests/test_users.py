"""Test user profile and settings endpoints"""

import pytest
from fastapi import status

pytestmark = pytest.mark.users


def test_update_user(authorized_client, test_user):
    """Test updating user profile"""
    update_data = {"username": "updateduser", "email": "updated@example.com"}

    response = authorized_client.put("/api/v1/users/me", json=update_data)
    assert response.status_code == status.HTTP_200_OK

    data = response.json()
    assert data["username"] == update_data["username"]
    assert data["email"] == update_data["email"]
    assert data["id"] == test_user.id


def test_update_user_duplicate_email(authorized_client, other_user):
    response = authorized_client.put(
        "/api/v1/users/me", json={"email": other_user.email}
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_get_user_settings(authorized_client, test_user):
    """Test retrieving user settings"""
    response = authorized_client.get("/api/v1/users/me/settings")
    assert response.status_code == status.HTTP_200_OK

    data = response.json()
    assert data["user_id"] == test_user.id
    assert data["pomodoro_duration"] == 1500
    assert data["pomodoros_until_long_break"] == 4
    assert "theme" in data


def test_update_user_settings(authorized_client, test_user):
    """Test updating user settings"""
    settings_data = {"pomodoro_duration": 1800, "theme": "dark"}  # 30 minutes

    response = authorized_client.put("/api/v1/users/me/settings", json=settings_data)
    assert response.status_code == status.HTTP_200_OK

    data = response.json()
    assert data["pomodoro_duration"] == settings_data["pomodoro_duration"]
    assert data["theme"] == settings_data["theme"]
    assert data["user_id"] == test_user.id


def test_patch_user_settings(authorized_client):
    response = authorized_client.patch(
        "/api/v1/users/me/settings", json={"auto_start_breaks": True}
    )
    assert response.status_code == status.HTTP_200_OK

    data = response.json()
    assert data["auto_start_breaks"] is True
    assert data["pomodoro_duration"] == 1500


@pytest.mark.parametrize(
    "settings_data",
    [
        {"pomodoro_duration": 0},
        {"short_break_duration": -60},
        {"pomodoros_until_long_break": 0},
        {"theme": "neon"},
    ],
)
def test_invalid_settings_rejected(authorized_client, settings_data):
    response = authorized_client.put("/api/v1/users/me/settings", json=settings_data)
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    data = authorized_client.get("/api/v1/users/me/settings").json()
    assert data["pomodoro_duration"] == 1500
