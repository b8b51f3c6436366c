"""Tests for the authentication endpoints."""

from __future__ import annotations

from app.models import User


def test_register_returns_token_and_user(client):
    response = client.post(
        "/api/auth/register",
        json={"username": "maria", "email": "Maria@Example.com", "password": "secret123"},
    )

    assert response.status_code == 201, response.text
    body = response.json()
    assert body["success"] is True
    assert body["token"]
    assert body["user"]["username"] == "maria"
    assert body["user"]["email"] == "maria@example.com"
    assert body["user"]["profilePicture"] == "default-avatar.png"
    assert "hashedPassword" not in body["user"]


def test_register_rejects_duplicates(client, register):
    register("maria")

    response = client.post(
        "/api/auth/register",
        json={"username": "maria", "email": "other@example.com", "password": "secret123"},
    )

    assert response.status_code == 400
    assert response.json() == {
        "success": False,
        "error": "Email or username already exists. Please use a different one.",
    }


def test_register_validates_payload(client):
    response = client.post(
        "/api/auth/register",
        json={"username": "ab", "email": "not-an-email", "password": "123"},
    )

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert "username" in body["error"]
    assert "password" in body["error"]


def test_login_marks_user_online(client, register, session_factory):
    user = register("maria")
    client.get("/api/auth/logout", headers=user["headers"])

    response = client.post(
        "/api/auth/login", json={"email": "MARIA@example.com", "password": "secret123"}
    )

    assert response.status_code == 200, response.text
    assert response.json()["user"]["id"] == user["id"]
    with session_factory() as session:
        stored = session.get(User, user["id"])
        assert stored.is_online is True
        assert stored.last_active is not None


def test_login_rejects_bad_credentials(client, register):
    register("maria")

    wrong_password = client.post(
        "/api/auth/login", json={"email": "maria@example.com", "password": "nope123"}
    )
    unknown = client.post("/api/auth/login", json={"email": "ghost@example.com", "password": "x"})

    assert wrong_password.status_code == 401
    assert wrong_password.json()["error"] == "Invalid credentials"
    assert unknown.status_code == 401


def test_logout_clears_online_flag(client, register, session_factory):
    user = register("maria")

    response = client.get("/api/auth/logout", headers=user["headers"])

    assert response.status_code == 200
    assert response.json() == {"success": True, "data": {}}
    with session_factory() as session:
        assert session.get(User, user["id"]).is_online is False


def test_me_requires_token(client):
    response = client.get("/api/auth/me")

    assert response.status_code == 401
    assert response.json() == {"success": False, "error": "Not authorized to access this route"}


def test_me_returns_full_profile(client, register):
    user = register("maria")

    response = client.get("/api/auth/me", headers=user["headers"])

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["id"] == user["id"]
    assert data["nativeLanguages"] == []
    assert data["learningLanguages"] == []
    assert data["location"] == {"country": None, "city": None}
    assert data["lastActive"] is not None


def test_update_details(client, register):
    user = register("maria")

    response = client.put(
        "/api/auth/updatedetails",
        headers=user["headers"],
        json={
            "bio": "Learning Japanese",
            "interests": ["music", "hiking"],
            "location": {"country": "Spain", "city": "Madrid"},
        },
    )

    assert response.status_code == 200, response.text
    data = response.json()["data"]
    assert data["bio"] == "Learning Japanese"
    assert data["interests"] == ["music", "hiking"]
    assert data["location"] == {"country": "Spain", "city": "Madrid"}
    assert data["username"] == "maria"


def test_update_details_rejects_taken_username(client, register):
    register("maria")
    other = register("pedro")

    response = client.put("/api/auth/updatedetails", headers=other["headers"], json={"username": "maria"})

    assert response.status_code == 400


def test_update_details_limits_bio_length(client, register):
    user = register("maria")

    response = client.put("/api/auth/updatedetails", headers=user["headers"], json={"bio": "x" * 251})

    assert response.status_code == 400


def test_update_password(client, register):
    user = register("maria")

    wrong = client.put(
        "/api/auth/updatepassword",
        headers=user["headers"],
        json={"currentPassword": "wrong", "newPassword": "newsecret"},
    )
    assert wrong.status_code == 401
    assert wrong.json()["error"] == "Password is incorrect"

    response = client.put(
        "/api/auth/updatepassword",
        headers=user["headers"],
        json={"currentPassword": "secret123", "newPassword": "newsecret"},
    )
    assert response.status_code == 200
    login = client.post("/api/auth/login", json={"email": "maria@example.com", "password": "newsecret"})
    assert login.status_code == 200


def test_password_reset_flow(client, register):
    register("maria")

    unknown = client.post("/api/auth/forgotpassword", json={"email": "ghost@example.com"})
    assert unknown.status_code == 404
    assert unknown.json()["error"] == "There is no user with that email"

    issued = client.post("/api/auth/forgotpassword", json={"email": "maria@example.com"})
    assert issued.status_code == 200
    reset_token = issued.json()["resetToken"]

    reset = client.put(f"/api/auth/resetpassword/{reset_token}", json={"password": "fresh-pass"})
    assert reset.status_code == 200, reset.text
    assert reset.json()["token"]

    reused = client.put(f"/api/auth/resetpassword/{reset_token}", json={"password": "again-pass"})
    assert reused.status_code == 400
    assert reused.json()["error"] == "Invalid or expired reset token"

    login = client.post("/api/auth/login", json={"email": "maria@example.com", "password": "fresh-pass"})
    assert login.status_code == 200
