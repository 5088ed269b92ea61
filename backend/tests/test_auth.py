"""
Unit tests for authentication endpoints.
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from reelshelf.models.user import User, UserSession
from reelshelf.utils.security import decode_access_token


@pytest.mark.unit
@pytest.mark.auth
class TestUserRegistration:
    """Test user registration endpoint."""

    def test_register_new_user_success(self, client: TestClient, test_db: Session):
        """Test successful user registration."""
        response = client.post(
            "/api/auth/register",
            json={
                "email": "NewUser@Example.com",
                "username": "newuser",
                "password": "secret123"
            }
        )

        assert response.status_code == 201
        data = response.json()
        assert data["token_type"] == "bearer"
        assert data["user"]["username"] == "newuser"
        assert data["user"]["email"] == "newuser@example.com"
        assert "hashed_password" not in data["user"]

        payload = decode_access_token(data["access_token"])
        assert payload["username"] == "newuser"

        user = test_db.query(User).filter(User.username == "newuser").first()
        assert user is not None
        assert user.is_active is True
        assert test_db.query(UserSession).filter(UserSession.user_id == user.id).count() == 1

    def test_register_duplicate_email(self, client: TestClient, test_user: User):
        """Test registration with existing email fails."""
        response = client.post(
            "/api/auth/register",
            json={"email": test_user.email, "username": "someoneelse", "password": "secret123"}
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Email already registered"

    def test_register_duplicate_username(self, client: TestClient, test_user: User):
        """Test registration with existing username fails."""
        response = client.post(
            "/api/auth/register",
            json={"email": "fresh@example.com", "username": test_user.username, "password": "secret123"}
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Username already taken"

    def test_register_short_password(self, client: TestClient):
        """Test registration with a password under six characters fails."""
        response = client.post(
            "/api/auth/register",
            json={"email": "short@example.com", "username": "shorty", "password": "abc"}
        )

        assert response.status_code == 422

    def test_register_username_must_start_with_letter(self, client: TestClient):
        """Test usernames starting with a digit are rejected."""
        response = client.post(
            "/api/auth/register",
            json={"email": "digit@example.com", "username": "1player", "password": "secret123"}
        )

        assert response.status_code == 422

    def test_register_invalid_email(self, client: TestClient):
        """Test registration with invalid email fails."""
        response = client.post(
            "/api/auth/register",
            json={"email": "not-an-email", "username": "validname", "password": "secret123"}
        )

        assert response.status_code == 422


@pytest.mark.unit
@pytest.mark.auth
class TestUserLogin:
    """Test user login endpoint."""

    def test_login_with_username(self, client: TestClient, test_user: User):
        """Test successful login by username."""
        response = client.post(
            "/api/auth/login",
            json={"username": test_user.username, "password": "testpassword123"}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["token_type"] == "bearer"
        assert data["user"]["id"] == str(test_user.id)

    def test_login_with_email(self, client: TestClient, test_user: User):
        """Test the username field also accepts an email address."""
        response = client.post(
            "/api/auth/login",
            json={"username": test_user.email, "password": "testpassword123"}
        )

        assert response.status_code == 200

    def test_login_wrong_password(self, client: TestClient, test_user: User):
        """Test login with wrong password fails."""
        response = client.post(
            "/api/auth/login",
            json={"username": test_user.username, "password": "wrongpassword"}
        )

        assert response.status_code == 401

    def test_login_unknown_user(self, client: TestClient):
        """Test login for a user that does not exist fails."""
        response = client.post(
            "/api/auth/login",
            json={"username": "ghost", "password": "whatever1"}
        )

        assert response.status_code == 401


@pytest.mark.unit
@pytest.mark.auth
class TestSessions:
    """Test session-backed token handling."""

    def test_me_returns_current_user(self, client: TestClient, test_user: User, auth_headers: dict):
        """Test /me with a valid token."""
        response = client.get("/api/auth/me", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["username"] == test_user.username

    def test_me_without_token(self, client: TestClient):
        """Test /me without a token is rejected."""
        response = client.get("/api/auth/me")

        assert response.status_code in (401, 403)

    def test_me_with_garbage_token(self, client: TestClient):
        """Test /me with a malformed token."""
        response = client.get("/api/auth/me", headers={"Authorization": "Bearer not.a.jwt"})

        assert response.status_code == 401

    def test_verify_token(self, client: TestClient, test_user: User, auth_headers: dict):
        """Test token verification."""
        response = client.get("/api/auth/verify", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["detail"] == f"Authenticated as {test_user.username}"

    def test_logout_revokes_session(self, client: TestClient, auth_headers: dict):
        """Test a token stops working after logout."""
        response = client.post("/api/auth/logout", headers=auth_headers)
        assert response.status_code == 200

        response = client.get("/api/auth/me", headers=auth_headers)
        assert response.status_code == 401

    def test_logout_twice(self, client: TestClient, auth_headers: dict):
        """Test logging out an already revoked session."""
        client.post("/api/auth/logout", headers=auth_headers)
        response = client.post("/api/auth/logout", headers=auth_headers)

        assert response.status_code == 404
