"""Tests for authentication routes."""

import pytest

from poisongame.engine.auth import AuthorizationError
from poisongame.webapp.models import User

PASSWORD = "testpassword123"


def test_register_creates_user(client, app):
    """Test user registration."""
    response = client.post("/auth/register", json={"username": "newuser", "password": "securepass123"})
    assert response.status_code == 201
    assert response.get_json() == {"username": "newuser"}

    user = User.query.filter_by(username="newuser").first()
    assert user is not None
    assert user.check_password("securepass123")
    assert not user.check_password("wrongpass123")


def test_register_short_password(client):
    """Test registration fails with short password."""
    response = client.post("/auth/register", json={"username": "newuser", "password": "short"})
    assert response.status_code == 400
    assert "at least 8 characters" in response.get_json()["message"]


def test_register_short_username(client):
    response = client.post("/auth/register", json={"username": "ab", "password": "securepass123"})
    assert response.status_code == 400


def test_register_duplicate_username(client, alice):
    """Test registration fails with existing username."""
    response = client.post("/auth/register", json={"username": "alice", "password": "securepass123"})
    assert response.status_code == 400
    assert "already taken" in response.get_json()["message"]


def test_login_success(client, alice):
    response = client.post("/auth/login", json={"username": "alice", "password": PASSWORD})
    assert response.status_code == 200
    assert response.get_json()["username"] == "alice"


def test_login_wrong_password(client, alice):
    """Test login fails with wrong password."""
    response = client.post("/auth/login", json={"username": "alice", "password": "wrongpassword"})
    assert response.status_code == 401
    assert response.get_json()["error"] == "InvalidCredentials"


def test_login_unknown_user(client):
    response = client.post("/auth/login", json={"username": "nobody", "password": PASSWORD})
    assert response.status_code == 401


def test_logout(alice):
    response = alice.post("/auth/logout")
    assert response.status_code == 200

    # Session is gone
    response = alice.post("/auth/logout")
    assert response.status_code == 401


def test_protected_route_requires_login(client):
    response = client.get("/matches/1")
    assert response.status_code == 401
    assert response.get_json()["error"] == "Unauthorized"


def test_user_acts_as_match_player(app, alice):
    """A registered user's username is its player identity."""
    user = User.query.filter_by(username="alice").first()
    assert user.player == "alice"

    user.call_context().require_auth("alice")
    scoped = user.authorize(3, 50)
    assert (scoped.address, scoped.args) == ("alice", (3, 50))
    assert user.authorize().args is None

    with pytest.raises(AuthorizationError):
        user.call_context().require_auth("bob")
