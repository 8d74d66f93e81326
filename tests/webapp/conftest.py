"""Pytest fixtures for webapp tests."""

import pytest
from flask import g

from poisongame.webapp import create_app
from poisongame.webapp.config import TestConfig
from poisongame.webapp.extensions import db
from poisongame.webapp.services import get_escrow

PASSWORD = "testpassword123"


@pytest.fixture
def app(tmp_path):
    """Create test application with match storage under tmp_path."""

    class _Config(TestConfig):
        MATCHES_PATH = str(tmp_path / "matches")
        SETTINGS_PATH = str(tmp_path / "settings")
        ESCROW_PATH = str(tmp_path / "escrow")

    app = create_app(_Config)

    # Requests made while this fixture's app context is pushed reuse it, so
    # flask.g (and Flask-Login's cached user) would leak between clients.
    @app.before_request
    def _reset_login_cache():
        g.pop("_login_user", None)

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture
def make_client(app):
    """Factory for a client logged in as a freshly registered user."""

    def _make(username: str):
        client = app.test_client()
        response = client.post("/auth/register", json={"username": username, "password": PASSWORD})
        assert response.status_code == 201
        return client

    return _make


@pytest.fixture
def alice(make_client):
    return make_client("alice")


@pytest.fixture
def bob(make_client):
    return make_client("bob")


@pytest.fixture
def admin(make_client):
    """Client for the configured administrator account."""
    return make_client(TestConfig.ADMIN_USERNAME)


@pytest.fixture
def engine(app):
    return app.extensions["poisongame"]["engine"]


@pytest.fixture
def web_escrow(app):
    return get_escrow()
