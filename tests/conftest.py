"""
Shared fixtures: a Flask app on an in-memory SQLite database, its test
client, and the SessionManager it wires up.
"""
import pytest

from api import create_app
from tests.helpers import register_and_login


@pytest.fixture
def app():
    app = create_app("testing")
    with app.app_context():
        yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def manager(app):
    return app.extensions["session_manager"]


@pytest.fixture
def auth_client(client):
    register_and_login(client)
    return client
