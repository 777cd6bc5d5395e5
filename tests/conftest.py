import pytest

from app import create_app
from app.config import TestConfig
from app.extensions import db


@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        db.drop_all()
        db.create_all()
    yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def signup(client):
    """Register a user through the API and return bearer headers for them."""

    def _signup(email: str, password: str = "secret-pass", name: str | None = None):
        response = client.post(
            "/auth/signup",
            json={"email": email, "password": password, "name": name or email},
        )
        assert response.status_code == 201
        response = client.post(
            "/api/v1/auth/token",
            json={"email": email, "password": password, "token_name": "pytest"},
        )
        assert response.status_code == 200
        return {"Authorization": f"Bearer {response.get_json()['token']}"}

    return _signup


@pytest.fixture
def create_bookmark(client):
    def _create(headers, url="https://example.com/", title="Example", **extra):
        response = client.post(
            "/api/v1/bookmarks", headers=headers, json={"url": url, "title": title, **extra}
        )
        assert response.status_code == 201
        return response.get_json()

    return _create
