"""Shared fixtures: one fresh SQLite database and app per test."""

import pytest
from fastapi.testclient import TestClient

from config.settings import Settings
from main import create_app


@pytest.fixture()
def settings(tmp_path) -> Settings:
    return Settings(
        database_url=f"sqlite:///{tmp_path / 'invoices.db'}",
        log_level="WARNING",
    )


@pytest.fixture()
def app(settings):
    return create_app(settings)


@pytest.fixture()
def client(app):
    # Entering the client runs startup, which creates the schema
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def db(app, client):
    return app.state.db


@pytest.fixture()
def jane(client) -> int:
    response = client.post("/api/clients", json={
        "first_name": "Jane",
        "last_name": "Doe",
        "email": "jane@example.com",
    })
    assert response.status_code == 200, response.text
    return response.json()["id"]
