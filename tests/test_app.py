"""Settings, health and application wiring."""

import pytest

from config.settings import Settings, load_settings, normalize_database_url


def test_health_reports_database(client):
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["database"] == "ok"


def test_root_banner(client):
    assert client.get("/").json()["database"] == "sqlite"


def test_cors_headers(client):
    response = client.get("/api/invoices", headers={"Origin": "https://example.com"})
    assert response.headers["access-control-allow-origin"] == "*"


def test_normalize_database_url():
    assert normalize_database_url("postgres://u:p@h/db") == "postgresql+psycopg2://u:p@h/db"
    assert normalize_database_url("postgresql://u@h/db") == "postgresql+psycopg2://u@h/db"
    assert normalize_database_url("sqlite:///x.db") == "sqlite:///x.db"


def test_load_settings_from_environment(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "postgres://user@db/invoices")
    monkeypatch.setenv("CORS_ORIGINS", "https://a.test, https://b.test")
    monkeypatch.setenv("INVOICE_NUMBER_PREFIX", "INV")
    monkeypatch.setenv("INVOICE_NUMBER_OFFSET", "1000")
    monkeypatch.setenv("HONOR_ZERO_AMOUNT", "yes")

    settings = load_settings()

    assert settings.database_url == "postgresql+psycopg2://user@db/invoices"
    assert settings.cors_origins == ["https://a.test", "https://b.test"]
    assert settings.invoice_number_prefix == "INV"
    assert settings.invoice_number_offset == 1000
    assert settings.honor_zero_amount is True


def test_malformed_environment_fails_fast(monkeypatch):
    monkeypatch.setenv("DB_POOL_SIZE", "lots")
    with pytest.raises(ValueError):
        load_settings()

    monkeypatch.setenv("DB_POOL_SIZE", "5")
    monkeypatch.setenv("LOG_JSON", "maybe")
    with pytest.raises(ValueError):
        load_settings()


def test_settings_are_immutable():
    settings = Settings()
    with pytest.raises(Exception):
        settings.log_level = "DEBUG"


def test_custom_invoice_numbering(tmp_path):
    from fastapi.testclient import TestClient
    from main import create_app

    settings = Settings(
        database_url=f"sqlite:///{tmp_path / 'n.db'}",
        log_level="WARNING",
        invoice_number_prefix="INV",
        invoice_number_offset=1000,
    )
    with TestClient(create_app(settings)) as client:
        body = client.post("/api/invoices", json={}).json()

    assert body["invoice_number"] == "INV-1001"


def test_settings_read_env_file(tmp_path, monkeypatch):
    for name in ("DATABASE_URL", "LOG_LEVEL", "INIT_SCHEMA", "CORS_ORIGINS"):
        monkeypatch.delenv(name, raising=False)
    env_file = tmp_path / ".env"
    env_file.write_text(
        "DATABASE_URL=postgresql://user:secret@db:5432/invoices\n"
        "LOG_LEVEL=debug\n"
        "INIT_SCHEMA=\n"
        "CORS_ORIGINS=https://app.test\n"
    )

    settings = Settings(_env_file=str(env_file))

    assert settings.database_url == "postgresql+psycopg2://user:secret@db:5432/invoices"
    assert settings.log_level == "DEBUG"
    assert settings.init_schema is True
    assert settings.cors_origins == ["https://app.test"]


def test_settings_keyword_arguments_are_validated():
    settings = Settings(database_url="postgres://u@h/db", cors_origins="https://x.test,https://y.test")
    assert settings.database_url == "postgresql+psycopg2://u@h/db"
    assert settings.cors_origins == ["https://x.test", "https://y.test"]
