"""Tests for main application routes."""
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from app.core.config import Settings
from app.main import app

client = TestClient(app)


def test_root() -> None:
    response = client.get("/")
    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "rfp-search-api"
    assert data["status"] == "running"


def test_health_reports_ted_config() -> None:
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["ted_mode"] == "official"
    assert data["ted_base_url"] == "https://api.ted.europa.eu"


def test_security_headers() -> None:
    response = client.get("/health")
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Frame-Options"] == "DENY"


def test_settings_from_env(monkeypatch) -> None:
    monkeypatch.setenv("TED_MODE", " OFF ")
    monkeypatch.setenv("TED_SEARCH_BASE_URL", "https://ted.example/")
    monkeypatch.setenv("TED_TIMEOUT_SECONDS", "15")
    s = Settings(_env_file=None)
    assert s.ted_mode == "off"
    assert s.ted_search_base_url == "https://ted.example"
    assert s.ted_timeout_seconds == 15.0


def test_settings_defaults(monkeypatch) -> None:
    for name in ("TED_MODE", "TED_SEARCH_BASE_URL", "TED_TIMEOUT_SECONDS"):
        monkeypatch.delenv(name, raising=False)
    s = Settings(_env_file=None)
    assert s.ted_mode == "official"
    assert s.ted_search_base_url == "https://api.ted.europa.eu"
    assert s.ted_timeout_seconds is None
    assert s.allowed_origins_list == ["*"]


def test_settings_rejects_unknown_ted_mode(monkeypatch) -> None:
    monkeypatch.setenv("TED_MODE", "scrape")
    with pytest.raises(ValueError):
        Settings(_env_file=None)


def test_allowed_origins_list() -> None:
    with patch.dict("os.environ", {"ALLOWED_ORIGINS": "https://a.example, https://b.example"}):
        s = Settings(_env_file=None)
    assert s.allowed_origins_list == ["https://a.example", "https://b.example"]
