"""Settings: verifies defaults, URL composition and immutability."""

import pydantic
import pytest

from catalog.config import Settings, get_settings


def test_store_port_defaults_to_standard_port(monkeypatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.delenv("PG_PORT", raising=False)
    settings = Settings(_env_file=None)
    assert settings.pg_port == 5432
    assert settings.resolved_database_url.endswith("@localhost:5432/postgres")
    assert settings.resolved_database_url.startswith("postgresql+asyncpg://")


def test_store_port_from_environment(monkeypatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.setenv("PG_PORT", "55432")
    settings = Settings(_env_file=None)
    assert settings.pg_port == 55432
    assert ":55432/" in settings.resolved_database_url


def test_database_url_wins_and_gets_async_driver():
    settings = Settings(database_url="postgresql://u:p@db:5432/app", _env_file=None)
    assert settings.resolved_database_url == "postgresql+asyncpg://u:p@db:5432/app"


def test_settings_are_frozen():
    settings = Settings(_env_file=None)
    with pytest.raises(pydantic.ValidationError):
        settings.pg_port = 1


def test_get_settings_is_cached():
    assert get_settings() is get_settings()
