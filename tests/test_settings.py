# tests/test_settings.py
"""Tests for configuration loading."""

import pytest
from pydantic import ValidationError

from codeshare.core.settings import Settings


def test_secret_key_and_admin_password_are_required(monkeypatch) -> None:
    """Without them the service must refuse to start rather than use guessable values."""
    monkeypatch.delenv("SECRET_KEY", raising=False)
    monkeypatch.delenv("ADMIN_PASSWORD", raising=False)

    with pytest.raises(ValidationError) as excinfo:
        Settings(_env_file=None)

    missing = {error["loc"][0] for error in excinfo.value.errors()}
    assert {"SECRET_KEY", "ADMIN_PASSWORD"} <= missing


def test_settings_read_from_environment(monkeypatch) -> None:
    monkeypatch.setenv("SECRET_KEY", "s3cret")
    monkeypatch.setenv("ADMIN_PASSWORD", "hunter2")
    monkeypatch.setenv("RATE_LIMIT", "5 per minute")

    loaded = Settings(_env_file=None)

    assert loaded.secret_key == "s3cret"
    assert loaded.admin_password == "hunter2"
    assert loaded.rate_limit == "5 per minute"


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        ("sqlite+aiosqlite:///./board.db", "sqlite:///./board.db"),
        ("postgresql+asyncpg://u:p@db/board", "postgresql://u:p@db/board"),
        ("sqlite:///./board.db", "sqlite:///./board.db"),
    ],
)
def test_database_url_sync_strips_async_driver(monkeypatch, url, expected) -> None:
    monkeypatch.setenv("DATABASE_URL", url)
    assert Settings(_env_file=None).database_url_sync == expected
