"""Tests for application settings."""

import pytest

from meme_hustle.config.config import DEV_ORIGINS, Settings


def _settings(**kwargs) -> Settings:
    return Settings(_env_file=None, **kwargs)


@pytest.mark.parametrize(
    "url, expected",
    [
        ("postgres://u@db/memes", "postgresql+asyncpg://u@db/memes"),
        ("postgresql://u@db/memes", "postgresql+asyncpg://u@db/memes"),
        ("postgresql+asyncpg://u@db/memes", "postgresql+asyncpg://u@db/memes"),
        ("sqlite:///./memes.db", "sqlite+aiosqlite:///./memes.db"),
        ("", "sqlite+aiosqlite:///./meme_hustle.db"),
    ],
)
def test_database_url_uses_async_driver(url: str, expected: str) -> None:
    assert _settings(database_url=url).database_url == expected


def test_store_url_applies_password() -> None:
    settings = _settings(
        database_url="postgresql://memer@db:5432/memes", database_password="s3cret"
    )

    assert settings.store_url == "postgresql+asyncpg://memer:s3cret@db:5432/memes"


def test_store_url_without_password() -> None:
    settings = _settings(database_url="sqlite:///:memory:")
    assert settings.store_url == "sqlite+aiosqlite:///:memory:"


def test_cors_origins_include_frontend() -> None:
    settings = _settings(frontend_url="https://memes.example")

    assert settings.cors_origins == DEV_ORIGINS + ["https://memes.example"]
    assert _settings(frontend_url="http://localhost:5173").cors_origins == DEV_ORIGINS


@pytest.mark.parametrize(
    "bound, expected", [(None, None), ("", None), (0, None), (-3, None), ("50", 50)]
)
def test_cache_bound(bound, expected) -> None:
    assert _settings(generation_cache_max_entries=bound).generation_cache_max_entries == expected


def test_api_key_read_from_gemini_variable(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("LLM_API_KEY", raising=False)
    monkeypatch.setenv("GEMINI_API_KEY", "from-env")

    assert _settings().llm_api_key.get_secret_value() == "from-env"


def test_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("PORT", "LEADERBOARD_SIZE", "API_PREFIX", "REALTIME_PATH"):
        monkeypatch.delenv(name, raising=False)
    settings = _settings()

    assert settings.port == 3001
    assert settings.leaderboard_size == 10
    assert settings.api_prefix == "/api"
    assert settings.realtime_path == "/ws"
