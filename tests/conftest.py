"""Pytest configuration and fixtures."""

import os
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncGenerator, AsyncIterator, Dict, List, Sequence, Tuple

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

# Add src to Python path
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

# Set test environment before the application module builds its default app
os.environ["APP_ENV"] = "test"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["CREATE_TABLES"] = "true"
os.environ["GENERATOR_STARTUP_CHECK"] = "false"
os.environ["LOG_JSON"] = "false"
os.environ.pop("REDIS_URL", None)

from meme_hustle.api.main import create_app  # noqa: E402
from meme_hustle.cache.memory import InMemoryCache  # noqa: E402
from meme_hustle.config.config import Settings  # noqa: E402
from meme_hustle.database.connection import DatabaseConnectionManager  # noqa: E402
from meme_hustle.exceptions.base import GeneratorError  # noqa: E402
from meme_hustle.repositories.meme_repository import MemeRepository  # noqa: E402
from meme_hustle.services.broadcaster import ConnectionManager  # noqa: E402
from meme_hustle.services.leaderboard import LeaderboardProjection  # noqa: E402
from meme_hustle.services.meme_service import MemeService  # noqa: E402

MEMORY_DB = "sqlite+aiosqlite:///:memory:"


class FakeGenerator:
    """Stands in for the DSPy caption generator and records every call."""

    def __init__(
        self, caption: str = "Much wow", vibe: str = "Neon Dog Vibes", fail: bool = False
    ) -> None:
        self.caption = caption
        self.vibe = vibe
        self.fail = fail
        self.caption_calls: List[Tuple[str, List[str]]] = []
        self.vibe_calls: List[List[str]] = []

    async def generate_caption(self, title: str, tags: Sequence[str]) -> str:
        self.caption_calls.append((title, list(tags)))
        if self.fail:
            raise GeneratorError("model unavailable")
        return self.caption

    async def generate_vibe(self, tags: Sequence[str]) -> str:
        self.vibe_calls.append(list(tags))
        if self.fail:
            raise GeneratorError("model unavailable")
        return self.vibe

    async def check_connection(self) -> str:
        return await self.generate_caption("Test connection", ["funny"])


class RecordingBroadcaster(ConnectionManager):
    """Connection manager that also keeps every broadcast it was asked to send."""

    def __init__(self) -> None:
        super().__init__()
        self.events: List[Tuple[str, Dict[str, Any]]] = []

    def broadcast(self, event: str, data: Any) -> None:
        self.events.append((event, data))
        super().broadcast(event, data)


class StoreOutage:
    """Makes every store session fail while ``active`` is set."""

    def __init__(self, db: DatabaseConnectionManager) -> None:
        self.db = db
        self.active = True
        self._get_session = db.get_session
        db.get_session = self._session

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[AsyncSession]:
        if self.active:
            raise OperationalError("SELECT 1", {}, Exception("database is unavailable"))
        async with self._get_session() as session:
            yield session


@pytest.fixture
def settings() -> Settings:
    """Settings for an isolated in-memory application."""
    return Settings(
        _env_file=None,
        app_env="test",
        database_url=MEMORY_DB,
        create_tables=True,
        generator_startup_check=False,
        log_json=False,
        redis_url=None,
    )


@pytest_asyncio.fixture
async def db() -> AsyncGenerator[DatabaseConnectionManager, None]:
    manager = DatabaseConnectionManager(MEMORY_DB)
    await manager.init_db()
    yield manager
    await manager.dispose()


@pytest.fixture
def repository(db: DatabaseConnectionManager) -> MemeRepository:
    return MemeRepository(db)


@pytest.fixture
def generator() -> FakeGenerator:
    return FakeGenerator()


@pytest.fixture
def cache() -> InMemoryCache:
    return InMemoryCache()


@pytest.fixture
def broadcaster() -> RecordingBroadcaster:
    return RecordingBroadcaster()


@pytest.fixture
def leaderboard(repository: MemeRepository) -> LeaderboardProjection:
    return LeaderboardProjection(repository, size=10)


@pytest.fixture
def service(
    repository: MemeRepository,
    generator: FakeGenerator,
    cache: InMemoryCache,
    leaderboard: LeaderboardProjection,
    broadcaster: RecordingBroadcaster,
) -> MemeService:
    return MemeService(
        repository=repository,
        generator=generator,
        cache=cache,
        leaderboard=leaderboard,
        broadcaster=broadcaster,
    )


@pytest.fixture
def client(settings: Settings, generator: FakeGenerator):
    """Test client for a fresh application with an in-memory database."""
    app = create_app(settings, generator=generator, cache=InMemoryCache())
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def sample_meme_request() -> Dict[str, Any]:
    """Sample meme submission."""
    return {
        "title": "Doge",
        "imageUrl": "https://example.com/doge.png",
        "tags": ["crypto", "funny"],
    }


@pytest.fixture
def store_outage():
    """Factory that makes a database manager's sessions fail."""
    return StoreOutage
