from datetime import UTC, datetime

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from linkdeck.db.database import get_session
from linkdeck.main import app
from linkdeck.models.card import Card, CardRarity, CardType
from linkdeck.models.db import Base
from linkdeck.storage.memory import MemoryStore


def _make_card(
    card_id: str = "card-1",
    title: str = "httpx",
    description: str = "A next-generation HTTP client for Python",
    card_type: CardType = CardType.GITHUB_REPO,
    rarity: CardRarity = CardRarity.COMMON,
    **kwargs,
) -> Card:
    """Build a Card with sensible defaults for tests."""
    kwargs.setdefault("created_at", datetime(2024, 5, 1, 12, 0, tzinfo=UTC))
    kwargs.setdefault("updated_at", kwargs["created_at"])
    return Card(
        id=card_id,
        title=title,
        description=description,
        card_type=card_type,
        rarity=rarity,
        **kwargs,
    )


@pytest.fixture
def make_card():
    """Factory for Card objects."""
    return _make_card


@pytest.fixture
def memory_store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def sample_repo_payload() -> dict:
    """A trimmed GitHub /repos/{owner}/{repo} response."""
    return {
        "name": "awesome-python",
        "description": "An opinionated list of awesome Python frameworks",
        "owner": {
            "login": "vinta",
            "avatar_url": "https://avatars.githubusercontent.com/u/652070",
        },
        "stargazers_count": 200000,
        "language": "Python",
        "topics": ["python", "awesome", "collections"],
        "updated_at": "2024-05-01T10:00:00Z",
    }


@pytest.fixture
async def async_engine():
    """Create an in-memory SQLite engine for testing."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def session(async_engine) -> AsyncSession:
    """Provide a database session for tests."""
    async_session = async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)
    async with async_session() as session:
        yield session


@pytest.fixture
async def client(async_engine):
    """Provide an async test client with overridden database session."""
    async_session = async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_session():
        async with async_session() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_session] = override_get_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
