"""Shared test fixtures: single in-memory test DB for all test modules."""
from __future__ import annotations

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession

# StaticPool keeps one connection so every session sees the same in-memory database.
from sqlalchemy.pool import StaticPool

from src.db.tables import Base, UserRow, PostRow, CommentRow
from src.db.engine import get_session
import src.db.moderation_tables  # noqa: F401
from src.auth import sign_token
from src.services.moderation import ModerationService

TEST_DB_URL = "sqlite+aiosqlite:///file:caffeine_test?mode=memory&cache=shared&uri=true"

test_engine = create_async_engine(
    TEST_DB_URL,
    echo=False,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestSession = async_sessionmaker(test_engine, expire_on_commit=False, class_=AsyncSession)


async def override_get_session():
    async with TestSession() as session:
        yield session


# Import app and override BEFORE any test module uses it
from src.api.main import app  # noqa: E402

app.dependency_overrides[get_session] = override_get_session
# httpx's ASGITransport doesn't run lifespan, so install the service directly
app.state.moderation = ModerationService(TestSession, timeout=5)


@pytest_asyncio.fixture(autouse=True)
async def setup_db():
    """Create tables before each test, drop after. Seeds users, posts and comments.

    alice, bob and carol exist; posts p1 (bob), p2 (carol), p3 (alice) are
    newest-first p3, p2, p1; comments c1 (carol) and c2 (bob) sit on p3.
    """
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with TestSession() as session:
        session.add_all([
            UserRow(id="alice", name="Alice"),
            UserRow(id="bob", name="Bob"),
            UserRow(id="carol", name="Carol"),
        ])
        await session.flush()
        session.add_all([
            PostRow(id="p1", user_id="bob", user_name="Bob", text="Flat white at Origin?", created_at=1_000),
            PostRow(id="p2", user_id="carol", user_name="Carol", text="Cupping on Friday", created_at=2_000),
            PostRow(id="p3", user_id="alice", user_name="Alice", text="Best cortado in town", created_at=3_000),
        ])
        await session.flush()
        session.add_all([
            CommentRow(id="c1", post_id="p3", user_id="carol", user_name="Carol", text="Agreed!", created_at=3_100),
            CommentRow(id="c2", post_id="p3", user_id="bob", user_name="Bob", text="Try Kaffa", created_at=3_200),
        ])
        await session.commit()

    yield

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
def service() -> ModerationService:
    return ModerationService(TestSession, timeout=5)


@pytest_asyncio.fixture
async def client():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


def auth_for(user_id: str, name: str | None = None) -> dict:
    return {"Authorization": f"Bearer {sign_token(user_id, name)}"}


@pytest.fixture
def alice_auth() -> dict:
    return auth_for("alice", "Alice")


@pytest.fixture
def bob_auth() -> dict:
    return auth_for("bob", "Bob")


@pytest.fixture
def make_auth():
    return auth_for


@pytest.fixture
def session_factory():
    return TestSession
