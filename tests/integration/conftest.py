"""Integration-test fixtures (live PostgreSQL + Redis from config.settings).

Pre-condition: the database is migrated (`alembic upgrade head`).

All integration tests share a single event loop so that the module-level
SQLAlchemy async engine pool and Redis pool remain valid across the whole
session. Everything is skipped when either service is unreachable.
"""

import uuid
from datetime import UTC, datetime, timedelta

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from jose import jwt
from redis.exceptions import RedisError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from config.settings import settings
from src.main import app
from src.tw_common.database import async_session_factory, engine
from src.tw_common.redis_client import get_redis

_INSERT_USER_SQL = text("""
    INSERT INTO users (id, fullname, email, mobile, age, state, role, deposit_balance)
    VALUES (:id, :fullname, :email, '9000000000', 24, 'Goa', :role, :deposit)
""")


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def live_services() -> None:
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1 FROM ledger_entries LIMIT 1"))
        redis = await get_redis()
        await redis.ping()
    except (OSError, SQLAlchemyError, RedisError) as exc:
        pytest.skip(f"PostgreSQL/Redis not available: {exc}")


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def client(live_services) -> AsyncClient:  # type: ignore[override]
    """Session-scoped async HTTP client — keeps the engine pool alive."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def make_user(live_services):
    """Insert a user row directly; returns its id."""

    async def _make(deposit: int = 0, role: str = "user") -> str:
        user_id = f"it-{uuid.uuid4().hex[:12]}"
        async with async_session_factory() as db:
            await db.execute(
                _INSERT_USER_SQL,
                {
                    "id": user_id,
                    "fullname": f"Player {user_id}",
                    "email": f"{user_id}@example.com",
                    "role": role,
                    "deposit": deposit,
                },
            )
            await db.commit()
        return user_id

    return _make


def bearer(user_id: str) -> dict[str, str]:
    now = datetime.now(UTC)
    token = jwt.encode(
        {"sub": user_id, "type": "access", "iat": now, "exp": now + timedelta(minutes=5)},
        settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
    )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers():
    return bearer
