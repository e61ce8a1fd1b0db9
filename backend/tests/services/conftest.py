"""Service test fixtures — in-memory fake store, async DB and FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db dependency overridden to use the test DB session
    - db_manager patched so the readiness probe sees the test engine
    - FakeRateStore enforces the same key rules as SqlRateStore
"""

import asyncio
from datetime import date
from decimal import Decimal

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)

import payrates.infrastructure.database as db_module
from payrates.core.domain_types import CurrentRate, RateRecord, UserId, UserRef
from payrates.core.errors import (
    DuplicateDateError, RateRecordNotFoundError, UserNotFoundError,
)
from payrates.core.rate_history import currently_effective
from payrates.db.base import Base
from payrates.infrastructure.database import DatabaseSessionManager, get_db
from payrates.infrastructure.http_rate_store import HttpRateStore
from payrates.main import app
from payrates.models.user import User
from payrates.services.notifications import NotificationLog


class FakeRateStore:
    """In-memory RateStore with failure injection and a call log."""

    def __init__(self, today: date = date(2025, 6, 15)):
        self.today = today
        self.users: dict[int, UserRef] = {}
        self.rates: dict[tuple[int, date], Decimal] = {}
        self.calls: list[str] = []
        # operation name -> exception raised on its next call
        self.fail_next: dict[str, Exception] = {}
        # operation name -> event the operation waits on before answering
        self.gates: dict[str, asyncio.Event] = {}

    def add_user(self, user_id: int, username: str, avatar: str | None = None) -> UserRef:
        user = UserRef(UserId(user_id), username, avatar)
        self.users[user_id] = user
        return user

    def seed(self, user_id: int, effective_from: str, hourly_rate: str) -> None:
        self.rates[(user_id, date.fromisoformat(effective_from))] = Decimal(hourly_rate)

    def gate(self, operation: str) -> asyncio.Event:
        """Hold `operation` until the returned event is set."""
        self.gates[operation] = asyncio.Event()
        return self.gates[operation]

    async def _enter(self, operation: str) -> None:
        self.calls.append(operation)
        gate = self.gates.get(operation)
        if gate is not None:
            await gate.wait()
        exc = self.fail_next.pop(operation, None)
        if exc is not None:
            raise exc

    def _require_user(self, user_id: int) -> None:
        if user_id not in self.users:
            raise UserNotFoundError(user_id)

    def _records(self, user_id: int) -> list[RateRecord]:
        return [
            RateRecord(UserId(uid), day, rate)
            for (uid, day), rate in self.rates.items() if uid == user_id
        ]

    async def get_user(self, user_id):
        await self._enter("get_user")
        return self.users.get(user_id)

    async def list_users(self):
        await self._enter("list_users")
        return list(self.users.values())

    async def list_rates(self, user_id):
        await self._enter("list_rates")
        self._require_user(user_id)
        # Deliberately unordered: ordering is the loader's job
        return sorted(self._records(user_id), key=lambda r: r.hourly_rate)

    async def create_rate(self, user_id, effective_from, hourly_rate):
        await self._enter("create_rate")
        self._require_user(user_id)
        if (user_id, effective_from) in self.rates:
            raise DuplicateDateError(user_id, effective_from)
        self.rates[(user_id, effective_from)] = hourly_rate
        return RateRecord(UserId(user_id), effective_from, hourly_rate)

    async def update_rate(self, user_id, effective_from, hourly_rate):
        await self._enter("update_rate")
        self._require_user(user_id)
        if (user_id, effective_from) not in self.rates:
            raise RateRecordNotFoundError(user_id, effective_from)
        self.rates[(user_id, effective_from)] = hourly_rate
        return RateRecord(UserId(user_id), effective_from, hourly_rate)

    async def list_current_rates(self):
        await self._enter("list_current_rates")
        entries = []
        for user in self.users.values():
            current = currently_effective(self._records(user.user_id), self.today)
            entries.append(CurrentRate(
                user=user,
                hourly_rate=current.hourly_rate if current else None,
                effective_from=current.effective_from if current else None,
            ))
        return entries


@pytest.fixture
def fake_store():
    return FakeRateStore()


@pytest.fixture
def notifier():
    return NotificationLog()


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
async def client(test_engine, test_session_factory):
    """FastAPI test client with DB dependency overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager


@pytest.fixture
def http_store(client):
    """HttpRateStore wired to the in-process API."""
    return HttpRateStore(client)


@pytest.fixture
async def seed_user(test_db):
    """Insert one roster user directly into the test DB."""
    user = User(username="maria", avatar="/avatars/maria.png")
    test_db.add(user)
    await test_db.commit()
    await test_db.refresh(user)
    return user
