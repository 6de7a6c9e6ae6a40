"""Service test fixtures — async DB, seeded event data and FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db dependency overridden to use the test DB
    - db_manager patched so the readiness check sees the test engine
    - Tokens are signed with the same secret the app reads from settings

Design Decisions:
    - SQLite in-memory: fast, no external dependency; unique constraints behave the
      same as on PostgreSQL, which is what the check-in and team writes rely on
    - Seed factories return ORM rows; tests that force a rollback use their own
      session so fixture rows never expire mid-test
"""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from httpx import ASGITransport, AsyncClient

from eventgate.config import get_settings
from eventgate.core.domain_types import RegistrationStatus, Role
from eventgate.core.tokens import sign_token
from eventgate.db.base import Base
from eventgate.infrastructure.database import get_db, DatabaseSessionManager
import eventgate.infrastructure.database as db_module
from eventgate.main import app
from eventgate.models.event import Event
from eventgate.models.registration import Registration
from eventgate.models.user import User
from eventgate.repositories.event_repository import EventRepository
from eventgate.repositories.registration_repository import RegistrationRepository
from eventgate.repositories.scan_log_repository import ScanLogRepository
from eventgate.repositories.score_repository import ScoreRepository
from eventgate.repositories.team_repository import TeamRepository
from eventgate.services.check_in_engine import CheckInEngine
from eventgate.services.checkpoint_registry import CheckpointRegistry
from eventgate.services.scoring import ScoringService
from eventgate.services.team_formation import TeamFormationService
from eventgate.services.token_service import TokenService

CHECKPOINTS = ["Registration", "Lunch", "Dinner"]


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


# ─── Seed data ───────────────────────────────────────────────────

@pytest.fixture
def qr_secret() -> str:
    return get_settings().qr_secret


async def _user(db, name: str, role: Role) -> User:
    user = User(name=name, email=f"{uuid4().hex}@example.com", role=role.value)
    db.add(user)
    await db.commit()
    return user


@pytest.fixture
async def organizer(test_db):
    return await _user(test_db, "Olga Organizer", Role.ORGANIZER)


@pytest.fixture
async def volunteer(test_db):
    return await _user(test_db, "Vera Volunteer", Role.VOLUNTEER)


@pytest.fixture
async def mentor(test_db):
    return await _user(test_db, "Mo Mentor", Role.MENTOR)


@pytest.fixture
async def event(test_db, organizer):
    """Event with three checkpoints, all unlocked, order enforced."""
    event = Event(
        name="DevFest 2026",
        organizer_id=organizer.id,
        checkpoints=list(CHECKPOINTS),
        unlocked_checkpoints=list(CHECKPOINTS),
        enforce_checkpoint_order=True,
    )
    test_db.add(event)
    await test_db.commit()
    return event


@pytest.fixture
async def other_event(test_db, organizer):
    event = Event(
        name="Other Meetup",
        organizer_id=organizer.id,
        checkpoints=list(CHECKPOINTS),
        unlocked_checkpoints=list(CHECKPOINTS),
    )
    test_db.add(event)
    await test_db.commit()
    return event


@pytest.fixture
def register(test_db, event, qr_secret):
    """Factory: create a participant registration and sign its token.

    Returns (registration, token).
    """
    async def _register(
        name: str = "Pat Participant",
        status: RegistrationStatus = RegistrationStatus.APPROVED,
        event_id=None,
    ):
        user = await _user(test_db, name, Role.PARTICIPANT)
        registration = Registration(
            event_id=event_id or event.id, user_id=user.id, status=status.value,
        )
        test_db.add(registration)
        await test_db.commit()
        token = sign_token(
            qr_secret.encode("utf-8"), user.id, registration.event_id, registration.id,
        )
        return registration, token

    return _register


@pytest.fixture
def auth():
    """Build the gateway identity headers for a user."""
    def _headers(user, role: Role | None = None) -> dict:
        return {
            "X-User-Id": str(user.id),
            "X-User-Role": (role.value if role else user.role),
        }
    return _headers


# ─── Services on the test session ────────────────────────────────

class StepClock:
    """Deterministic clock: every call is one second after the previous."""

    def __init__(self, start: datetime | None = None):
        self.current = start or datetime(2026, 5, 1, 9, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        self.current += timedelta(seconds=1)
        return self.current


@pytest.fixture
def token_service(test_db, qr_secret):
    return TokenService(qr_secret, RegistrationRepository(test_db))


@pytest.fixture
def check_in_engine(test_db, token_service):
    return CheckInEngine(
        token_service,
        EventRepository(test_db),
        RegistrationRepository(test_db),
        ScanLogRepository(test_db),
        clock=StepClock(),
    )


@pytest.fixture
def registry(test_db):
    return CheckpointRegistry(EventRepository(test_db))


@pytest.fixture
def team_service(test_db, token_service):
    return TeamFormationService(
        token_service, EventRepository(test_db), TeamRepository(test_db),
    )


@pytest.fixture
def scoring(test_db, token_service):
    return ScoringService(
        EventRepository(test_db), TeamRepository(test_db),
        ScoreRepository(test_db), token_service,
    )
