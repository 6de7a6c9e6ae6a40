"""Request Sessions — tests for storage error mapping in the session manager.

Tests cover:
    - An IntegrityError escaping a request session is a ConflictError (409, not retryable)
    - Other SQLAlchemy failures are a DatabaseError (503, retryable)
    - The session is rolled back, so nothing partial is committed
    - health_check reports a reachable database
"""

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, OperationalError

from eventgate.core.domain_types import Role
from eventgate.core.errors import ConflictError, DatabaseError
from eventgate.infrastructure.database import DatabaseSessionManager
from eventgate.models.user import User


@pytest.fixture
def manager(test_engine, test_session_factory):
    m = DatabaseSessionManager.__new__(DatabaseSessionManager)
    m.engine = test_engine
    m._session_factory = test_session_factory
    return m


async def test_integrity_error_becomes_conflict(manager):
    with pytest.raises(ConflictError) as exc:
        async with manager.session():
            raise IntegrityError("INSERT ...", {}, Exception("duplicate key"))

    assert exc.value.http_status == 409
    assert exc.value.code == "CONSTRAINT_VIOLATION"
    assert not exc.value.retryable


async def test_operational_error_becomes_retryable_database_error(manager):
    with pytest.raises(DatabaseError) as exc:
        async with manager.session():
            raise OperationalError("SELECT 1", {}, Exception("connection refused"))

    assert exc.value.http_status == 503
    assert exc.value.retryable


async def test_failed_session_commits_nothing(manager, test_session_factory):
    with pytest.raises(ConflictError):
        async with manager.session() as db:
            db.add(User(
                name="Half Written", email="half@example.com",
                role=Role.PARTICIPANT.value,
            ))
            await db.flush()
            raise IntegrityError("INSERT ...", {}, Exception("duplicate key"))

    async with test_session_factory() as db:
        count = (await db.execute(select(func.count()).select_from(User))).scalar_one()
    assert count == 0


async def test_health_check_reaches_database(manager):
    assert await manager.health_check()
