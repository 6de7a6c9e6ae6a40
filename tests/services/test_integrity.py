"""Unique Constraints — tests for the constraints that decide races.

Tests cover:
    - violates_unique recognizes PostgreSQL and SQLite wording for the named constraint
    - Foreign-key, not-null and other unique violations are not mistaken for it
    - Round numbers are unique per event at the storage level (ConflictError)
"""

import pytest
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from eventgate.core.errors import ConflictError
from eventgate.models.registration import CheckpointCheckIn
from eventgate.models.scoring import ScoringRound
from eventgate.repositories.integrity import violates_unique
from eventgate.repositories.score_repository import ScoreRepository

TABLE = CheckpointCheckIn.__table__
NAME = "uq_check_in_per_checkpoint"


def _error(message: str) -> IntegrityError:
    return IntegrityError("INSERT ...", {}, Exception(message))


def test_postgres_unique_violation_matches():
    exc = _error(
        'duplicate key value violates unique constraint "uq_check_in_per_checkpoint"',
    )
    assert violates_unique(exc, TABLE, NAME)


def test_sqlite_unique_violation_matches():
    exc = _error(
        "UNIQUE constraint failed: checkpoint_check_ins.registration_id, "
        "checkpoint_check_ins.checkpoint",
    )
    assert violates_unique(exc, TABLE, NAME)


@pytest.mark.parametrize("message", [
    'insert or update on table "checkpoint_check_ins" violates foreign key '
    'constraint "checkpoint_check_ins_registration_id_fkey"',
    "FOREIGN KEY constraint failed",
    "NOT NULL constraint failed: checkpoint_check_ins.registration_id",
    'duplicate key value violates unique constraint "checkpoint_check_ins_pkey"',
    "UNIQUE constraint failed: checkpoint_check_ins.id",
])
def test_other_integrity_errors_do_not_match(message):
    assert not violates_unique(_error(message), TABLE, NAME)


async def test_duplicate_round_number_is_conflict(test_db, event):
    event_id = event.id
    repo = ScoreRepository(test_db)
    await repo.create_round(event_id, "Ideation", 1)

    with pytest.raises(ConflictError) as exc:
        await repo.create_round(event_id, "Again", 1)

    assert exc.value.code == "ROUND_EXISTS"
    assert [r.round_number for r in await repo.list_rounds(event_id)] == [1]


async def test_same_round_number_in_other_event_is_allowed(test_db, event, other_event):
    repo = ScoreRepository(test_db)
    await repo.create_round(event.id, "Ideation", 1)
    await repo.create_round(other_event.id, "Ideation", 1)

    rows = (await test_db.execute(select(ScoringRound.round_number))).scalars().all()
    assert sorted(rows) == [1, 1]
