"""Scoring & Leaderboard — tests for rounds, score upserts and ranking.

Tests cover:
    - Round creation, numbering and deletion (with scores)
    - set_score upserts and validates
    - Team/round event mismatch is not found
    - Leaderboard tie-break on team creation time
    - Grading through a member's token and the tally summary
"""

from uuid import uuid4

import pytest
from sqlalchemy import func, select

from eventgate.core.errors import (
    ConflictError, InvalidTokenError, ResourceNotFoundError, ScoreValidationError,
)
from eventgate.models.scoring import TeamScore
from eventgate.models.team import Team


@pytest.fixture
def make_team(test_db):
    async def _make(event_id, name):
        team = Team(event_id=event_id, name=name, created_by=uuid4())
        test_db.add(team)
        await test_db.commit()
        return team
    return _make


async def test_rounds_number_themselves(scoring, event):
    first = await scoring.create_round(event.id, "Ideation")
    second = await scoring.create_round(event.id, "Demo")
    assert (first.round_number, second.round_number) == (1, 2)
    assert [r.name for r in await scoring.list_rounds(event.id)] == ["Ideation", "Demo"]


async def test_explicit_round_number_conflict(scoring, event):
    await scoring.create_round(event.id, "Ideation", 1)
    with pytest.raises(ConflictError):
        await scoring.create_round(event.id, "Again", 1)


async def test_round_for_unknown_event(scoring):
    with pytest.raises(ResourceNotFoundError):
        await scoring.create_round(uuid4(), "Ideation")


async def test_set_score_upserts(scoring, event, make_team, mentor, test_db):
    team = await make_team(event.id, "Rocket")
    scoring_round = await scoring.create_round(event.id, "Demo")

    await scoring.set_score(team.id, scoring_round.id, 10, mentor.id)
    record = await scoring.set_score(team.id, scoring_round.id, 12.5, mentor.id, "better")

    assert record.score == 12.5
    rows = (await test_db.execute(
        select(TeamScore.score, TeamScore.notes).where(TeamScore.team_id == team.id),
    )).all()
    assert rows == [(12.5, "better")]


@pytest.mark.parametrize("value", [-1, float("nan"), float("inf")])
async def test_invalid_scores_rejected(scoring, event, make_team, mentor, value):
    team = await make_team(event.id, "Rocket")
    scoring_round = await scoring.create_round(event.id, "Demo")
    with pytest.raises(ScoreValidationError):
        await scoring.set_score(team.id, scoring_round.id, value, mentor.id)


async def test_round_of_other_event_is_not_found(scoring, event, other_event, make_team, mentor):
    team = await make_team(event.id, "Rocket")
    foreign_round = await scoring.create_round(other_event.id, "Demo")
    with pytest.raises(ResourceNotFoundError):
        await scoring.set_score(team.id, foreign_round.id, 5, mentor.id)


async def test_unknown_team_is_not_found(scoring, event, mentor):
    scoring_round = await scoring.create_round(event.id, "Demo")
    with pytest.raises(ResourceNotFoundError):
        await scoring.set_score(uuid4(), scoring_round.id, 5, mentor.id)


async def test_leaderboard_breaks_ties_by_creation(scoring, event, make_team, mentor):
    t1 = await make_team(event.id, "Zeta")
    t2 = await make_team(event.id, "Alpha")
    r1 = await scoring.create_round(event.id, "Ideation")
    r2 = await scoring.create_round(event.id, "Demo")
    await scoring.set_score(t1.id, r1.id, 10, mentor.id)
    await scoring.set_score(t1.id, r2.id, 20, mentor.id)
    await scoring.set_score(t2.id, r1.id, 15, mentor.id)
    await scoring.set_score(t2.id, r2.id, 15, mentor.id)

    board = await scoring.leaderboard(event.id)

    assert [(e.rank, e.team.name, e.total_score) for e in board] == [
        (1, "Zeta", 30), (2, "Alpha", 30),
    ]


async def test_leaderboard_counts_missing_scores_as_zero(scoring, event, make_team, mentor):
    graded = await make_team(event.id, "Graded")
    await make_team(event.id, "Ungraded")
    r1 = await scoring.create_round(event.id, "Demo")
    await scoring.set_score(graded.id, r1.id, 1, mentor.id)

    board = await scoring.leaderboard(event.id)

    assert [(e.team.name, e.total_score) for e in board] == [("Graded", 1), ("Ungraded", 0)]


async def test_delete_round_drops_its_scores(scoring, event, make_team, mentor, test_db):
    team = await make_team(event.id, "Rocket")
    keep = await scoring.create_round(event.id, "Keep")
    drop = await scoring.create_round(event.id, "Drop")
    await scoring.set_score(team.id, keep.id, 3, mentor.id)
    await scoring.set_score(team.id, drop.id, 7, mentor.id)

    await scoring.delete_round(drop.id)

    remaining = (await test_db.execute(select(func.count(TeamScore.id)))).scalar_one()
    assert remaining == 1
    board = await scoring.leaderboard(event.id)
    assert board[0].total_score == 3


async def test_delete_unknown_round(scoring):
    with pytest.raises(ResourceNotFoundError):
        await scoring.delete_round(uuid4())


async def test_score_by_member_token(scoring, team_service, register, event, mentor):
    _, token = await register()
    creation = await team_service.create_team(event.id, "Rocket", mentor.id, [token])
    scoring_round = await scoring.create_round(event.id, "Demo")

    record = await scoring.set_score_by_token(token, scoring_round.id, 8, mentor.id)

    assert record.team_id == creation.team.id
    assert (await scoring.leaderboard(event.id))[0].total_score == 8


async def test_score_by_token_without_team(scoring, register, event, mentor):
    _, token = await register()
    scoring_round = await scoring.create_round(event.id, "Demo")
    with pytest.raises(ResourceNotFoundError):
        await scoring.set_score_by_token(token, scoring_round.id, 8, mentor.id)


async def test_score_by_bad_token(scoring, event, mentor):
    scoring_round = await scoring.create_round(event.id, "Demo")
    with pytest.raises(InvalidTokenError):
        await scoring.set_score_by_token("garbage", scoring_round.id, 8, mentor.id)


async def test_tally_totals(scoring, team_service, register, event, mentor):
    _, a = await register("Ana")
    _, b = await register("Ben")
    await team_service.create_team(event.id, "Rocket", mentor.id, [a, b])
    await team_service.create_team(event.id, "Comet", mentor.id)
    await scoring.create_round(event.id, "Demo")

    tally = await scoring.tally(event.id)

    assert (tally.team_count, tally.round_count, tally.participant_count) == (2, 1, 2)
    assert tally.to_dict()["leaderboard"][0]["rank"] == 1
