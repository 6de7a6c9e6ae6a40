"""Leaderboard Ranking — tests for totals, tie-breaks and score validation.

Tests cover:
    - Totals sum every round, missing scores count as 0
    - Equal totals rank the earlier-created team first
    - Ranks are 1-based and distinct
    - validate_score rejects negative, non-finite and non-numeric values
"""

import math
from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from eventgate.core.errors import ScoreValidationError
from eventgate.core.leaderboard import (
    RoundSummary, TeamSummary, compute_leaderboard, validate_score,
)

T0 = datetime(2026, 5, 1, 10, 0, tzinfo=timezone.utc)


def _team(name, minutes=0):
    return TeamSummary(id=uuid4(), name=name, created_at=T0 + timedelta(minutes=minutes))


def _round(number):
    return RoundSummary(id=uuid4(), name=f"Round {number}", round_number=number)


def test_equal_totals_rank_earlier_team_first():
    t1, t2 = _team("Team One", 0), _team("Team Two", 5)
    r1, r2 = _round(1), _round(2)
    scores = {
        (t1.id, r1.id): 10, (t1.id, r2.id): 20,
        (t2.id, r1.id): 15, (t2.id, r2.id): 15,
    }

    board = compute_leaderboard([t2, t1], [r1, r2], scores)

    assert [e.team.name for e in board] == ["Team One", "Team Two"]
    assert [e.rank for e in board] == [1, 2]
    assert board[0].total_score == board[1].total_score == 30


def test_higher_total_ranks_first_regardless_of_age():
    older, newer = _team("Older", 0), _team("Newer", 10)
    r1 = _round(1)
    board = compute_leaderboard(
        [older, newer], [r1], {(older.id, r1.id): 5, (newer.id, r1.id): 9},
    )
    assert board[0].team is newer
    assert board[0].rank == 1


def test_missing_score_counts_as_zero():
    team = _team("Solo")
    r1, r2 = _round(1), _round(2)
    board = compute_leaderboard([team], [r1, r2], {(team.id, r1.id): 7.5})

    entry = board[0]
    assert entry.total_score == 7.5
    assert [s.score for s in entry.per_round_scores] == [7.5, 0.0]
    assert [s.graded for s in entry.per_round_scores] == [True, False]


def test_per_round_scores_follow_round_number():
    team = _team("Solo")
    r1, r2, r3 = _round(1), _round(2), _round(3)
    board = compute_leaderboard([team], [r3, r1, r2], {})
    assert [s.round_number for s in board[0].per_round_scores] == [1, 2, 3]


def test_scores_for_unknown_rounds_are_ignored():
    team = _team("Solo")
    r1 = _round(1)
    board = compute_leaderboard([team], [r1], {(team.id, uuid4()): 100})
    assert board[0].total_score == 0


def test_identical_creation_times_fall_back_to_name():
    beta, alpha = _team("Beta"), _team("Alpha")
    board = compute_leaderboard([beta, alpha], [], {})
    assert [e.team.name for e in board] == ["Alpha", "Beta"]
    assert [e.rank for e in board] == [1, 2]


def test_ranks_are_distinct_and_contiguous():
    teams = [_team(f"T{i}", i) for i in range(5)]
    board = compute_leaderboard(teams, [_round(1)], {})
    assert [e.rank for e in board] == [1, 2, 3, 4, 5]


def test_empty_event_has_empty_leaderboard():
    assert compute_leaderboard([], [_round(1)], {}) == []


def test_entry_to_dict_shape():
    team = _team("Solo")
    r1 = _round(1)
    data = compute_leaderboard([team], [r1], {(team.id, r1.id): 3})[0].to_dict()
    assert data["rank"] == 1
    assert data["team"]["name"] == "Solo"
    assert data["total_score"] == 3
    assert data["per_round_scores"][0]["round"] == "Round 1"


# ─── validate_score ──────────────────────────────────────────────

@pytest.mark.parametrize("value", [0, 0.0, 7, 99.5])
def test_valid_scores_pass(value):
    assert validate_score(value) == float(value)


@pytest.mark.parametrize("value", [-1, -0.5, math.inf, math.nan, True, "5", None])
def test_invalid_scores_raise(value):
    with pytest.raises(ScoreValidationError):
        validate_score(value)
