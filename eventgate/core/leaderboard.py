"""Leaderboard Ranking — pure aggregation of round scores into a strict team ordering.

Invariants:
    - total_score = sum over ALL rounds of the event; a missing (team, round) pair counts as 0
    - Order: total_score desc, then team created_at asc (older team ranks higher),
      then name, then id — the last two only matter for identical creation times
    - Ranks are 1-based positions: no shared ranks, stable pagination
    - Scores for rounds not in `rounds` (e.g. a deleted round) are ignored

Design Decisions:
    - Creation-time tie-break is an explicit product decision: equal totals never
      fall back to storage order
    - Recomputed from score rows on every call: no materialized leaderboard to invalidate
"""

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Mapping, Sequence
from uuid import UUID

from eventgate.core.errors import ScoreValidationError


@dataclass(frozen=True)
class TeamSummary:
    id: UUID
    name: str
    created_at: datetime
    member_count: int = 0


@dataclass(frozen=True)
class RoundSummary:
    id: UUID
    name: str
    round_number: int


@dataclass(frozen=True)
class RoundScore:
    round_id: UUID
    round_name: str
    round_number: int
    score: float
    graded: bool


@dataclass(frozen=True)
class LeaderboardEntry:
    rank: int
    team: TeamSummary
    total_score: float
    per_round_scores: tuple[RoundScore, ...]

    def to_dict(self) -> dict:
        return {
            "rank": self.rank,
            "team": {
                "id": str(self.team.id),
                "name": self.team.name,
                "created_at": self.team.created_at.isoformat(),
                "member_count": self.team.member_count,
            },
            "total_score": self.total_score,
            "per_round_scores": [
                {
                    "round_id": str(s.round_id),
                    "round": s.round_name,
                    "round_number": s.round_number,
                    "score": s.score,
                    "graded": s.graded,
                }
                for s in self.per_round_scores
            ],
        }


def validate_score(value: float) -> float:
    """Scores are finite and non-negative."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ScoreValidationError("Score must be a number")
    if not math.isfinite(value) or value < 0:
        raise ScoreValidationError("Score must be a non-negative number")
    return float(value)


def compute_leaderboard(
    teams: Sequence[TeamSummary],
    rounds: Sequence[RoundSummary],
    scores: Mapping[tuple[UUID, UUID], float],
) -> list[LeaderboardEntry]:
    """Rank teams by total score with a deterministic tie-break."""
    ordered_rounds = sorted(rounds, key=lambda r: (r.round_number, r.name, str(r.id)))

    rows = []
    for team in teams:
        per_round = tuple(
            RoundScore(
                round_id=r.id,
                round_name=r.name,
                round_number=r.round_number,
                score=scores.get((team.id, r.id), 0.0),
                graded=(team.id, r.id) in scores,
            )
            for r in ordered_rounds
        )
        rows.append((team, sum(s.score for s in per_round), per_round))

    rows.sort(key=lambda row: (-row[1], row[0].created_at, row[0].name, str(row[0].id)))

    return [
        LeaderboardEntry(
            rank=position, team=team, total_score=total, per_round_scores=per_round,
        )
        for position, (team, total, per_round) in enumerate(rows, start=1)
    ]
