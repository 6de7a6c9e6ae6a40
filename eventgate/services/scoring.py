"""Scoring & Leaderboard — round management, score upserts and pull-based ranking.

Invariants:
    - Scores are finite and non-negative (validated before any store call)
    - Team and round must belong to the same event
    - One score per (team, round); last writer wins
    - leaderboard() recomputes from score rows on every call (no cache)

Design Decisions:
    - Ranking lives in core/leaderboard.compute_leaderboard; this class only loads
      rows and converts them into summaries
"""

import logging
from dataclasses import dataclass
from uuid import UUID

from eventgate.core.errors import (
    ConflictError, ErrorContext, PolicyViolationError, ResourceNotFoundError,
)
from eventgate.core.leaderboard import (
    LeaderboardEntry, RoundSummary, TeamSummary, compute_leaderboard, validate_score,
)
from eventgate.core.repository_protocols import (
    EventStore, RoundLike, ScoreStore, TeamStore,
)
from eventgate.services.token_service import TokenService

logger = logging.getLogger(__name__)

MAX_ROUND_NAME_LENGTH = 100


@dataclass(frozen=True)
class ScoreRecord:
    team_id: UUID
    round_id: UUID
    score: float
    graded_by: UUID | None
    notes: str | None

    def to_dict(self) -> dict:
        return {
            "team_id": str(self.team_id),
            "round_id": str(self.round_id),
            "score": self.score,
            "graded_by": str(self.graded_by) if self.graded_by else None,
            "notes": self.notes,
        }


@dataclass(frozen=True)
class Tally:
    event_id: UUID
    leaderboard: list[LeaderboardEntry]
    team_count: int
    round_count: int
    participant_count: int

    def to_dict(self) -> dict:
        return {
            "event_id": str(self.event_id),
            "team_count": self.team_count,
            "round_count": self.round_count,
            "participant_count": self.participant_count,
            "leaderboard": [entry.to_dict() for entry in self.leaderboard],
        }


def _round_summary(scoring_round: RoundLike) -> RoundSummary:
    return RoundSummary(
        id=scoring_round.id,
        name=scoring_round.name,
        round_number=scoring_round.round_number,
    )


class ScoringService:
    """Grades teams per round and ranks them."""

    def __init__(
        self,
        events: EventStore,
        teams: TeamStore,
        scores: ScoreStore,
        tokens: TokenService,
    ):
        self.events = events
        self.teams = teams
        self.scores = scores
        self.tokens = tokens

    async def _require_event(self, event_id: UUID) -> None:
        if await self.events.get(event_id) is None:
            raise ResourceNotFoundError("Event", str(event_id))

    # === Rounds ===

    async def create_round(
        self, event_id: UUID, name: str, round_number: int | None = None,
    ) -> RoundSummary:
        """Create a round. round_number defaults to one past the highest existing."""
        name = name.strip()
        if not name or len(name) > MAX_ROUND_NAME_LENGTH:
            raise PolicyViolationError(
                f"Round names must be 1-{MAX_ROUND_NAME_LENGTH} characters",
                "INVALID_ROUND_NAME",
                ErrorContext(event_id=str(event_id)),
            )
        await self._require_event(event_id)

        existing = await self.scores.list_rounds(event_id)
        taken = {r.round_number for r in existing}
        if round_number is None:
            round_number = max(taken, default=0) + 1
        if round_number < 1:
            raise PolicyViolationError(
                "Round numbers start at 1", "INVALID_ROUND_NUMBER",
                ErrorContext(event_id=str(event_id)),
            )
        if round_number in taken:
            raise ConflictError(
                f"Round {round_number} already exists", "ROUND_EXISTS",
                ErrorContext(event_id=str(event_id)),
            )

        scoring_round = await self.scores.create_round(event_id, name, round_number)
        logger.info(
            "Scoring round created",
            extra={"event_id": event_id, "round_id": scoring_round.id},
        )
        return _round_summary(scoring_round)

    async def list_rounds(self, event_id: UUID) -> list[RoundSummary]:
        await self._require_event(event_id)
        return [_round_summary(r) for r in await self.scores.list_rounds(event_id)]

    async def delete_round(self, round_id: UUID) -> None:
        scoring_round = await self.scores.get_round(round_id)
        if scoring_round is None:
            raise ResourceNotFoundError("Scoring round", str(round_id))
        event_id = scoring_round.event_id
        await self.scores.delete_round(round_id)
        logger.info(
            "Scoring round deleted", extra={"event_id": event_id, "round_id": round_id},
        )

    # === Scores ===

    async def set_score(
        self,
        team_id: UUID,
        round_id: UUID,
        value: float,
        graded_by: UUID | None,
        notes: str | None = None,
    ) -> ScoreRecord:
        """Upsert the score of a team for a round."""
        value = validate_score(value)
        team = await self.teams.get(team_id)
        if team is None:
            raise ResourceNotFoundError("Team", str(team_id))
        scoring_round = await self.scores.get_round(round_id)
        if scoring_round is None or scoring_round.event_id != team.event_id:
            raise ResourceNotFoundError("Scoring round", str(round_id))

        await self.scores.upsert_score(team_id, round_id, value, graded_by, notes)
        logger.info(
            "Score recorded",
            extra={"team_id": team_id, "round_id": round_id, "event_id": team.event_id},
        )
        return ScoreRecord(
            team_id=team_id,
            round_id=round_id,
            score=value,
            graded_by=graded_by,
            notes=notes,
        )

    async def set_score_by_token(
        self,
        token: str,
        round_id: UUID,
        value: float,
        graded_by: UUID | None,
        notes: str | None = None,
    ) -> ScoreRecord:
        """Grade the team of whichever member's token was scanned."""
        value = validate_score(value)
        _, registration = await self.tokens.resolve(token)
        team = await self.teams.team_of(registration.event_id, registration.id)
        if team is None:
            raise ResourceNotFoundError("Team for registration", str(registration.id))
        return await self.set_score(team.id, round_id, value, graded_by, notes)

    # === Ranking ===

    async def leaderboard(self, event_id: UUID) -> list[LeaderboardEntry]:
        await self._require_event(event_id)
        teams = await self.teams.list_for_event(event_id)
        counts = await self.teams.member_counts(event_id)
        rounds = await self.scores.list_rounds(event_id)
        scores = await self.scores.scores_for_event(event_id)
        return compute_leaderboard(
            [
                TeamSummary(
                    id=t.id,
                    name=t.name,
                    created_at=t.created_at,
                    member_count=counts.get(t.id, 0),
                )
                for t in teams
            ],
            [_round_summary(r) for r in rounds],
            scores,
        )

    async def tally(self, event_id: UUID) -> Tally:
        entries = await self.leaderboard(event_id)
        round_count = len(entries[0].per_round_scores) if entries else len(
            await self.scores.list_rounds(event_id)
        )
        return Tally(
            event_id=event_id,
            leaderboard=entries,
            team_count=len(entries),
            round_count=round_count,
            participant_count=sum(e.team.member_count for e in entries),
        )
