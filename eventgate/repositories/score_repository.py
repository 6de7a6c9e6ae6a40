"""Score Repository — scoring rounds and upserted team scores.

Invariants:
    - upsert_score is last-writer-wins on unique (team_id, scoring_round_id)
    - delete_round removes the round's scores first
    - create_round raises ConflictError when the event already has that round number
"""

from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import select, delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from eventgate.core.errors import ConflictError, ErrorContext
from eventgate.models.scoring import ScoringRound, TeamScore
from eventgate.models.team import Team
from eventgate.repositories.integrity import violates_unique


class ScoreRepository:
    """Round CRUD and score upserts."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_round(
        self, event_id: UUID, name: str, round_number: int,
    ) -> ScoringRound:
        scoring_round = ScoringRound(
            event_id=event_id, name=name, round_number=round_number,
        )
        self.db.add(scoring_round)
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            if not violates_unique(
                e, ScoringRound.__table__, "uq_round_number_per_event",
            ):
                raise
            raise ConflictError(
                f"Round {round_number} already exists", "ROUND_EXISTS",
                ErrorContext(event_id=str(event_id)),
            )
        await self.db.refresh(scoring_round)
        return scoring_round

    async def get_round(self, round_id: UUID) -> ScoringRound | None:
        result = await self.db.execute(
            select(ScoringRound).where(ScoringRound.id == round_id),
        )
        return result.scalar_one_or_none()

    async def list_rounds(self, event_id: UUID) -> list[ScoringRound]:
        result = await self.db.execute(
            select(ScoringRound)
            .where(ScoringRound.event_id == event_id)
            .order_by(ScoringRound.round_number.asc()),
        )
        return list(result.scalars().all())

    async def delete_round(self, round_id: UUID) -> None:
        await self.db.execute(
            delete(TeamScore).where(TeamScore.scoring_round_id == round_id),
        )
        await self.db.execute(
            delete(ScoringRound).where(ScoringRound.id == round_id),
        )
        await self.db.commit()

    async def _find_score(self, team_id: UUID, round_id: UUID) -> TeamScore | None:
        result = await self.db.execute(
            select(TeamScore)
            .where(TeamScore.team_id == team_id)
            .where(TeamScore.scoring_round_id == round_id)
            .execution_options(populate_existing=True),
        )
        return result.scalar_one_or_none()

    async def upsert_score(
        self,
        team_id: UUID,
        round_id: UUID,
        value: float,
        graded_by: UUID | None,
        notes: str | None,
    ) -> TeamScore:
        now = datetime.now(timezone.utc)
        existing = await self._find_score(team_id, round_id)
        if existing is None:
            existing = TeamScore(team_id=team_id, scoring_round_id=round_id)
            self.db.add(existing)
        existing.score = value
        existing.graded_by = graded_by
        existing.notes = notes
        existing.graded_at = now
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            if not violates_unique(e, TeamScore.__table__, "uq_score_per_team_round"):
                raise
            # A concurrent first write created the row: overwrite it
            existing = await self._find_score(team_id, round_id)
            existing.score = value
            existing.graded_by = graded_by
            existing.notes = notes
            existing.graded_at = now
            await self.db.commit()
        return existing

    async def scores_for_event(self, event_id: UUID) -> dict[tuple[UUID, UUID], float]:
        result = await self.db.execute(
            select(TeamScore.team_id, TeamScore.scoring_round_id, TeamScore.score)
            .join(Team, Team.id == TeamScore.team_id)
            .where(Team.event_id == event_id),
        )
        return {
            (team_id, round_id): score for team_id, round_id, score in result.all()
        }
