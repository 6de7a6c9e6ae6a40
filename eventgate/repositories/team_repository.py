"""Team Repository — teams, scan-ordered membership and the one-team-per-registration write.

Invariants:
    - add_member inserts a TeamMember row whose unique (event_id, registration_id)
      constraint rejects a second team for the same registration, even under races
    - member_ids come back in scan order
"""

import logging
from uuid import UUID

from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from eventgate.models.team import Team, TeamMember
from eventgate.repositories.integrity import violates_unique

logger = logging.getLogger(__name__)


class TeamRepository:
    """Team and membership persistence."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, team_id: UUID) -> Team | None:
        result = await self.db.execute(select(Team).where(Team.id == team_id))
        return result.scalar_one_or_none()

    async def create(self, event_id: UUID, name: str, created_by: UUID) -> Team:
        team = Team(event_id=event_id, name=name, created_by=created_by)
        self.db.add(team)
        await self.db.commit()
        await self.db.refresh(team)
        return team

    async def list_for_event(self, event_id: UUID) -> list[Team]:
        result = await self.db.execute(
            select(Team)
            .where(Team.event_id == event_id)
            .order_by(Team.created_at.asc()),
        )
        return list(result.scalars().all())

    async def member_ids(self, team_id: UUID) -> list[UUID]:
        result = await self.db.execute(
            select(TeamMember.registration_id)
            .where(TeamMember.team_id == team_id)
            .order_by(TeamMember.added_at.asc()),
        )
        return list(result.scalars().all())

    async def member_counts(self, event_id: UUID) -> dict[UUID, int]:
        result = await self.db.execute(
            select(TeamMember.team_id, func.count(TeamMember.id))
            .where(TeamMember.event_id == event_id)
            .group_by(TeamMember.team_id),
        )
        return {team_id: count for team_id, count in result.all()}

    async def team_of(self, event_id: UUID, registration_id: UUID) -> Team | None:
        result = await self.db.execute(
            select(Team)
            .join(TeamMember, TeamMember.team_id == Team.id)
            .where(TeamMember.event_id == event_id)
            .where(TeamMember.registration_id == registration_id),
        )
        return result.scalar_one_or_none()

    async def add_member(
        self, team_id: UUID, event_id: UUID, registration_id: UUID, added_by: UUID,
    ) -> bool:
        """Append a member. False if the registration is already on a team of this event."""
        try:
            self.db.add(TeamMember(
                team_id=team_id,
                event_id=event_id,
                registration_id=registration_id,
                added_by=added_by,
            ))
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            if not violates_unique(
                e, TeamMember.__table__, "uq_one_team_per_registration",
            ):
                raise
            logger.info(
                "Concurrent team add lost the race",
                extra={"team_id": team_id, "registration_id": registration_id},
            )
            return False
        return True
