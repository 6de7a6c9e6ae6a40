"""Event Repository — event lookup and checkpoint registry persistence."""

from typing import Sequence
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from eventgate.models.event import Event


class EventRepository:
    """Event reads and checkpoint configuration writes."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, event_id: UUID) -> Event | None:
        result = await self.db.execute(
            select(Event)
            .where(Event.id == event_id)
            .execution_options(populate_existing=True),
        )
        return result.scalar_one_or_none()

    async def save_checkpoints(
        self, event_id: UUID, checkpoints: Sequence[str], unlocked: Sequence[str],
    ) -> None:
        await self.db.execute(
            update(Event)
            .where(Event.id == event_id)
            .values(checkpoints=list(checkpoints), unlocked_checkpoints=list(unlocked))
            .execution_options(synchronize_session="fetch"),
        )
        await self.db.commit()

    async def set_order_enforced(self, event_id: UUID, enforced: bool) -> None:
        await self.db.execute(
            update(Event)
            .where(Event.id == event_id)
            .values(enforce_checkpoint_order=enforced)
            .execution_options(synchronize_session="fetch"),
        )
        await self.db.commit()
