"""Checkpoint Registry — per-event ordered checkpoints with lock/unlock state.

Invariants:
    - unlock/lock are idempotent
    - unlocked ⊆ checkpoints; unlocked names kept in checkpoint order
    - add_checkpoint appends and never reorders existing entries
    - The registry does not force unlocking in sequence order

Design Decisions:
    - Read-modify-write of the JSON lists without locking: lock/unlock are
      last-writer-wins by contract
"""

import logging
from dataclasses import dataclass
from uuid import UUID

from eventgate.core.domain_types import MAX_CHECKPOINT_NAME_LENGTH
from eventgate.core.errors import (
    ErrorContext, PolicyViolationError, ResourceNotFoundError, UnknownCheckpointError,
)
from eventgate.core.repository_protocols import EventLike, EventStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CheckpointConfig:
    event_id: UUID
    checkpoints: list[str]
    unlocked_checkpoints: list[str]
    enforce_checkpoint_order: bool


class CheckpointRegistry:
    """Checkpoint configuration for events."""

    def __init__(self, events: EventStore):
        self.events = events

    async def _event(self, event_id: UUID) -> EventLike:
        event = await self.events.get(event_id)
        if event is None:
            raise ResourceNotFoundError("Event", str(event_id))
        return event

    async def config(self, event_id: UUID) -> CheckpointConfig:
        event = await self._event(event_id)
        return CheckpointConfig(
            event_id=event_id,
            checkpoints=list(event.checkpoints or []),
            unlocked_checkpoints=list(event.unlocked_checkpoints or []),
            enforce_checkpoint_order=event.enforce_checkpoint_order,
        )

    async def order(self, event_id: UUID) -> list[str]:
        event = await self._event(event_id)
        return list(event.checkpoints or [])

    async def unlocked(self, event_id: UUID) -> list[str]:
        event = await self._event(event_id)
        return list(event.unlocked_checkpoints or [])

    async def is_unlocked(self, event_id: UUID, name: str) -> bool:
        return name in await self.unlocked(event_id)

    async def unlock(self, event_id: UUID, name: str) -> list[str]:
        event = await self._event(event_id)
        sequence = list(event.checkpoints or [])
        if name not in sequence:
            raise UnknownCheckpointError(name, ErrorContext(event_id=str(event_id)))
        current = set(event.unlocked_checkpoints or [])
        if name in current:
            return [cp for cp in sequence if cp in current]
        current.add(name)
        unlocked = [cp for cp in sequence if cp in current]
        await self.events.save_checkpoints(event_id, sequence, unlocked)
        logger.info("Checkpoint unlocked", extra={"event_id": event_id, "checkpoint": name})
        return unlocked

    async def lock(self, event_id: UUID, name: str) -> list[str]:
        event = await self._event(event_id)
        sequence = list(event.checkpoints or [])
        if name not in sequence:
            raise UnknownCheckpointError(name, ErrorContext(event_id=str(event_id)))
        current = set(event.unlocked_checkpoints or [])
        if name not in current:
            return [cp for cp in sequence if cp in current]
        current.discard(name)
        unlocked = [cp for cp in sequence if cp in current]
        await self.events.save_checkpoints(event_id, sequence, unlocked)
        logger.info("Checkpoint locked", extra={"event_id": event_id, "checkpoint": name})
        return unlocked

    async def add_checkpoint(self, event_id: UUID, name: str) -> list[str]:
        """Append a checkpoint to the end of the sequence (locked)."""
        name = name.strip()
        if not name or len(name) > MAX_CHECKPOINT_NAME_LENGTH:
            raise PolicyViolationError(
                f"Checkpoint names must be 1-{MAX_CHECKPOINT_NAME_LENGTH} characters",
                "INVALID_CHECKPOINT_NAME",
                ErrorContext(event_id=str(event_id)),
            )
        event = await self._event(event_id)
        sequence = list(event.checkpoints or [])
        if name in sequence:
            return sequence
        sequence.append(name)
        unlocked = [cp for cp in sequence if cp in set(event.unlocked_checkpoints or [])]
        await self.events.save_checkpoints(event_id, sequence, unlocked)
        logger.info("Checkpoint added", extra={"event_id": event_id, "checkpoint": name})
        return sequence

    async def set_order_enforced(self, event_id: UUID, enforced: bool) -> None:
        await self._event(event_id)
        await self.events.set_order_enforced(event_id, enforced)
