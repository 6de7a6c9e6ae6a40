"""Checkpoint Routes — event checkpoint sequence, lock state and ordering flag."""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, status

from eventgate.api.deps import (
    Caller, STAFF_ROLES, get_caller, get_checkpoint_registry, require_roles,
)
from eventgate.schemas.checkpoint import CheckpointName, CheckpointState, OrderingUpdate
from eventgate.services.checkpoint_registry import CheckpointRegistry

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/events/{event_id}/checkpoints", tags=["checkpoints"])


async def _state(registry: CheckpointRegistry, event_id: UUID) -> CheckpointState:
    config = await registry.config(event_id)
    return CheckpointState(
        event_id=str(config.event_id),
        checkpoints=config.checkpoints,
        unlocked_checkpoints=config.unlocked_checkpoints,
        enforce_checkpoint_order=config.enforce_checkpoint_order,
    )


@router.get("", response_model=CheckpointState)
async def get_checkpoints(
    event_id: UUID,
    caller: Caller = Depends(get_caller),
    registry: CheckpointRegistry = Depends(get_checkpoint_registry),
):
    return await _state(registry, event_id)


@router.post("", response_model=CheckpointState, status_code=status.HTTP_201_CREATED)
async def add_checkpoint(
    event_id: UUID,
    body: CheckpointName,
    caller: Caller = Depends(require_roles(*STAFF_ROLES)),
    registry: CheckpointRegistry = Depends(get_checkpoint_registry),
):
    """Append a (locked) checkpoint to the event's sequence."""
    await registry.add_checkpoint(event_id, body.checkpoint)
    return await _state(registry, event_id)


@router.post("/unlock", response_model=CheckpointState)
async def unlock_checkpoint(
    event_id: UUID,
    body: CheckpointName,
    caller: Caller = Depends(require_roles(*STAFF_ROLES)),
    registry: CheckpointRegistry = Depends(get_checkpoint_registry),
):
    await registry.unlock(event_id, body.checkpoint)
    return await _state(registry, event_id)


@router.post("/lock", response_model=CheckpointState)
async def lock_checkpoint(
    event_id: UUID,
    body: CheckpointName,
    caller: Caller = Depends(require_roles(*STAFF_ROLES)),
    registry: CheckpointRegistry = Depends(get_checkpoint_registry),
):
    await registry.lock(event_id, body.checkpoint)
    return await _state(registry, event_id)


@router.put("/ordering", response_model=CheckpointState)
async def set_ordering(
    event_id: UUID,
    body: OrderingUpdate,
    caller: Caller = Depends(require_roles(*STAFF_ROLES)),
    registry: CheckpointRegistry = Depends(get_checkpoint_registry),
):
    """Turn sequential checkpoint enforcement on or off."""
    await registry.set_order_enforced(event_id, body.enforce_checkpoint_order)
    return await _state(registry, event_id)
