"""Checkpoint Schemas — event checkpoint configuration.

Invariants:
    - Checkpoint names are stripped and 1-100 characters
"""

from pydantic import BaseModel, Field, field_validator

from eventgate.core.domain_types import MAX_CHECKPOINT_NAME_LENGTH


class CheckpointName(BaseModel):
    """A single checkpoint name (add, unlock, lock)."""
    checkpoint: str = Field(min_length=1, max_length=MAX_CHECKPOINT_NAME_LENGTH)

    @field_validator("checkpoint")
    @classmethod
    def strip_checkpoint(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("checkpoint cannot be empty or whitespace")
        return v


class OrderingUpdate(BaseModel):
    enforce_checkpoint_order: bool


class CheckpointState(BaseModel):
    event_id: str
    checkpoints: list[str]
    unlocked_checkpoints: list[str]
    enforce_checkpoint_order: bool
