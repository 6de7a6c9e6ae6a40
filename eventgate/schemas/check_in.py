"""Check-in Schemas — scan requests from volunteer stations."""

from pydantic import BaseModel, Field, field_validator

from eventgate.core.domain_types import MAX_CHECKPOINT_NAME_LENGTH


class CheckInRequest(BaseModel):
    """A scanned QR payload at a named checkpoint."""
    token: str = Field(min_length=1, max_length=4096)
    checkpoint: str = Field(min_length=1, max_length=MAX_CHECKPOINT_NAME_LENGTH)

    @field_validator("checkpoint")
    @classmethod
    def strip_checkpoint(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("checkpoint cannot be empty or whitespace")
        return v
