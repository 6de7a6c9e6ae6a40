"""Token Schemas — QR token issue and verification payloads."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class TokenVerifyRequest(BaseModel):
    token: str = Field(min_length=1, max_length=4096)


class TokenResponse(BaseModel):
    registration_id: UUID
    token: str


class TokenClaimsResponse(BaseModel):
    participant_id: UUID
    event_id: UUID
    registration_id: UUID
    issued_at: datetime
