"""Scoring Schemas — rounds and score submissions.

Invariants:
    - Score values are finite and >= 0 (re-checked by the scoring service)
"""

import math

from pydantic import BaseModel, Field, field_validator


class RoundCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    round_number: int | None = Field(None, ge=1)


class ScoreSubmit(BaseModel):
    """Score for a team in a round."""
    score: float = Field(ge=0)
    notes: str | None = Field(None, max_length=2000)

    @field_validator("score")
    @classmethod
    def finite_score(cls, v: float) -> float:
        if not math.isfinite(v):
            raise ValueError("score must be a finite number")
        return v


class ScoreByToken(ScoreSubmit):
    token: str = Field(min_length=1, max_length=4096)
