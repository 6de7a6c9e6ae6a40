"""Team Schemas — team creation and member scans."""

from pydantic import BaseModel, Field, field_validator


class TeamCreate(BaseModel):
    """Team creation with optional initial member tokens, scanned in order."""
    name: str = Field(min_length=1, max_length=100)
    tokens: list[str] = Field(default_factory=list, max_length=50)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty or whitespace")
        return v


class MemberScan(BaseModel):
    token: str = Field(min_length=1, max_length=4096)
