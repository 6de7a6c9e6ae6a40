"""Boundary Protocols — contracts between core services and the storage shell.

Invariants:
    - Services depend on these Protocols only; SQLAlchemy implementations live in
      eventgate.repositories and are injected by the API layer
    - record_check_in and add_member are the two atomic compare-and-set operations:
      they return False instead of writing when the uniqueness invariant would break
    - Every other write is last-writer-wins

Design Decisions:
    - Protocol over ABC: structural subtyping, test fakes need no inheritance
    - *Like protocols describe the row shape services read, so services never
      import ORM models
"""

from datetime import datetime
from typing import Protocol, Sequence
from uuid import UUID

from eventgate.core.scan_export import ScanExportRow
from eventgate.core.scan_policy import ScanAttempt


class EventLike(Protocol):
    id: UUID
    name: str
    checkpoints: list[str]
    unlocked_checkpoints: list[str]
    enforce_checkpoint_order: bool


class RegistrationLike(Protocol):
    id: UUID
    event_id: UUID
    user_id: UUID
    status: str


class TeamLike(Protocol):
    id: UUID
    event_id: UUID
    name: str
    created_at: datetime


class RoundLike(Protocol):
    id: UUID
    event_id: UUID
    name: str
    round_number: int


class ScoreLike(Protocol):
    team_id: UUID
    scoring_round_id: UUID
    score: float
    graded_by: UUID | None
    notes: str | None


class EventStore(Protocol):
    async def get(self, event_id: UUID) -> EventLike | None: ...
    async def save_checkpoints(
        self, event_id: UUID, checkpoints: Sequence[str], unlocked: Sequence[str],
    ) -> None: ...
    async def set_order_enforced(self, event_id: UUID, enforced: bool) -> None: ...


class RegistrationStore(Protocol):
    async def get(self, registration_id: UUID) -> RegistrationLike | None: ...
    async def completed_checkpoints(self, registration_id: UUID) -> list[str]: ...
    async def record_check_in(self, attempt: ScanAttempt) -> bool: ...
    async def store_token(self, registration_id: UUID, token: str) -> None: ...


class ScanLogStore(Protocol):
    async def append(self, attempt: ScanAttempt) -> None: ...
    async def recent(
        self, event_id: UUID, limit: int, failed_only: bool = False,
    ) -> list[ScanAttempt]: ...
    async def export_rows(self, event_id: UUID) -> list[ScanExportRow]: ...


class TeamStore(Protocol):
    async def get(self, team_id: UUID) -> TeamLike | None: ...
    async def create(self, event_id: UUID, name: str, created_by: UUID) -> TeamLike: ...
    async def list_for_event(self, event_id: UUID) -> list[TeamLike]: ...
    async def member_ids(self, team_id: UUID) -> list[UUID]: ...
    async def member_counts(self, event_id: UUID) -> dict[UUID, int]: ...
    async def team_of(self, event_id: UUID, registration_id: UUID) -> TeamLike | None: ...
    async def add_member(
        self, team_id: UUID, event_id: UUID, registration_id: UUID, added_by: UUID,
    ) -> bool: ...


class ScoreStore(Protocol):
    async def create_round(
        self, event_id: UUID, name: str, round_number: int,
    ) -> RoundLike: ...
    async def get_round(self, round_id: UUID) -> RoundLike | None: ...
    async def list_rounds(self, event_id: UUID) -> list[RoundLike]: ...
    async def delete_round(self, round_id: UUID) -> None: ...
    async def upsert_score(
        self,
        team_id: UUID,
        round_id: UUID,
        value: float,
        graded_by: UUID | None,
        notes: str | None,
    ) -> ScoreLike: ...
    async def scores_for_event(self, event_id: UUID) -> dict[tuple[UUID, UUID], float]: ...
