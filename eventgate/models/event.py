"""Event ORM — owns the checkpoint registry (ordered names + unlocked subset).

Invariants:
    - checkpoints is an ordered JSON list; order drives sequencing and export prefixes
    - unlocked_checkpoints ⊆ checkpoints, stored in checkpoint order
    - enforce_checkpoint_order=False lets any unlocked checkpoint be scanned in any order

Design Decisions:
    - JSON columns over a checkpoints table: the list is small, always read whole,
      and lock/unlock is last-writer-wins
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Boolean, DateTime, ForeignKey, JSON
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from eventgate.db.base import Base


class Event(Base):
    """Event aggregate root."""
    __tablename__ = "events"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    organizer_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id"), nullable=True,
    )
    checkpoints: Mapped[list] = mapped_column(
        JSON, nullable=False, default=list,
    )
    unlocked_checkpoints: Mapped[list] = mapped_column(
        JSON, nullable=False, default=list,
    )
    enforce_checkpoint_order: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True,
    )
    is_registration_open: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
