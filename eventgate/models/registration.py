"""Registration ORM — a participant's enrollment plus its checkpoint check-in history.

Invariants:
    - status: pending -> approved | rejected; approved -> checked-in on first check-in
    - At most one CheckpointCheckIn per (registration_id, checkpoint): the unique
      constraint is the compare-and-set for concurrent scans
    - checkpoint_check_ins ordered by checked_in_at (scan order)
    - qr_code holds the most recently issued token; older tokens stay valid

Design Decisions:
    - Check-ins as rows, not a JSON list on the registration: a unique constraint
      gives atomic idempotence without row locks
    - cascade delete: deleting a registration drops its check-ins and revokes its token
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Text, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from eventgate.db.base import Base


class Registration(Base):
    """Registration entity — one user, one event."""
    __tablename__ = "registrations"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    event_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("events.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id"), nullable=False,
    )
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="pending",
    )
    qr_code: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    checkpoint_check_ins: Mapped[list["CheckpointCheckIn"]] = relationship(
        "CheckpointCheckIn", back_populates="registration",
        cascade="all, delete-orphan", lazy="selectin",
        order_by="CheckpointCheckIn.checked_in_at",
    )


class CheckpointCheckIn(Base):
    """One recorded pass through a checkpoint."""
    __tablename__ = "checkpoint_check_ins"
    __table_args__ = (
        UniqueConstraint(
            "registration_id", "checkpoint", name="uq_check_in_per_checkpoint",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    registration_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("registrations.id", ondelete="CASCADE"),
        nullable=False,
    )
    checkpoint: Mapped[str] = mapped_column(String(100), nullable=False)
    checked_in_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    recorded_by: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), nullable=False,
    )

    registration: Mapped["Registration"] = relationship(
        "Registration", back_populates="checkpoint_check_ins",
    )
