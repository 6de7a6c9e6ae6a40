"""Scan Policy — pure acceptance rules for a scan at a checkpoint.

Invariants:
    - evaluate_scan is PURE: returns a ScanDecision, does NOT mutate anything
    - Rule order: registration status -> checkpoint unlocked -> sequence order -> duplicate
    - A checkpoint absent from the event's sequence is never unlocked
      (unlocked ⊆ checkpoints), so it reports checkpoint-locked
    - Ordering only applies when the event enforces it

Design Decisions:
    - Shell (CheckInEngine) loads event + registration, calls this, then performs the
      atomic write only for an accepted decision
    - ScanAttempt is an immutable value object: the audit record callers receive
      mirrors the scan_logs row that was written
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Sequence
from uuid import UUID

from eventgate.core.domain_types import RegistrationStatus, ScanOutcome
from eventgate.core.errors import ErrorSeverity


OUTCOME_SEVERITY: dict[ScanOutcome, ErrorSeverity | None] = {
    ScanOutcome.SUCCESS: None,
    ScanOutcome.DUPLICATE: ErrorSeverity.INFO,
    ScanOutcome.CHECKPOINT_LOCKED: ErrorSeverity.WARNING,
    ScanOutcome.OUT_OF_ORDER: ErrorSeverity.WARNING,
    ScanOutcome.INVALID_TOKEN: ErrorSeverity.WARNING,
    ScanOutcome.NOT_FOUND: ErrorSeverity.WARNING,
    ScanOutcome.NOT_APPROVED: ErrorSeverity.WARNING,
}


@dataclass(frozen=True)
class ScanDecision:
    """Outcome of the pure policy check; detail is shown to the volunteer."""
    outcome: ScanOutcome
    detail: str | None = None

    @property
    def accepted(self) -> bool:
        return self.outcome == ScanOutcome.SUCCESS


@dataclass(frozen=True)
class ScanAttempt:
    """Immutable audit record of one scan, successful or not."""
    id: UUID
    event_id: UUID | None
    volunteer_id: UUID
    presented_token: str
    checkpoint: str
    outcome: ScanOutcome
    created_at: datetime
    error_message: str | None = None
    participant_id: UUID | None = None
    registration_id: UUID | None = None

    @property
    def severity(self) -> ErrorSeverity | None:
        return OUTCOME_SEVERITY[self.outcome]

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "event_id": str(self.event_id) if self.event_id else None,
            "volunteer_id": str(self.volunteer_id),
            "checkpoint": self.checkpoint,
            "outcome": self.outcome.value,
            "severity": self.severity.value if self.severity else None,
            "error_message": self.error_message,
            "participant_id": str(self.participant_id) if self.participant_id else None,
            "registration_id": str(self.registration_id) if self.registration_id else None,
            "created_at": self.created_at.isoformat(),
        }


def missing_predecessors(
    checkpoint: str, sequence: Sequence[str], completed: Sequence[str],
) -> list[str]:
    """Checkpoints earlier in the sequence that have not been recorded yet."""
    if checkpoint not in sequence:
        return []
    done = set(completed)
    return [cp for cp in sequence[:sequence.index(checkpoint)] if cp not in done]


def evaluate_scan(
    checkpoint: str,
    sequence: Sequence[str],
    unlocked: Sequence[str],
    enforce_order: bool,
    status: RegistrationStatus,
    completed: Sequence[str],
) -> ScanDecision:
    """Decide a scan's outcome from event configuration and registration state."""
    if status == RegistrationStatus.PENDING:
        return ScanDecision(
            ScanOutcome.NOT_APPROVED, "Registration has not been approved yet",
        )
    if status == RegistrationStatus.REJECTED:
        return ScanDecision(ScanOutcome.INVALID_TOKEN, "Invalid or tampered QR code")

    if checkpoint not in unlocked or checkpoint not in sequence:
        return ScanDecision(
            ScanOutcome.CHECKPOINT_LOCKED, f"Checkpoint {checkpoint} is locked",
        )

    if enforce_order:
        missing = missing_predecessors(checkpoint, sequence, completed)
        if missing:
            return ScanDecision(
                ScanOutcome.OUT_OF_ORDER,
                f"Must complete {missing[0]} before checking into {checkpoint}",
            )

    if checkpoint in completed:
        return ScanDecision(
            ScanOutcome.DUPLICATE, f"Already checked in at {checkpoint}",
        )

    return ScanDecision(ScanOutcome.SUCCESS)
