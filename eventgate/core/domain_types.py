"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - EventId, RegistrationId, TeamId, RoundId, UserId wrap UUIDs
    - All valid states encoded as Enums — no raw string matching
    - ScanOutcome values are the exact strings stored in scan_logs.outcome

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders
"""

from enum import Enum
from typing import NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

UserId = NewType("UserId", UUID)
EventId = NewType("EventId", UUID)
RegistrationId = NewType("RegistrationId", UUID)
TeamId = NewType("TeamId", UUID)
RoundId = NewType("RoundId", UUID)


# ─── Constants ───────────────────────────────────────────────────

TOKEN_TYPE = "participant-checkin"
UNMAPPED_CHECKPOINT_INDEX = 99
MAX_CHECKPOINT_NAME_LENGTH = 100


# ─── Enums ───────────────────────────────────────────────────────

class Role(str, Enum):
    """Caller roles — resolved by the auth collaborator, only read here."""
    APPLICANT = "applicant"
    PARTICIPANT = "participant"
    VOLUNTEER = "volunteer"
    ORGANIZER = "organizer"
    ADMIN = "admin"
    MENTOR = "mentor"


class RegistrationStatus(str, Enum):
    """Registration lifecycle — checked-in is reachable only from approved."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CHECKED_IN = "checked-in"


class ScanOutcome(str, Enum):
    """Terminal outcome of one scan at a checkpoint."""
    SUCCESS = "success"
    DUPLICATE = "duplicate"
    CHECKPOINT_LOCKED = "checkpoint-locked"
    OUT_OF_ORDER = "out-of-order"
    INVALID_TOKEN = "invalid-token"
    NOT_FOUND = "not-found"
    NOT_APPROVED = "not-approved"


class MembershipOutcome(str, Enum):
    """Result of scanning a member token into a team."""
    ACCEPTED = "accepted"
    ALREADY_ON_TEAM = "already-on-team"
    ALREADY_SCANNED = "already-scanned"
    INVALID_TOKEN = "invalid-token"
    NOT_FOUND = "not-found"


class TokenFailure(str, Enum):
    """Internal reason a token failed verification. Never sent to clients."""
    MALFORMED = "malformed"
    SIGNATURE_MISMATCH = "signature-mismatch"
    UNKNOWN_SUBJECT = "unknown-subject"


# Registrations whose token still verifies
ACTIVE_REGISTRATION_STATUSES = frozenset({
    RegistrationStatus.PENDING,
    RegistrationStatus.APPROVED,
    RegistrationStatus.CHECKED_IN,
})
