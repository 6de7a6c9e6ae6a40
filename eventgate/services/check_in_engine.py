"""Check-in Engine — processes one scan of a token at a checkpoint, exactly once.

Invariants:
    - Every call appends exactly one scan log row and returns the matching ScanAttempt
    - A bad token is an expected event: logged as invalid-token and returned, never raised
    - Only record_check_in writes check-in state, atomically with its success log;
      when it loses a concurrent race the outcome is duplicate
    - No automatic retries: a human decides whether to rescan

Design Decisions:
    - Rules live in core/scan_policy.evaluate_scan; this class only loads and persists
    - Plain values captured before the atomic write: a rolled-back session expires
      ORM instances and they must not be touched afterwards
"""

import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import Callable
from uuid import UUID, uuid4

from eventgate.core.domain_types import RegistrationStatus, ScanOutcome
from eventgate.core.errors import InvalidTokenError
from eventgate.core.repository_protocols import (
    EventStore, RegistrationStore, ScanLogStore,
)
from eventgate.core.scan_policy import ScanAttempt, evaluate_scan
from eventgate.services.token_service import TokenService

logger = logging.getLogger(__name__)


class CheckInEngine:
    """Consumes scans, enforces checkpoint policy and records outcomes."""

    def __init__(
        self,
        tokens: TokenService,
        events: EventStore,
        registrations: RegistrationStore,
        scan_logs: ScanLogStore,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.tokens = tokens
        self.events = events
        self.registrations = registrations
        self.scan_logs = scan_logs
        self.clock = clock

    async def check_in(
        self,
        token: str,
        checkpoint: str,
        volunteer_id: UUID,
        event_id: UUID | None = None,
    ) -> ScanAttempt:
        """Scan `token` at `checkpoint`. event_id is the scanning station's event, if known."""
        checkpoint = checkpoint.strip()
        attempt = ScanAttempt(
            id=uuid4(),
            event_id=event_id,
            volunteer_id=volunteer_id,
            presented_token=token,
            checkpoint=checkpoint,
            outcome=ScanOutcome.INVALID_TOKEN,
            created_at=self.clock(),
        )

        try:
            claims, registration = await self.tokens.resolve(token)
        except InvalidTokenError as e:
            return await self._reject(attempt, ScanOutcome.INVALID_TOKEN, e.message)

        registration_id = registration.id
        registration_event_id = registration.event_id
        status = RegistrationStatus(registration.status)
        attempt = replace(
            attempt,
            event_id=event_id or registration_event_id,
            participant_id=claims.participant_id,
            registration_id=registration_id,
        )

        if event_id is not None and registration_event_id != event_id:
            return await self._reject(
                attempt, ScanOutcome.NOT_FOUND,
                "Registration not found for this event",
            )

        event = await self.events.get(registration_event_id)
        if event is None:
            return await self._reject(attempt, ScanOutcome.NOT_FOUND, "Event not found")

        completed = await self.registrations.completed_checkpoints(registration_id)
        decision = evaluate_scan(
            checkpoint,
            sequence=list(event.checkpoints or []),
            unlocked=list(event.unlocked_checkpoints or []),
            enforce_order=event.enforce_checkpoint_order,
            status=status,
            completed=completed,
        )
        if not decision.accepted:
            return await self._reject(attempt, decision.outcome, decision.detail)

        success = replace(attempt, outcome=ScanOutcome.SUCCESS)
        if await self.registrations.record_check_in(success):
            logger.info(
                "Checked in",
                extra={
                    "event_id": success.event_id,
                    "registration_id": registration_id,
                    "checkpoint": checkpoint,
                    "volunteer_id": volunteer_id,
                    "outcome": ScanOutcome.SUCCESS.value,
                },
            )
            return success

        return await self._reject(
            replace(attempt, id=uuid4()),
            ScanOutcome.DUPLICATE,
            f"Already checked in at {checkpoint}",
        )

    async def _reject(
        self, attempt: ScanAttempt, outcome: ScanOutcome, detail: str | None,
    ) -> ScanAttempt:
        rejected = replace(attempt, outcome=outcome, error_message=detail)
        await self.scan_logs.append(rejected)
        logger.info(
            f"Scan rejected: {detail}",
            extra={
                "event_id": rejected.event_id,
                "registration_id": rejected.registration_id,
                "checkpoint": rejected.checkpoint,
                "volunteer_id": rejected.volunteer_id,
                "outcome": outcome.value,
            },
        )
        return rejected

    async def recent_scans(
        self, event_id: UUID, limit: int = 200, failed_only: bool = False,
    ) -> list[ScanAttempt]:
        return await self.scan_logs.recent(event_id, limit, failed_only)
