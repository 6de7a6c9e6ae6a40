"""Registration Repository — registration reads and the atomic check-in write.

Invariants:
    - record_check_in writes the check-in row, the approved -> checked-in promotion
      and the success scan log in ONE transaction
    - The unique (registration_id, checkpoint) constraint decides concurrent races:
      the loser's transaction is rolled back entirely and False is returned; any
      other IntegrityError (a registration deleted mid-scan) propagates
    - completed_checkpoints always re-reads from the store (no identity-map staleness)
"""

import logging
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from eventgate.core.domain_types import RegistrationStatus
from eventgate.core.scan_policy import ScanAttempt
from eventgate.models.registration import Registration, CheckpointCheckIn
from eventgate.repositories.integrity import violates_unique
from eventgate.repositories.scan_log_repository import scan_log_from_attempt

logger = logging.getLogger(__name__)


class RegistrationRepository:
    """Registration reads, token storage and check-in compare-and-set."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, registration_id: UUID) -> Registration | None:
        result = await self.db.execute(
            select(Registration)
            .where(Registration.id == registration_id)
            .execution_options(populate_existing=True),
        )
        return result.scalar_one_or_none()

    async def completed_checkpoints(self, registration_id: UUID) -> list[str]:
        result = await self.db.execute(
            select(CheckpointCheckIn.checkpoint)
            .where(CheckpointCheckIn.registration_id == registration_id)
            .order_by(CheckpointCheckIn.checked_in_at),
        )
        return list(result.scalars().all())

    async def record_check_in(self, attempt: ScanAttempt) -> bool:
        """Insert check-in + promote status + log success. False if already recorded."""
        try:
            self.db.add(CheckpointCheckIn(
                registration_id=attempt.registration_id,
                checkpoint=attempt.checkpoint,
                checked_in_at=attempt.created_at,
                recorded_by=attempt.volunteer_id,
            ))
            # Autoflush may surface the constraint violation here rather than at commit
            await self.db.execute(
                update(Registration)
                .where(Registration.id == attempt.registration_id)
                .where(Registration.status == RegistrationStatus.APPROVED.value)
                .values(status=RegistrationStatus.CHECKED_IN.value)
                .execution_options(synchronize_session="fetch"),
            )
            self.db.add(scan_log_from_attempt(attempt))
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            if not violates_unique(
                e, CheckpointCheckIn.__table__, "uq_check_in_per_checkpoint",
            ):
                raise
            logger.info(
                "Concurrent check-in lost the race",
                extra={
                    "registration_id": attempt.registration_id,
                    "checkpoint": attempt.checkpoint,
                },
            )
            return False
        return True

    async def store_token(self, registration_id: UUID, token: str) -> None:
        await self.db.execute(
            update(Registration)
            .where(Registration.id == registration_id)
            .values(qr_code=token)
            .execution_options(synchronize_session="fetch"),
        )
        await self.db.commit()
