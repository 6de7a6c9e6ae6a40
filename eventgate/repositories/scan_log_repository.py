"""Scan Log Repository — append-only scan audit trail and export rows."""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from eventgate.core.domain_types import ScanOutcome
from eventgate.core.scan_export import ScanExportRow
from eventgate.core.scan_policy import ScanAttempt
from eventgate.models.scan_log import ScanLog
from eventgate.models.user import User


def scan_log_from_attempt(attempt: ScanAttempt) -> ScanLog:
    return ScanLog(
        id=attempt.id,
        event_id=attempt.event_id,
        volunteer_id=attempt.volunteer_id,
        qr_code=attempt.presented_token,
        checkpoint=attempt.checkpoint,
        outcome=attempt.outcome.value,
        error_message=attempt.error_message,
        user_id=attempt.participant_id,
        registration_id=attempt.registration_id,
        created_at=attempt.created_at,
    )


def attempt_from_scan_log(row: ScanLog) -> ScanAttempt:
    return ScanAttempt(
        id=row.id,
        event_id=row.event_id,
        volunteer_id=row.volunteer_id,
        presented_token=row.qr_code or "",
        checkpoint=row.checkpoint,
        outcome=ScanOutcome(row.outcome),
        created_at=row.created_at,
        error_message=row.error_message,
        participant_id=row.user_id,
        registration_id=row.registration_id,
    )


class ScanLogRepository:
    """Insert-only access to scan_logs."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def append(self, attempt: ScanAttempt) -> None:
        self.db.add(scan_log_from_attempt(attempt))
        await self.db.commit()

    async def recent(
        self, event_id: UUID, limit: int, failed_only: bool = False,
    ) -> list[ScanAttempt]:
        query = (
            select(ScanLog)
            .where(ScanLog.event_id == event_id)
            .order_by(ScanLog.created_at.desc())
        )
        if failed_only:
            query = query.where(ScanLog.outcome != ScanOutcome.SUCCESS.value)
        result = await self.db.execute(query.limit(limit))
        return [attempt_from_scan_log(row) for row in result.scalars().all()]

    async def export_rows(self, event_id: UUID) -> list[ScanExportRow]:
        participant = aliased(User)
        volunteer = aliased(User)
        result = await self.db.execute(
            select(
                ScanLog.checkpoint,
                participant.name,
                volunteer.name,
                ScanLog.created_at,
                ScanLog.outcome,
                ScanLog.error_message,
            )
            .outerjoin(participant, ScanLog.user_id == participant.id)
            .outerjoin(volunteer, ScanLog.volunteer_id == volunteer.id)
            .where(ScanLog.event_id == event_id)
            .order_by(ScanLog.created_at.asc()),
        )
        return [
            ScanExportRow(
                checkpoint=checkpoint,
                participant_name=participant_name,
                volunteer_name=volunteer_name,
                scanned_at=created_at,
                outcome=outcome,
                error_message=error_message,
            )
            for (
                checkpoint, participant_name, volunteer_name,
                created_at, outcome, error_message,
            ) in result.all()
        ]
