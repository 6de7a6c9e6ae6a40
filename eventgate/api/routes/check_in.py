"""Check-in Routes — volunteer scans, the scan log and its CSV export.

Invariants:
    - A scan always answers 200 with its outcome; only auth, validation and storage
      failures are HTTP errors
    - The scanning station's event (path) is passed to the engine, so a token from
      another event reports not-found
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from eventgate.api.deps import (
    Caller, SCANNER_ROLES, STAFF_ROLES,
    get_check_in_engine, get_scan_export_service, require_export_access, require_roles,
)
from eventgate.config import Settings, get_settings
from eventgate.core.domain_types import ScanOutcome
from eventgate.schemas.check_in import CheckInRequest
from eventgate.services.check_in_engine import CheckInEngine
from eventgate.services.scan_export import ScanExportService

router = APIRouter(prefix="/api/v1/events/{event_id}", tags=["check-in"])


@router.post("/check-in")
async def check_in(
    event_id: UUID,
    body: CheckInRequest,
    caller: Caller = Depends(require_roles(*SCANNER_ROLES)),
    engine: CheckInEngine = Depends(get_check_in_engine),
):
    """Scan a participant token at a checkpoint."""
    attempt = await engine.check_in(
        body.token, body.checkpoint, caller.user_id, event_id=event_id,
    )
    return {"accepted": attempt.outcome == ScanOutcome.SUCCESS, **attempt.to_dict()}


@router.get("/scans")
async def recent_scans(
    event_id: UUID,
    limit: int | None = Query(None, ge=1, le=1000),
    failed_only: bool = Query(False),
    caller: Caller = Depends(require_roles(*STAFF_ROLES)),
    engine: CheckInEngine = Depends(get_check_in_engine),
    settings: Settings = Depends(get_settings),
):
    """Most recent scan attempts, newest first."""
    scans = await engine.recent_scans(
        event_id, limit or settings.scan_log_limit, failed_only,
    )
    return {"event_id": str(event_id), "scans": [s.to_dict() for s in scans]}


@router.get("/scans/export")
async def export_scans(
    event_id: UUID,
    caller: Caller | None = Depends(require_export_access),
    exporter: ScanExportService = Depends(get_scan_export_service),
):
    """Scan log as CSV, ordered by checkpoint position then time."""
    filename, content = await exporter.export(event_id)
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
