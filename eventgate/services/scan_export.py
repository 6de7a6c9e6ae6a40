"""Scan Export — CSV of an event's scan log for external collaborators."""

import logging
from datetime import tzinfo
from uuid import UUID
from zoneinfo import ZoneInfo

from eventgate.core.errors import ResourceNotFoundError
from eventgate.core.repository_protocols import EventStore, ScanLogStore
from eventgate.core.scan_export import build_scan_csv

logger = logging.getLogger(__name__)


class ScanExportService:
    """Renders scan logs in checkpoint order, timestamps in the export timezone."""

    def __init__(self, events: EventStore, scan_logs: ScanLogStore, tz: tzinfo | str):
        self.events = events
        self.scan_logs = scan_logs
        self.tz = ZoneInfo(tz) if isinstance(tz, str) else tz

    async def export(self, event_id: UUID) -> tuple[str, str]:
        """Returns (filename, csv text). Raises ResourceNotFoundError with no scans."""
        event = await self.events.get(event_id)
        if event is None:
            raise ResourceNotFoundError("Event", str(event_id))
        order = list(event.checkpoints or [])
        event_name = event.name

        rows = await self.scan_logs.export_rows(event_id)
        if not rows:
            raise ResourceNotFoundError("Scan logs for event", str(event_id))

        content = build_scan_csv(rows, order, self.tz)
        safe_name = "".join(c if c.isalnum() else "_" for c in event_name).strip("_")
        filename = f"{safe_name or 'event'}_scans.csv"
        logger.info(
            f"Scan log exported ({len(rows)} rows)", extra={"event_id": event_id},
        )
        return filename, content
