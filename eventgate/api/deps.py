"""API Dependencies — caller identity, role checks and per-request service wiring.

Invariants:
    - Caller identity arrives as trusted X-User-Id / X-User-Role headers set by the
      upstream gateway; missing or malformed headers are 401
    - A role outside the route's allowed set is 403
    - Every service in a request shares the request's single AsyncSession
    - The export key is compared in constant time and only when one is configured

Design Decisions:
    - Services built from FastAPI dependencies: tests override get_db once and
      every service follows
"""

import hmac
from dataclasses import dataclass
from typing import Callable
from uuid import UUID

from fastapi import Depends, Header, Query
from sqlalchemy.ext.asyncio import AsyncSession

from eventgate.config import Settings, get_settings
from eventgate.core.domain_types import Role
from eventgate.core.errors import AuthenticationRequiredError, PermissionDeniedError
from eventgate.infrastructure.database import get_db
from eventgate.repositories.event_repository import EventRepository
from eventgate.repositories.registration_repository import RegistrationRepository
from eventgate.repositories.scan_log_repository import ScanLogRepository
from eventgate.repositories.score_repository import ScoreRepository
from eventgate.repositories.team_repository import TeamRepository
from eventgate.services.check_in_engine import CheckInEngine
from eventgate.services.checkpoint_registry import CheckpointRegistry
from eventgate.services.scan_export import ScanExportService
from eventgate.services.scoring import ScoringService
from eventgate.services.team_formation import TeamFormationService
from eventgate.services.token_service import TokenService

STAFF_ROLES = (Role.ORGANIZER, Role.ADMIN)
SCANNER_ROLES = (Role.VOLUNTEER, Role.ORGANIZER, Role.ADMIN)
MENTOR_ROLES = (Role.MENTOR, Role.ORGANIZER, Role.ADMIN)
VERIFIER_ROLES = (Role.VOLUNTEER, Role.MENTOR, Role.ORGANIZER, Role.ADMIN)


@dataclass(frozen=True)
class Caller:
    user_id: UUID
    role: Role


def _parse_caller(user_id: str | None, role: str | None) -> Caller | None:
    if not user_id or not role:
        return None
    try:
        return Caller(user_id=UUID(user_id), role=Role(role.strip().lower()))
    except ValueError:
        return None


async def get_caller(
    x_user_id: str | None = Header(None),
    x_user_role: str | None = Header(None),
) -> Caller:
    caller = _parse_caller(x_user_id, x_user_role)
    if caller is None:
        raise AuthenticationRequiredError()
    return caller


def require_roles(*roles: Role) -> Callable:
    """Dependency factory: the caller must hold one of `roles`."""
    allowed = frozenset(roles)

    async def dependency(caller: Caller = Depends(get_caller)) -> Caller:
        if caller.role not in allowed:
            raise PermissionDeniedError(
                f"Role {caller.role.value} cannot perform this action",
            )
        return caller

    return dependency


async def require_export_access(
    x_user_id: str | None = Header(None),
    x_user_role: str | None = Header(None),
    x_export_key: str | None = Header(None),
    key: str | None = Query(None),
    settings: Settings = Depends(get_settings),
) -> Caller | None:
    """Anyone presenting the configured export key, otherwise organizer/admin callers.

    A presented key that does not match (or no key configured) is 401 even when
    the caller headers would pass.
    """
    presented = x_export_key or key
    if presented:
        expected = settings.csv_export_key
        if not expected or not hmac.compare_digest(
            presented.encode("utf-8"), expected.encode("utf-8"),
        ):
            raise AuthenticationRequiredError()
        return None
    caller = _parse_caller(x_user_id, x_user_role)
    if caller is None:
        raise AuthenticationRequiredError()
    if caller.role not in STAFF_ROLES:
        raise PermissionDeniedError(f"Role {caller.role.value} cannot export scans")
    return caller


# === Services ===

def get_token_service(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> TokenService:
    return TokenService(settings.qr_secret, RegistrationRepository(db))


def get_checkpoint_registry(db: AsyncSession = Depends(get_db)) -> CheckpointRegistry:
    return CheckpointRegistry(EventRepository(db))


def get_check_in_engine(
    db: AsyncSession = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
) -> CheckInEngine:
    return CheckInEngine(
        tokens,
        EventRepository(db),
        RegistrationRepository(db),
        ScanLogRepository(db),
    )


def get_team_service(
    db: AsyncSession = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
) -> TeamFormationService:
    return TeamFormationService(tokens, EventRepository(db), TeamRepository(db))


def get_scoring_service(
    db: AsyncSession = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
) -> ScoringService:
    return ScoringService(
        EventRepository(db), TeamRepository(db), ScoreRepository(db), tokens,
    )


def get_scan_export_service(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> ScanExportService:
    return ScanExportService(
        EventRepository(db), ScanLogRepository(db), settings.export_timezone,
    )
