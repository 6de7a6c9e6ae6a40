"""Token Routes — issue a registration's QR token and verify presented tokens."""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, status

from eventgate.api.deps import Caller, VERIFIER_ROLES, get_caller, get_token_service, require_roles
from eventgate.schemas.token import TokenClaimsResponse, TokenResponse, TokenVerifyRequest
from eventgate.services.token_service import TokenService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1", tags=["tokens"])


@router.post(
    "/registrations/{registration_id}/token",
    response_model=TokenResponse,
    status_code=status.HTTP_201_CREATED,
)
async def issue_token(
    registration_id: UUID,
    caller: Caller = Depends(get_caller),
    tokens: TokenService = Depends(get_token_service),
):
    """Issue (or reissue) the QR token for a registration."""
    token = await tokens.issue_for_registration(registration_id)
    return TokenResponse(registration_id=registration_id, token=token)


@router.post("/tokens/verify", response_model=TokenClaimsResponse)
async def verify_token(
    body: TokenVerifyRequest,
    caller: Caller = Depends(require_roles(*VERIFIER_ROLES)),
    tokens: TokenService = Depends(get_token_service),
):
    """Verify a scanned token. 400 INVALID_TOKEN for any failure."""
    claims = await tokens.verify(body.token)
    return TokenClaimsResponse(
        participant_id=claims.participant_id,
        event_id=claims.event_id,
        registration_id=claims.registration_id,
        issued_at=claims.issued_at,
    )
