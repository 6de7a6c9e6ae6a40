"""Token Service — issues and verifies participant identity tokens.

Invariants:
    - The signing secret is passed in once at construction, never read from globals
    - verify re-resolves the registration on every call: deleted or rejected
      registrations stop validating immediately
    - Every failure raises InvalidTokenError with the same client message; the
      internal reason is logged here and nowhere else

Design Decisions:
    - issue() is pure (delegates to core/tokens.py); only verify() and
      issue_for_registration() touch the store
"""

import logging
from uuid import UUID

from eventgate.core.domain_types import (
    ACTIVE_REGISTRATION_STATUSES, RegistrationStatus, TokenFailure,
)
from eventgate.core.errors import (
    ErrorContext, InvalidTokenError, PolicyViolationError, ResourceNotFoundError,
)
from eventgate.core.repository_protocols import RegistrationLike, RegistrationStore
from eventgate.core.tokens import TokenClaims, decode_token, sign_token

logger = logging.getLogger(__name__)


class TokenService:
    """Signs identity triples and resolves presented tokens back to registrations."""

    def __init__(self, secret: str, registrations: RegistrationStore):
        self._secret = secret.encode("utf-8")
        self.registrations = registrations

    def issue(self, participant_id: UUID, event_id: UUID, registration_id: UUID) -> str:
        return sign_token(self._secret, participant_id, event_id, registration_id)

    def decode(self, token: str) -> TokenClaims:
        """Signature and shape only. Raises InvalidTokenError."""
        return decode_token(self._secret, token)

    async def resolve(self, token: str) -> tuple[TokenClaims, RegistrationLike]:
        """Verify a token and return its claims with the live registration."""
        try:
            claims = self.decode(token)
        except InvalidTokenError as e:
            logger.warning("Token rejected", extra={"reason": e.reason})
            raise

        registration = await self.registrations.get(claims.registration_id)
        if (
            registration is None
            or registration.event_id != claims.event_id
            or registration.user_id != claims.participant_id
            or RegistrationStatus(registration.status) not in ACTIVE_REGISTRATION_STATUSES
        ):
            logger.warning(
                "Token rejected",
                extra={
                    "reason": TokenFailure.UNKNOWN_SUBJECT.value,
                    "registration_id": claims.registration_id,
                    "event_id": claims.event_id,
                },
            )
            raise InvalidTokenError(
                TokenFailure.UNKNOWN_SUBJECT.value,
                ErrorContext(event_id=str(claims.event_id)),
            )
        return claims, registration

    async def verify(self, token: str) -> TokenClaims:
        claims, _ = await self.resolve(token)
        return claims

    async def issue_for_registration(self, registration_id: UUID) -> str:
        """Issue a token for a stored registration and remember it as its QR code."""
        registration = await self.registrations.get(registration_id)
        if registration is None:
            raise ResourceNotFoundError("Registration", str(registration_id))
        if registration.status == RegistrationStatus.REJECTED.value:
            raise PolicyViolationError(
                "Rejected registrations cannot receive a QR code",
                "REGISTRATION_REJECTED",
                ErrorContext(registration_id=str(registration_id)),
            )
        token = self.issue(
            registration.user_id, registration.event_id, registration.id,
        )
        await self.registrations.store_token(registration.id, token)
        logger.info(
            "QR token issued",
            extra={"registration_id": registration.id, "event_id": registration.event_id},
        )
        return token
