"""Token Signing — pure HS256 JWT signing and decoding of participant identity tokens.

Invariants:
    - Token is a compact HS256 JWT; claims carry the type marker, the identity triple,
      iat and a random jti
    - The signature covers header and payload exactly as transmitted, so any change to
      any character of the token fails verification
    - Secret never appears in the token; tokens carry no exp
    - decode_token raises InvalidTokenError with reason MALFORMED or SIGNATURE_MISMATCH;
      subject resolution (UNKNOWN_SUBJECT) is the service's job

Design Decisions:
    - python-jose for signing and verification, same library as the auth layer of the
      visitor API
    - The signature segment must be canonical base64url: the decoder ignores unused
      trailing bits and stray characters, which would let a mutated signature pass
    - Random jti per issuance: re-issuing yields a distinct but equally valid token
"""

import binascii
import secrets
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable
from uuid import UUID

from jose import JWTError, jws, jwt
from jose.exceptions import JWSError
from jose.utils import base64url_decode, base64url_encode

from eventgate.core.domain_types import (
    TOKEN_TYPE, EventId, RegistrationId, TokenFailure, UserId,
)
from eventgate.core.errors import InvalidTokenError

ALGORITHM = "HS256"


@dataclass(frozen=True)
class TokenClaims:
    """Identity triple carried by a token."""
    participant_id: UserId
    event_id: EventId
    registration_id: RegistrationId
    issued_at: datetime


def sign_token(
    secret: bytes,
    participant_id: UUID,
    event_id: UUID,
    registration_id: UUID,
    now: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    nonce: Callable[[], str] = lambda: secrets.token_hex(8),
) -> str:
    """Issue a signed token for the identity triple."""
    claims = {
        "typ": TOKEN_TYPE,
        "pid": str(participant_id),
        "eid": str(event_id),
        "rid": str(registration_id),
        "iat": int(now().timestamp()),
        "jti": nonce(),
    }
    return jwt.encode(claims, secret, algorithm=ALGORITHM)


def _canonical_signature(token: str) -> bool:
    signature = token.rsplit(".", 1)[1].encode("ascii")
    try:
        return base64url_encode(base64url_decode(signature)) == signature
    except (binascii.Error, ValueError):
        return False


def _failure_reason(secret: bytes, token: str) -> TokenFailure:
    """A token jose rejected: bad signature, or signed but unreadable."""
    try:
        jws.verify(token, secret, algorithms=[ALGORITHM])
    except JWSError:
        return TokenFailure.SIGNATURE_MISMATCH
    return TokenFailure.MALFORMED


def decode_token(secret: bytes, token: str) -> TokenClaims:
    """Check signature and shape. Pure: does not consult the store."""
    if not isinstance(token, str) or not token.isascii():
        raise InvalidTokenError(TokenFailure.MALFORMED.value)
    token = token.strip()
    if token.count(".") != 2 or not all(token.split(".")):
        raise InvalidTokenError(TokenFailure.MALFORMED.value)

    try:
        jwt.get_unverified_header(token)
    except JWTError:
        raise InvalidTokenError(TokenFailure.MALFORMED.value)
    if not _canonical_signature(token):
        raise InvalidTokenError(TokenFailure.SIGNATURE_MISMATCH.value)

    try:
        payload = jwt.decode(token, secret, algorithms=[ALGORITHM])
    except JWTError:
        raise InvalidTokenError(_failure_reason(secret, token).value)

    try:
        if payload.get("typ") != TOKEN_TYPE:
            raise ValueError("unexpected token type")
        return TokenClaims(
            participant_id=UserId(UUID(payload["pid"])),
            event_id=EventId(UUID(payload["eid"])),
            registration_id=RegistrationId(UUID(payload["rid"])),
            issued_at=datetime.fromtimestamp(int(payload["iat"]), timezone.utc),
        )
    except (ValueError, KeyError, TypeError, AttributeError):
        # Signed by us but unreadable: treat as malformed, never as valid
        raise InvalidTokenError(TokenFailure.MALFORMED.value)
