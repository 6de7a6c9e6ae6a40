"""Token Service — tests for issue/verify against live registrations.

Tests cover:
    - verify returns the claims of an active registration
    - Deleted, rejected or mismatched registrations stop validating
    - issue_for_registration stores the token as the QR code
"""

from uuid import uuid4

import pytest
from sqlalchemy import select

from eventgate.core.domain_types import RegistrationStatus, TokenFailure
from eventgate.core.errors import (
    InvalidTokenError, PolicyViolationError, ResourceNotFoundError,
)
from eventgate.models.registration import Registration


async def test_verify_returns_claims(token_service, register):
    registration, token = await register()
    claims = await token_service.verify(token)
    assert claims.registration_id == registration.id
    assert claims.participant_id == registration.user_id
    assert claims.event_id == registration.event_id


async def test_pending_registration_still_verifies(token_service, register):
    registration, token = await register(status=RegistrationStatus.PENDING)
    claims = await token_service.verify(token)
    assert claims.registration_id == registration.id


async def test_rejected_registration_is_unknown_subject(token_service, register):
    _, token = await register(status=RegistrationStatus.REJECTED)
    with pytest.raises(InvalidTokenError) as exc:
        await token_service.verify(token)
    assert exc.value.reason == TokenFailure.UNKNOWN_SUBJECT.value


async def test_deleted_registration_is_revoked(token_service, register, test_db):
    registration, token = await register()
    await test_db.delete(registration)
    await test_db.commit()

    with pytest.raises(InvalidTokenError) as exc:
        await token_service.verify(token)
    assert exc.value.reason == TokenFailure.UNKNOWN_SUBJECT.value


async def test_token_for_unknown_registration_is_rejected(token_service, event):
    token = token_service.issue(uuid4(), event.id, uuid4())
    with pytest.raises(InvalidTokenError):
        await token_service.verify(token)


async def test_mismatched_participant_is_rejected(token_service, register):
    registration, _ = await register()
    forged = token_service.issue(uuid4(), registration.event_id, registration.id)
    with pytest.raises(InvalidTokenError):
        await token_service.verify(forged)


async def test_tampered_token_is_rejected(token_service, register):
    _, token = await register()
    tampered = token[:-1] + ("A" if token[-1] != "A" else "B")
    with pytest.raises(InvalidTokenError) as exc:
        await token_service.verify(tampered)
    assert exc.value.reason == TokenFailure.SIGNATURE_MISMATCH.value


async def test_issue_for_registration_stores_qr_code(token_service, register, test_db):
    registration, _ = await register()
    registration_id = registration.id

    token = await token_service.issue_for_registration(registration_id)

    stored = (await test_db.execute(
        select(Registration.qr_code).where(Registration.id == registration_id),
    )).scalar_one()
    assert stored == token
    assert (await token_service.verify(token)).registration_id == registration_id


async def test_reissued_tokens_both_stay_valid(token_service, register):
    registration, _ = await register()
    first = await token_service.issue_for_registration(registration.id)
    second = await token_service.issue_for_registration(registration.id)
    assert first != second
    assert (await token_service.verify(first)).registration_id == registration.id
    assert (await token_service.verify(second)).registration_id == registration.id


async def test_issue_for_unknown_registration_is_not_found(token_service):
    with pytest.raises(ResourceNotFoundError):
        await token_service.issue_for_registration(uuid4())


async def test_issue_for_rejected_registration_is_refused(token_service, register):
    registration, _ = await register(status=RegistrationStatus.REJECTED)
    with pytest.raises(PolicyViolationError) as exc:
        await token_service.issue_for_registration(registration.id)
    assert exc.value.code == "REGISTRATION_REJECTED"
