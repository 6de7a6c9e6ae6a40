"""Error Hierarchy — tests for codes, HTTP statuses and the response envelope."""

from eventgate.core.errors import (
    ConflictError, DatabaseError, ErrorCategory, ErrorContext, InvalidTokenError,
    PermissionDeniedError, PolicyViolationError, ResourceNotFoundError,
    ScoreValidationError, UnknownCheckpointError,
)


def test_http_statuses():
    assert InvalidTokenError("malformed").http_status == 400
    assert ResourceNotFoundError("Event", "x").http_status == 404
    assert ConflictError("dup").http_status == 409
    assert PolicyViolationError("no").http_status == 422
    assert UnknownCheckpointError("Lunch").http_status == 422
    assert ScoreValidationError("bad").http_status == 400
    assert PermissionDeniedError("no").http_status == 403
    assert DatabaseError("down", "execute").http_status == 503


def test_only_database_errors_are_retryable():
    assert DatabaseError("down", "execute").retryable
    assert not InvalidTokenError("malformed").retryable
    assert not ConflictError("dup").retryable


def test_invalid_token_hides_reason_from_response():
    exc = InvalidTokenError("signature-mismatch", ErrorContext(event_id="e1"))
    body = exc.to_response()["error"]
    assert body["code"] == "INVALID_TOKEN"
    assert body["message"] == "Invalid or tampered QR code"
    assert "signature-mismatch" not in str(body)
    assert body["context"]["event_id"] == "e1"
    assert exc.reason == "signature-mismatch"


def test_unknown_checkpoint_carries_checkpoint_in_context():
    body = UnknownCheckpointError("Lunch").to_response()["error"]
    assert body["code"] == "UNKNOWN_CHECKPOINT"
    assert body["context"]["checkpoint"] == "Lunch"


def test_response_context_carries_only_identifiers():
    body = ConflictError("dup", context=ErrorContext(team_id="t1")).to_response()["error"]
    assert set(body["context"]) == {"event_id", "registration_id", "team_id", "checkpoint"}
    assert body["category"] in {c.value for c in ErrorCategory}
    assert "internal" not in {c.value for c in ErrorCategory}
