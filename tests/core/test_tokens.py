"""Token Signing — verifies round trips, tamper detection and malformed inputs.

Tests cover:
    - sign_token/decode_token round-trip the identity triple
    - Every single-bit mutation of a token is rejected
    - Wrong secret is a signature mismatch, garbage is malformed
    - Re-issuing yields a distinct token that still decodes
"""

from datetime import datetime, timezone
from uuid import uuid4

import pytest
from jose import jws, jwt

from eventgate.core.domain_types import TokenFailure
from eventgate.core.errors import InvalidTokenError
from eventgate.core.tokens import ALGORITHM, decode_token, sign_token

SECRET = b"unit-test-secret-0123456789"


def _issue(**kwargs):
    pid, eid, rid = uuid4(), uuid4(), uuid4()
    return (pid, eid, rid), sign_token(SECRET, pid, eid, rid, **kwargs)


def test_round_trip_returns_identity_triple():
    (pid, eid, rid), token = _issue()
    claims = decode_token(SECRET, token)
    assert claims.participant_id == pid
    assert claims.event_id == eid
    assert claims.registration_id == rid


def test_issued_at_comes_from_clock():
    moment = datetime(2026, 3, 1, 9, 30, tzinfo=timezone.utc)
    _, token = _issue(now=lambda: moment)
    assert decode_token(SECRET, token).issued_at == moment


def test_fixed_nonce_and_clock_are_deterministic():
    pid, eid, rid = uuid4(), uuid4(), uuid4()
    moment = datetime(2026, 3, 1, tzinfo=timezone.utc)
    first = sign_token(SECRET, pid, eid, rid, now=lambda: moment, nonce=lambda: "n1")
    second = sign_token(SECRET, pid, eid, rid, now=lambda: moment, nonce=lambda: "n1")
    assert first == second


def test_reissue_yields_distinct_valid_tokens():
    pid, eid, rid = uuid4(), uuid4(), uuid4()
    first = sign_token(SECRET, pid, eid, rid)
    second = sign_token(SECRET, pid, eid, rid)
    assert first != second
    assert decode_token(SECRET, first).registration_id == rid
    assert decode_token(SECRET, second).registration_id == rid


def test_every_single_bit_mutation_is_rejected():
    _, token = _issue()
    for position, char in enumerate(token):
        for bit in range(7):
            mutated = token[:position] + chr(ord(char) ^ (1 << bit)) + token[position + 1:]
            with pytest.raises(InvalidTokenError):
                decode_token(SECRET, mutated)


def test_wrong_secret_is_signature_mismatch():
    _, token = _issue()
    with pytest.raises(InvalidTokenError) as exc:
        decode_token(b"another-secret-9876543210", token)
    assert exc.value.reason == TokenFailure.SIGNATURE_MISMATCH.value


@pytest.mark.parametrize("garbage", ["", "abc", "a.b.c", ".sig", "payload.", "é.x"])
def test_garbage_is_malformed(garbage):
    with pytest.raises(InvalidTokenError) as exc:
        decode_token(SECRET, garbage)
    assert exc.value.reason == TokenFailure.MALFORMED.value


def test_signed_but_unreadable_payload_is_malformed():
    token = jws.sign(b"not json at all", SECRET, algorithm=ALGORITHM)
    with pytest.raises(InvalidTokenError) as exc:
        decode_token(SECRET, token)
    assert exc.value.reason == TokenFailure.MALFORMED.value


def test_signed_payload_of_wrong_type_is_malformed():
    token = jws.sign(
        {"typ": "session", "pid": "x", "eid": "y", "rid": "z", "iat": 0},
        SECRET, algorithm=ALGORITHM,
    )
    with pytest.raises(InvalidTokenError) as exc:
        decode_token(SECRET, token)
    assert exc.value.reason == TokenFailure.MALFORMED.value


def test_client_message_is_identical_for_every_reason():
    _, token = _issue()
    messages = set()
    tampered = token[:-1] + ("A" if token[-1] != "A" else "B")
    for bad in ("abc", tampered, token + "x"):
        with pytest.raises(InvalidTokenError) as exc:
            decode_token(SECRET, bad)
        messages.add(exc.value.message)
    assert messages == {"Invalid or tampered QR code"}


def test_token_is_hs256_jwt_without_expiry():
    (pid, eid, rid), token = _issue()
    assert jwt.get_unverified_header(token)["alg"] == "HS256"
    claims = jwt.get_unverified_claims(token)
    assert claims["rid"] == str(rid)
    assert "exp" not in claims


def test_non_canonical_signature_alias_is_rejected():
    _, token = _issue()
    alphabet = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_"
    last = token[-1]
    # The final character of a 32-byte signature carries two unused bits
    alias = alphabet[alphabet.index(last) ^ 1]
    with pytest.raises(InvalidTokenError) as exc:
        decode_token(SECRET, token[:-1] + alias)
    assert exc.value.reason == TokenFailure.SIGNATURE_MISMATCH.value


def test_header_with_other_algorithm_is_rejected():
    _, token = _issue()
    claims = jwt.get_unverified_claims(token)
    forged = jwt.encode(claims, SECRET, algorithm="HS512")
    with pytest.raises(InvalidTokenError):
        decode_token(SECRET, forged)
