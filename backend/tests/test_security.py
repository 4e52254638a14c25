from __future__ import annotations

import datetime as dt
import hashlib

import pytest
from jose import jwt

from wildway.core.exceptions import InvalidTokenError
from wildway.core.security import TokenService, hash_password, verify_password

SECRET = "unit-test-secret-key-0123456789abcdef"


def _service(**overrides) -> TokenService:  # noqa: ANN003
    params = {"expires_minutes": 30, "reset_expires_minutes": 10}
    params.update(overrides)
    return TokenService(SECRET, **params)


def test_issued_token_verifies_and_carries_user_and_issue_time() -> None:
    service = _service()
    issued_at = dt.datetime.now(dt.timezone.utc).replace(microsecond=0)
    token = service.issue("user-42", issued_at=issued_at)

    claims = service.verify(token)
    assert claims.user_id == "user-42"
    assert claims.issued_at == int(issued_at.timestamp())


def test_expired_token_is_rejected() -> None:
    service = _service(expires_minutes=1)
    token = service.issue("user-1", issued_at=dt.datetime.now(dt.timezone.utc) - dt.timedelta(minutes=5))

    with pytest.raises(InvalidTokenError) as exc_info:
        service.verify(token)
    assert exc_info.value.status_code == 401


def test_token_signed_with_another_secret_is_rejected() -> None:
    forged = TokenService("another-secret-key-0123456789abcdef", expires_minutes=30).issue("user-1")

    with pytest.raises(InvalidTokenError):
        _service().verify(forged)


@pytest.mark.parametrize("garbage", ["", "not-a-jwt", "a.b.c", None, 12345])
def test_malformed_input_raises_invalid_token_only(garbage) -> None:  # noqa: ANN001
    with pytest.raises(InvalidTokenError):
        _service().verify(garbage)


def test_token_without_subject_is_rejected() -> None:
    now = dt.datetime.now(dt.timezone.utc)
    token = jwt.encode({"iat": int(now.timestamp()), "exp": now + dt.timedelta(minutes=5)}, SECRET, algorithm="HS256")

    with pytest.raises(InvalidTokenError):
        _service().verify(token)


def test_reset_secret_is_random_hashed_and_short_lived() -> None:
    service = _service(reset_expires_minutes=10)
    before = dt.datetime.now(dt.timezone.utc)

    first = service.generate_reset_secret()
    second = service.generate_reset_secret()

    assert first.raw != second.raw
    assert len(first.raw) == 64
    assert first.hashed == hashlib.sha256(first.raw.encode()).hexdigest()
    assert first.hashed != first.raw
    assert service.hash_reset_secret(first.raw) == first.hashed
    assert before + dt.timedelta(minutes=9) < first.expires_at <= before + dt.timedelta(minutes=10, seconds=5)


def test_password_hash_round_trip() -> None:
    hashed = hash_password("pass1234")

    assert hashed != "pass1234"
    assert verify_password("pass1234", hashed)
    assert not verify_password("wrong-pass", hashed)
    assert not verify_password("pass1234", None)
