"""Unit tests for JWT access-token decoding."""

from datetime import UTC, datetime, timedelta

import pytest
from jose import jwt

from config.settings import settings
from src.tw_common.errors import InvalidCredentialsError
from src.tw_gateway.auth.jwt_handler import decode_token


def _token(sub: str = "u-1", token_type: str = "access", expires_in: int = 300, secret=None) -> str:
    now = datetime.now(UTC)
    payload = {"sub": sub, "type": token_type, "iat": now, "exp": now + timedelta(seconds=expires_in)}
    return jwt.encode(payload, secret or settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def test_decode_valid_access_token() -> None:
    payload = decode_token(_token("u-abc"))
    assert payload["sub"] == "u-abc"
    assert payload["type"] == "access"


def test_refresh_token_rejected_for_api_calls() -> None:
    with pytest.raises(InvalidCredentialsError):
        decode_token(_token(token_type="refresh"))


def test_expired_token_rejected() -> None:
    with pytest.raises(InvalidCredentialsError):
        decode_token(_token(expires_in=-10))


def test_wrong_secret_rejected() -> None:
    with pytest.raises(InvalidCredentialsError):
        decode_token(_token(secret="someone-elses-secret"))


def test_garbage_rejected() -> None:
    with pytest.raises(InvalidCredentialsError):
        decode_token("not.a.jwt")
