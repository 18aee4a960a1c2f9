from datetime import datetime, timedelta, timezone

import jwt
import pytest
from fastapi import HTTPException

from edu_api.core import config
from edu_api.features.users.auth import create_access_token, signing_secret, verify_access_token


def test_round_trip_subject():
    payload = verify_access_token(create_access_token("01HXYZ"))
    assert payload["sub"] == "01HXYZ"
    assert payload["type"] == "access"


def test_expired_token_rejected():
    token = create_access_token("01HXYZ", expires_delta=timedelta(seconds=-5))
    with pytest.raises(HTTPException) as exc_info:
        verify_access_token(token)
    assert exc_info.value.status_code == 401
    assert exc_info.value.detail == "Token has expired"


def test_wrong_secret_rejected():
    token = jwt.encode(
        {"sub": "01HXYZ", "exp": datetime.now(timezone.utc) + timedelta(minutes=5), "type": "access"},
        "another-secret",
        algorithm=config.JWT_ALGORITHM,
    )
    with pytest.raises(HTTPException) as exc_info:
        verify_access_token(token)
    assert exc_info.value.status_code == 401


def test_non_access_token_rejected():
    token = jwt.encode(
        {"sub": "01HXYZ", "exp": datetime.now(timezone.utc) + timedelta(minutes=5), "type": "refresh"},
        config.JWT_SECRET,
        algorithm=config.JWT_ALGORITHM,
    )
    with pytest.raises(HTTPException) as exc_info:
        verify_access_token(token)
    assert exc_info.value.detail == "Invalid token type"


def test_garbage_rejected():
    with pytest.raises(HTTPException) as exc_info:
        verify_access_token("not-a-jwt")
    assert exc_info.value.status_code == 401


def test_missing_secret_refuses_to_sign(monkeypatch):
    monkeypatch.setattr(config, "JWT_SECRET", None)
    with pytest.raises(RuntimeError):
        signing_secret()
    with pytest.raises(RuntimeError):
        create_access_token("01HXYZ")
