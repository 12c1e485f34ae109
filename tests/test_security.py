# File: tests/test_security.py

from datetime import timedelta

import jwt
import pytest
from pydantic import ValidationError as PydanticValidationError

from todo_api.core.config import Settings
from todo_api.core.exceptions import UnauthorizedError
from todo_api.core.security import (
    ALGORITHM,
    SECRET_KEY,
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)


def test_hash_and_verify_password():
    hashed = hash_password("secret1")
    assert hashed != "secret1"
    assert verify_password("secret1", hashed)
    assert not verify_password("secret2", hashed)


def test_same_password_hashes_differently():
    assert hash_password("secret1") != hash_password("secret1")


def test_verify_against_garbage_hash_is_false():
    assert not verify_password("secret1", "plain-text")


def test_token_roundtrip():
    token = create_access_token("some-user-id")
    assert decode_access_token(token) == "some-user-id"


def test_token_carries_expiry():
    token = create_access_token("u", expires_delta=timedelta(minutes=5))
    payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    assert payload["exp"] - payload["iat"] == 300


def test_expired_token_rejected():
    token = create_access_token("u", expires_delta=timedelta(seconds=-1))
    with pytest.raises(UnauthorizedError):
        decode_access_token(token)


def test_tampered_token_rejected():
    token = create_access_token("u")
    header, payload, signature = token.split(".")
    tampered = ".".join([header, payload, signature[::-1]])
    with pytest.raises(UnauthorizedError):
        decode_access_token(tampered)


def test_token_without_subject_rejected():
    token = jwt.encode({"exp": 9999999999}, SECRET_KEY, algorithm=ALGORITHM)
    with pytest.raises(UnauthorizedError):
        decode_access_token(token)


def test_short_secret_key_is_refused():
    with pytest.raises(PydanticValidationError):
        Settings(secret_key="too-short")


def test_cors_origins_from_comma_separated_string():
    s = Settings(backend_cors_origins="http://a.test, http://b.test")
    assert s.backend_cors_origins == ["http://a.test", "http://b.test"]
