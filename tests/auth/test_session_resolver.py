"""Tests for the session resolver and the strict identity lookup."""

import logging

import jwt
import pytest

from courselog.auth import schemas, security, service
from courselog.core.errors import AuthError


def _cookies(token):
    return security.Credentials(cookies={"courselog_session": token})


def test_anonymous_request_resolves_to_none():
    assert service.resolve_user_id(security.Credentials()) is None


def test_valid_cookie_resolves_user_id(token_for):
    assert service.resolve_user_id(_cookies(token_for("u1"))) == "u1"


def test_bearer_header_takes_precedence_over_cookie(token_for):
    credentials = security.Credentials(
        cookies={"courselog_session": token_for("u2")},
        authorization=f"Bearer {token_for('u1')}",
    )
    assert service.resolve_user_id(credentials) == "u1"


def test_garbage_token_resolves_to_none_and_logs(caplog):
    with caplog.at_level(logging.WARNING, logger="courselog.auth.service"):
        assert service.resolve_user_id(_cookies("not-a-jwt")) is None
    assert "session_resolve_failed" in caplog.text


def test_expired_token_resolves_to_none():
    expired = jwt.encode(
        {"sub": "u1", "type": "access", "exp": 1},
        security.jwt_secret(),
        algorithm=security.jwt_algorithm(),
    )
    assert service.resolve_user_id(_cookies(expired)) is None


def test_malformed_authorization_header_resolves_to_none():
    assert service.resolve_user_id(security.Credentials(authorization="Token abc")) is None


def test_token_signed_with_other_secret_is_rejected():
    forged = jwt.encode({"sub": "u1", "type": "access", "exp": 9999999999}, "some-other-secret-of-decent-length", algorithm="HS256")
    with pytest.raises(security.AuthSecurityError):
        service.get_session(_cookies(forged))


async def test_identity_none_when_anonymous(store):
    assert await service.get_identity(store, security.Credentials()) is None


async def test_identity_from_store(store, token_for):
    identity = await service.get_identity(store, _cookies(token_for("u1")))
    assert identity.id == "u1"
    assert identity.email == "alice@example.com"


async def test_identity_raises_on_invalid_token(store):
    with pytest.raises(AuthError):
        await service.get_identity(store, _cookies("not-a-jwt"))


async def test_identity_raises_when_store_fails(store, token_for):
    store.fail_with = "timeout"
    with pytest.raises(AuthError):
        await service.get_identity(store, _cookies(token_for("u1")))


async def test_identity_raises_for_unknown_subject(store, token_for):
    with pytest.raises(AuthError):
        await service.get_identity(store, _cookies(token_for("ghost")))


def test_password_hash_roundtrip():
    hashed = security.hash_password("s3cret-pass")
    assert security.verify_password("s3cret-pass", hashed)
    assert not security.verify_password("wrong", hashed)
    assert not security.verify_password("s3cret-pass", "not-a-hash")


def _signed(payload):
    return jwt.encode(payload, security.jwt_secret(), algorithm=security.jwt_algorithm())


def test_token_without_expiry_resolves_to_none():
    assert service.resolve_user_id(_cookies(_signed({"sub": "u1", "type": "access"}))) is None


def test_token_without_subject_resolves_to_none():
    assert service.resolve_user_id(_cookies(_signed({"type": "access", "exp": 9999999999}))) is None


async def test_identity_raises_for_token_without_expiry(store):
    with pytest.raises(AuthError):
        await service.get_identity(store, _cookies(_signed({"sub": "u1", "type": "access"})))


def test_session_carries_only_the_user_id(token_for):
    session = service.get_session(_cookies(token_for("u1")))
    assert session == schemas.Session(user_id="u1")
