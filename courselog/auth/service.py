"""
Identity service: accounts, sessions and identities.

Two lookups with deliberately different failure policies:
- `resolve_user_id` is tolerant. Any session failure is logged and reported
  as "not authenticated" (None).
- `get_identity` is strict. A carried but unusable credential raises
  AuthError; only a request with no credential at all is anonymous.
"""

from __future__ import annotations

import logging

from fastapi import HTTPException, status

from courselog.core.errors import AuthError, StoreError
from courselog.core.store import DataStore

from . import repository, schemas, security

logger = logging.getLogger(__name__)


def _to_user_response(user_row: dict) -> schemas.UserResponse:
    return schemas.UserResponse(
        id=str(user_row["id"]),
        email=str(user_row["email"]),
    )


def _auth_response(user_row: dict) -> schemas.AuthResponse:
    access_token = security.build_access_token(
        user_id=str(user_row["id"]),
        email=str(user_row["email"]),
    )
    return schemas.AuthResponse(user=_to_user_response(user_row), access_token=access_token)


async def register(store: DataStore, payload: schemas.RegisterRequest) -> schemas.AuthResponse:
    existing = await repository.get_user_by_email(store, payload.email)
    if existing is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email is already registered.",
        )

    password_hash = security.hash_password(payload.password)
    user_row = await repository.create_user(store, email=payload.email, password_hash=password_hash)
    logger.info("user_registered user_id=%s", user_row["id"])
    return _auth_response(user_row)


async def login(store: DataStore, payload: schemas.LoginRequest) -> schemas.AuthResponse:
    user_row = await repository.get_user_by_email(store, payload.email)
    if user_row is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password.",
        )

    is_valid = security.verify_password(payload.password, str(user_row.get("password_hash") or ""))
    if not is_valid:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password.",
        )

    return _auth_response(user_row)


def get_session(credentials: security.Credentials) -> schemas.Session | None:
    """
    Validate the session carried by `credentials`.

    Returns None when no token is carried; raises AuthSecurityError when a
    token is carried but malformed, forged or expired.
    """
    token = credentials.access_token()
    if token is None:
        return None

    payload = security.decode_access_token(token)
    return schemas.Session(user_id=str(payload["sub"]))


def resolve_user_id(credentials: security.Credentials) -> str | None:
    try:
        session = get_session(credentials)
    except security.AuthSecurityError as exc:
        logger.warning("session_resolve_failed reason=%s", exc)
        return None
    return session.user_id if session is not None else None


async def get_identity(store: DataStore, credentials: security.Credentials) -> schemas.Identity | None:
    try:
        session = get_session(credentials)
    except security.AuthSecurityError as exc:
        raise AuthError(str(exc)) from exc
    if session is None:
        return None

    try:
        user_row = await repository.get_user_by_id(store, session.user_id)
    except StoreError as exc:
        raise AuthError("Identity lookup failed.") from exc
    if user_row is None:
        raise AuthError("Session subject no longer exists.")

    return schemas.Identity(id=str(user_row["id"]), email=str(user_row["email"]))
