"""
Auth security helpers: password hashing, access tokens and the credential
carrier a request hands to the identity service.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Mapping

import bcrypt
import jwt

from courselog.core.config import env_int, env_str, session_cookie_name


class AuthSecurityError(RuntimeError):
    pass


@dataclass(frozen=True)
class Credentials:
    """
    Opaque carrier of a request's cookies and Authorization header.
    """

    cookies: Mapping[str, str] = field(default_factory=dict)
    authorization: str | None = None

    def access_token(self) -> str | None:
        """
        Bearer token if an Authorization header is present, else the session
        cookie, else None. A malformed header raises AuthSecurityError.
        """
        raw = (self.authorization or "").strip()
        if raw:
            return _extract_bearer_token(raw)
        token = (self.cookies.get(session_cookie_name()) or "").strip()
        return token or None


def _extract_bearer_token(raw: str) -> str:
    parts = raw.split(" ", 1)
    if len(parts) != 2:
        raise AuthSecurityError("Invalid Authorization header format.")

    scheme, token = parts[0].strip().lower(), parts[1].strip()
    if scheme != "bearer" or not token:
        raise AuthSecurityError("Authorization must be: Bearer <token>.")
    return token


def jwt_secret() -> str:
    # Local default keeps development simple.
    # In production, set JWT_SECRET in environment.
    return env_str("JWT_SECRET", "dev-change-this-secret")


def jwt_algorithm() -> str:
    return env_str("JWT_ALG", "HS256")


def access_token_expire_minutes() -> int:
    return env_int("ACCESS_TOKEN_EXPIRE_MIN", 60)


def now_epoch_s() -> int:
    return int(time.time())


def hash_password(plain_password: str) -> str:
    password = (plain_password or "").encode("utf-8")
    if not password:
        raise AuthSecurityError("Password is empty.")
    return bcrypt.hashpw(password, bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, password_hash: str) -> bool:
    password = (plain_password or "").encode("utf-8")
    hashed = (password_hash or "").encode("utf-8")
    if not password or not hashed:
        return False
    try:
        return bcrypt.checkpw(password, hashed)
    except ValueError:
        return False


def build_access_token(*, user_id: str, email: str) -> str:
    issued_at = now_epoch_s()
    expires_at = issued_at + (access_token_expire_minutes() * 60)

    payload = {
        "sub": str(user_id),
        "email": email,
        "type": "access",
        "iat": issued_at,
        "exp": expires_at,
    }
    return jwt.encode(payload, jwt_secret(), algorithm=jwt_algorithm())


def decode_access_token(token: str) -> dict[str, Any]:
    raw = (token or "").strip()
    if not raw:
        raise AuthSecurityError("Access token is empty.")

    try:
        payload = jwt.decode(
            raw,
            jwt_secret(),
            algorithms=[jwt_algorithm()],
            options={"require": ["exp", "sub"]},
        )
    except jwt.ExpiredSignatureError as exc:
        raise AuthSecurityError("Access token has expired.") from exc
    except jwt.InvalidTokenError as exc:
        raise AuthSecurityError("Invalid access token.") from exc

    token_type = str(payload.get("type") or "").strip().lower()
    if token_type != "access":
        raise AuthSecurityError("Token is not an access token.")

    if not str(payload.get("sub") or "").strip():
        raise AuthSecurityError("Access token has no subject.")

    return payload
