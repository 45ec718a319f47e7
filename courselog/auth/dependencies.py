"""
Auth dependencies for FastAPI routes.
"""

from __future__ import annotations

from fastapi import Depends, Request

from courselog.core.dependencies import get_store
from courselog.core.errors import AuthError
from courselog.core.store import DataStore

from . import schemas, security, service


def get_credentials(request: Request) -> security.Credentials:
    return security.Credentials(
        cookies=dict(request.cookies),
        authorization=request.headers.get("authorization"),
    )


def get_session_user_id(
    credentials: security.Credentials = Depends(get_credentials),
) -> str | None:
    return service.resolve_user_id(credentials)


async def get_optional_identity(
    credentials: security.Credentials = Depends(get_credentials),
    store: DataStore = Depends(get_store),
) -> schemas.Identity | None:
    return await service.get_identity(store, credentials)


async def require_identity(
    identity: schemas.Identity | None = Depends(get_optional_identity),
) -> schemas.Identity:
    if identity is None:
        raise AuthError("Authentication required.")
    return identity
