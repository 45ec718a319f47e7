"""
Auth API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response

from courselog.core.config import session_cookie_name, session_cookie_secure
from courselog.core.dependencies import get_store
from courselog.core.store import DataStore

from . import dependencies, schemas, security, service

router = APIRouter(prefix="/auth")


def _set_session_cookie(response: Response, access_token: str) -> None:
    response.set_cookie(
        key=session_cookie_name(),
        value=access_token,
        max_age=security.access_token_expire_minutes() * 60,
        httponly=True,
        secure=session_cookie_secure(),
        samesite="lax",
    )


@router.post("/register", response_model=schemas.AuthResponse, status_code=201)
async def register(
    payload: schemas.RegisterRequest,
    response: Response,
    store: DataStore = Depends(get_store),
) -> schemas.AuthResponse:
    result = await service.register(store, payload)
    _set_session_cookie(response, result.access_token)
    return result


@router.post("/login", response_model=schemas.AuthResponse)
async def login(
    payload: schemas.LoginRequest,
    response: Response,
    store: DataStore = Depends(get_store),
) -> schemas.AuthResponse:
    result = await service.login(store, payload)
    _set_session_cookie(response, result.access_token)
    return result


@router.post("/logout")
async def logout(response: Response) -> dict[str, bool]:
    # Tokens are stateless; dropping the cookie ends the browser session.
    response.delete_cookie(key=session_cookie_name())
    return {"ok": True}


@router.get("/session", response_model=schemas.SessionResponse)
async def session(
    user_id: str | None = Depends(dependencies.get_session_user_id),
) -> schemas.SessionResponse:
    return schemas.SessionResponse(user_id=user_id)
