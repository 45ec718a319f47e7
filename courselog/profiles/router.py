"""
Profile API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from courselog.auth import dependencies as auth_dependencies
from courselog.auth import schemas as auth_schemas
from courselog.auth import security
from courselog.core.dependencies import get_store
from courselog.core.store import DataStore

from . import schemas, service

router = APIRouter()


@router.get("/me", response_model=schemas.UserView | None)
async def get_me(
    credentials: security.Credentials = Depends(auth_dependencies.get_credentials),
    store: DataStore = Depends(get_store),
) -> schemas.UserView | None:
    return await service.get_current_user(store, credentials)


@router.put("/me/profile", response_model=schemas.UserView)
async def put_profile(
    payload: schemas.ProfileUpdateRequest,
    identity: auth_schemas.Identity = Depends(auth_dependencies.require_identity),
    store: DataStore = Depends(get_store),
) -> schemas.UserView:
    return await service.complete_profile(store, identity, payload)
