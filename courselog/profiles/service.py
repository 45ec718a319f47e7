"""
Profile business logic: the current user's view and onboarding.
"""

from __future__ import annotations

import logging

from courselog.auth import schemas as auth_schemas
from courselog.auth import security, service as auth_service
from courselog.core.errors import ProfileLookupError, StoreError
from courselog.core.store import DataStore

from . import repository, schemas

logger = logging.getLogger(__name__)


def to_user_view(identity: auth_schemas.Identity, profile_row: dict) -> schemas.UserView:
    return schemas.UserView(
        id=identity.id,
        email=identity.email,
        name=str(profile_row.get("name") or ""),
        image=profile_row.get("image_url"),
        location=profile_row.get("location"),
    )


async def get_user_view(store: DataStore, identity: auth_schemas.Identity) -> schemas.UserView:
    try:
        profile_row = await repository.get_profile_by_id(store, identity.id)
    except StoreError as exc:
        raise ProfileLookupError(f"Profile query failed for user {identity.id}.") from exc
    if profile_row is None:
        raise ProfileLookupError(f"No profile for user {identity.id}.")
    return to_user_view(identity, profile_row)


async def get_current_user(
    store: DataStore,
    credentials: security.Credentials,
) -> schemas.UserView | None:
    """
    Current user's view, or None for an anonymous request.

    Raises AuthError when the identity service fails and ProfileLookupError
    when an identity exists without a readable profile.
    """
    identity = await auth_service.get_identity(store, credentials)
    if identity is None:
        return None
    return await get_user_view(store, identity)


async def complete_profile(
    store: DataStore,
    identity: auth_schemas.Identity,
    payload: schemas.ProfileUpdateRequest,
) -> schemas.UserView:
    profile_row = await repository.upsert_profile(
        store,
        user_id=identity.id,
        name=payload.name.strip(),
        image_url=payload.image_url,
        location=payload.location,
    )
    logger.info("profile_upserted user_id=%s", identity.id)
    return to_user_view(identity, profile_row)
