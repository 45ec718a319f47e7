"""
Profile persistence (the `profiles` table, keyed by user id).
"""

from __future__ import annotations

from courselog.core.store import DataStore

PROFILE_COLUMNS = ("id", "name", "image_url", "location")


async def get_profile_by_id(store: DataStore, user_id: str) -> dict | None:
    return await store.select_one(
        "profiles",
        filters={"id": user_id},
        columns=PROFILE_COLUMNS,
    )


async def upsert_profile(
    store: DataStore,
    *,
    user_id: str,
    name: str,
    image_url: str | None,
    location: str | None,
) -> dict:
    return await store.upsert(
        "profiles",
        {
            "id": user_id,
            "name": name,
            "image_url": image_url,
            "location": location,
        },
        conflict_key="id",
    )
