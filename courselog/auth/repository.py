"""
Identity persistence helpers (the `users` table).
"""

from __future__ import annotations

import uuid

from courselog.core.store import DataStore

USER_COLUMNS = ("id", "email", "password_hash", "created_at")


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


async def create_user(store: DataStore, *, email: str, password_hash: str) -> dict:
    return await store.insert(
        "users",
        {
            "id": str(uuid.uuid4()),
            "email": normalize_email(email),
            "password_hash": password_hash,
        },
    )


async def get_user_by_email(store: DataStore, email: str) -> dict | None:
    return await store.select_one(
        "users",
        filters={"email": normalize_email(email)},
        columns=USER_COLUMNS,
    )


async def get_user_by_id(store: DataStore, user_id: str) -> dict | None:
    return await store.select_one(
        "users",
        filters={"id": user_id},
        columns=USER_COLUMNS,
    )
