"""
Review persistence (the `course_reviews` table).
"""

from __future__ import annotations

from datetime import date

from courselog.core.store import DataStore, Join

from .mapping import COURSE_RELATION

REVIEW_COLUMNS = ("id", "course_id", "rating", "review_text", "date_played")

COURSE_JOIN = Join(
    table="courses",
    foreign_key="course_id",
    columns=("name", "location"),
    alias=COURSE_RELATION,
)


async def list_reviews_for_user(store: DataStore, user_id: str) -> list[dict]:
    return await store.select_many(
        "course_reviews",
        filters={"user_id": user_id},
        columns=REVIEW_COLUMNS,
        join=COURSE_JOIN,
        order_by="date_played",
        descending=True,
    )


async def insert_review(
    store: DataStore,
    *,
    course_id: str,
    user_id: str,
    rating: int,
    review_text: str | None,
    date_played: date,
) -> dict:
    return await store.insert(
        "course_reviews",
        {
            "course_id": course_id,
            "user_id": user_id,
            "rating": rating,
            "review_text": review_text,
            "date_played": date_played,
        },
    )


async def list_reviews_for_course(store: DataStore, course_id: str) -> list[dict]:
    return await store.select_many(
        "course_reviews",
        filters={"course_id": course_id},
        order_by="created_at",
        descending=True,
    )


async def list_reviews_by_recency(store: DataStore) -> list[dict]:
    return await store.select_many(
        "course_reviews",
        columns=("id", "user_id", "course_id", "rating", "review_text", "date_played", "created_at"),
        order_by="created_at",
        descending=True,
    )


async def find_plays(
    store: DataStore,
    *,
    user_id: str,
    course_id: str,
    date_played: date | None = None,
) -> list[dict]:
    filters: dict = {"user_id": user_id, "course_id": course_id}
    if date_played is not None:
        filters["date_played"] = date_played
    return await store.select_many("course_reviews", filters=filters, columns=("id",), limit=1)


async def find_like(store: DataStore, *, review_id: str, user_id: str) -> dict | None:
    rows = await store.select_many(
        "review_likes",
        filters={"review_id": review_id, "user_id": user_id},
        columns=("id",),
        limit=1,
    )
    return rows[0] if rows else None


async def insert_like(store: DataStore, *, review_id: str, user_id: str) -> dict:
    return await store.insert("review_likes", {"review_id": review_id, "user_id": user_id})


async def delete_like(store: DataStore, *, review_id: str, user_id: str) -> int:
    return await store.delete("review_likes", filters={"review_id": review_id, "user_id": user_id})


async def list_likes(store: DataStore, review_id: str) -> list[dict]:
    return await store.select_many("review_likes", filters={"review_id": review_id}, columns=("user_id",))
