"""
Course catalog persistence: `courses` plus the per-user `bucket_list` and
`favorite_courses` collections.
"""

from __future__ import annotations

from courselog.core.store import DataStore, Join, Search

SEARCH_COLUMNS = ("name", "location", "province", "description")
SEARCH_RESULT_COLUMNS = ("id", "name", "location", "province", "description", "created_at")


async def get_course_by_id(store: DataStore, course_id: str) -> dict | None:
    return await store.select_one("courses", filters={"id": course_id})


async def list_courses(store: DataStore, *, province: str | None = None) -> list[dict]:
    filters = {"province": province} if province else None
    return await store.select_many("courses", filters=filters, order_by="name")


async def list_province_values(store: DataStore) -> list[dict]:
    return await store.select_many("courses", columns=("province",), order_by="province")


async def search_courses(store: DataStore, term: str, *, limit: int = 10) -> list[dict]:
    return await store.select_many(
        "courses",
        columns=SEARCH_RESULT_COLUMNS,
        search=Search(columns=SEARCH_COLUMNS, term=term),
        limit=limit,
    )


async def list_course_ratings(store: DataStore, course_id: str) -> list[dict]:
    return await store.select_many(
        "course_reviews",
        filters={"course_id": course_id},
        columns=("rating",),
    )


COLLECTION_COURSE_JOIN = Join(
    table="courses",
    foreign_key="course_id",
    columns=("name", "location", "image_url"),
    alias="course",
)


async def list_collection(store: DataStore, table: str, user_id: str, *, order_by: str) -> list[dict]:
    return await store.select_many(
        table,
        filters={"user_id": user_id},
        columns=("id", "course_id", "created_at") + (("position",) if order_by == "position" else ()),
        join=COLLECTION_COURSE_JOIN,
        order_by=order_by,
        descending=order_by == "created_at",
    )


async def find_collection_entry(store: DataStore, table: str, *, user_id: str, course_id: str) -> dict | None:
    rows = await store.select_many(
        table,
        filters={"user_id": user_id, "course_id": course_id},
        columns=("id",),
        limit=1,
    )
    return rows[0] if rows else None


async def insert_collection_entry(store: DataStore, table: str, values: dict) -> dict:
    return await store.insert(table, values)


async def delete_collection_entry(store: DataStore, table: str, *, user_id: str, course_id: str) -> int:
    return await store.delete(table, filters={"user_id": user_id, "course_id": course_id})


async def last_favorite_position(store: DataStore, user_id: str) -> int:
    rows = await store.select_many(
        "favorite_courses",
        filters={"user_id": user_id},
        columns=("position",),
        order_by="position",
        descending=True,
        limit=1,
    )
    return int(rows[0].get("position") or 0) if rows else 0
