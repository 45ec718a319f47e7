"""
Course business logic.

Scope:
- single-course lookup (returned exactly as stored)
- catalog listing and province facets
- free-text search with rating enrichment and relevance ranking
- per-user bucket list and favorites
"""

from __future__ import annotations

import logging

from courselog.core.errors import NotFoundError, QueryError, StoreError
from courselog.core.store import DataStore

from . import repository, schemas

logger = logging.getLogger(__name__)

SEARCH_LIMIT = 10

BUCKET_LIST = "bucket_list"
FAVORITES = "favorite_courses"


async def get_course_by_id(store: DataStore, course_id: str) -> dict:
    """
    Fetch one course row unchanged. Missing rows and failed queries both
    raise NotFoundError.
    """
    clean_id = (course_id or "").strip()
    if not clean_id:
        raise NotFoundError("Course id is empty.")

    try:
        row = await repository.get_course_by_id(store, clean_id)
    except StoreError as exc:
        raise NotFoundError(f"Course query failed for {clean_id}.") from exc
    if row is None:
        raise NotFoundError(f"Course {clean_id} not found.")
    return row


async def list_courses(store: DataStore, *, province: str | None = None) -> list[dict]:
    try:
        return await repository.list_courses(store, province=(province or "").strip() or None)
    except StoreError as exc:
        raise QueryError("Course listing failed.") from exc


async def list_provinces(store: DataStore) -> list[str]:
    try:
        rows = await repository.list_province_values(store)
    except StoreError as exc:
        raise QueryError("Province listing failed.") from exc

    seen: set[str] = set()
    provinces: list[str] = []
    for row in rows:
        province = row.get("province")
        if province and province not in seen:
            seen.add(province)
            provinces.append(province)
    return sorted(provinces)


async def get_course_average_rating(store: DataStore, course_id: str) -> tuple[float, int]:
    """
    Mean rating and review count for a course; (0.0, 0) when unrated.
    """
    rows = await repository.list_course_ratings(store, course_id)
    # Rating 0 is an unrated play and does not count towards the average.
    ratings = [float(row["rating"]) for row in rows if row.get("rating")]
    if not ratings:
        return 0.0, 0
    return sum(ratings) / len(ratings), len(ratings)


def score_relevance(course: dict, term: str) -> int:
    name = str(course.get("name") or "").lower()
    location = str(course.get("location") or "").lower()
    province = str(course.get("province") or "").lower()
    description = str(course.get("description") or "").lower()

    score = 0
    if name == term:
        score += 100
    elif location == term:
        score += 90
    elif province == term:
        score += 80

    if name.startswith(term):
        score += 50
    elif location.startswith(term):
        score += 40
    elif province.startswith(term):
        score += 30

    if term in name:
        score += 20
    if term in location:
        score += 15
    if term in province:
        score += 10
    if term in description:
        score += 5
    return score


async def _search_result(store: DataStore, course: dict, term: str) -> schemas.CourseSearchResult:
    base = {
        "id": str(course["id"]),
        "name": str(course.get("name") or ""),
        "location": course.get("location"),
        "province": course.get("province"),
    }
    try:
        average, total = await get_course_average_rating(store, base["id"])
    except StoreError:
        logger.exception("course_search_enrich_failed course_id=%s", base["id"])
        return schemas.CourseSearchResult(**base)

    return schemas.CourseSearchResult(
        **base,
        average_rating=round(average, 1),
        total_reviews=total,
        relevance_score=score_relevance(course, term),
    )


async def search_courses(store: DataStore, query: str) -> list[schemas.CourseSearchResult]:
    term = (query or "").strip().lower()
    if not term:
        return []

    try:
        courses = await repository.search_courses(store, term, limit=SEARCH_LIMIT)
    except StoreError as exc:
        raise QueryError("Course search failed.") from exc

    results = [await _search_result(store, course, term) for course in courses]
    return sorted(results, key=lambda r: r.relevance_score, reverse=True)


def _collection_view(row: dict) -> dict:
    view = {"id": row.get("id"), "course_id": row.get("course_id"), "course": row.get("course")}
    if "position" in row:
        view["position"] = row["position"]
    return view


async def get_bucket_list(store: DataStore, user_id: str) -> list[dict]:
    """Bucket-list entries, newest first, each with a course summary."""
    try:
        rows = await repository.list_collection(store, BUCKET_LIST, user_id, order_by="created_at")
    except StoreError as exc:
        raise QueryError(f"Bucket list fetch failed for user {user_id}.") from exc
    return [_collection_view(row) for row in rows]


async def is_in_bucket_list(store: DataStore, *, user_id: str, course_id: str) -> bool:
    try:
        entry = await repository.find_collection_entry(store, BUCKET_LIST, user_id=user_id, course_id=course_id)
    except StoreError:
        logger.exception("bucket_list_check_failed user_id=%s course_id=%s", user_id, course_id)
        return False
    return entry is not None


async def add_to_bucket_list(store: DataStore, *, user_id: str, course_id: str) -> dict:
    """
    Add a course to the user's bucket list. Adding a course that is already
    listed returns the existing entry.
    """
    existing = await repository.find_collection_entry(store, BUCKET_LIST, user_id=user_id, course_id=course_id)
    if existing is not None:
        return existing
    row = await repository.insert_collection_entry(
        store, BUCKET_LIST, {"user_id": user_id, "course_id": course_id}
    )
    logger.info("bucket_list_added user_id=%s course_id=%s", user_id, course_id)
    return row


async def remove_from_bucket_list(store: DataStore, *, user_id: str, course_id: str) -> bool:
    removed = await repository.delete_collection_entry(store, BUCKET_LIST, user_id=user_id, course_id=course_id)
    logger.info("bucket_list_removed user_id=%s course_id=%s removed=%d", user_id, course_id, removed)
    return removed > 0


async def get_favorites(store: DataStore, user_id: str) -> list[dict]:
    """Favorite courses in the user's chosen order."""
    try:
        rows = await repository.list_collection(store, FAVORITES, user_id, order_by="position")
    except StoreError as exc:
        raise QueryError(f"Favorites fetch failed for user {user_id}.") from exc
    return [_collection_view(row) for row in rows]


async def toggle_favorite(store: DataStore, *, user_id: str, course_id: str) -> bool:
    """
    Favorite the course, appended after the user's last favorite, or remove
    it when already a favorite. Returns the new state.
    """
    existing = await repository.find_collection_entry(store, FAVORITES, user_id=user_id, course_id=course_id)
    if existing is not None:
        await repository.delete_collection_entry(store, FAVORITES, user_id=user_id, course_id=course_id)
        logger.info("favorite_removed user_id=%s course_id=%s", user_id, course_id)
        return False

    position = await repository.last_favorite_position(store, user_id) + 1
    await repository.insert_collection_entry(
        store,
        FAVORITES,
        {"user_id": user_id, "course_id": course_id, "position": position},
    )
    logger.info("favorite_added user_id=%s course_id=%s position=%d", user_id, course_id, position)
    return True
