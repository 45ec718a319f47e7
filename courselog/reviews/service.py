"""
Review business logic.

Writes (`log_play_and_review`, `log_round`, `mark_course_as_played`,
`toggle_review_like`) raise StoreError to the router. The read helpers that
back page widgets (`get_course_reviews`, `get_recent_reviews`,
`has_user_played_course`, `get_review_likes_count`) log a store failure and
return an empty value instead.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone

from courselog.core.errors import QueryError, StoreError
from courselog.core.store import DataStore
from courselog.courses import repository as course_repository
from courselog.profiles import repository as profile_repository

from . import repository, schemas
from .mapping import to_review_view

logger = logging.getLogger(__name__)

RECENT_LIMIT = 5


def _today() -> date:
    return datetime.now(timezone.utc).date()


async def get_user_reviews(store: DataStore, user_id: str) -> list[dict]:
    """
    All of a user's reviews, most recently played first, each with its
    course's name and location under `course`. Not paginated.
    """
    try:
        rows = await repository.list_reviews_for_user(store, user_id)
    except StoreError as exc:
        raise QueryError(f"Review listing failed for user {user_id}.") from exc
    return [to_review_view(row) for row in rows]


async def log_play_and_review(
    store: DataStore,
    *,
    course_id: str,
    user_id: str,
    payload: schemas.ReviewCreateRequest,
) -> dict:
    date_played = payload.date_played or _today()
    row = await repository.insert_review(
        store,
        course_id=course_id,
        user_id=user_id,
        rating=payload.rating,
        review_text=payload.review_text,
        date_played=date_played,
    )
    logger.info("review_logged user_id=%s course_id=%s", user_id, course_id)
    return row


async def log_round(
    store: DataStore,
    *,
    course_id: str,
    user_id: str,
    payload: schemas.RoundLogRequest,
) -> dict:
    """
    Record a round. Rating is optional and stored as 0 when omitted; notes
    become the review text.
    """
    row = await repository.insert_review(
        store,
        course_id=course_id,
        user_id=user_id,
        rating=payload.rating if payload.rating is not None else schemas.UNRATED,
        review_text=payload.notes,
        date_played=payload.played_on or _today(),
    )
    logger.info("round_logged user_id=%s course_id=%s", user_id, course_id)
    return row


async def mark_course_as_played(
    store: DataStore,
    *,
    course_id: str,
    user_id: str,
    date_played: date | None = None,
) -> tuple[dict | None, bool]:
    """
    Insert an unrated play for the date unless one exists already.

    Returns (row, created); row is None when the date was already marked.
    """
    when = date_played or _today()
    existing = await repository.find_plays(store, user_id=user_id, course_id=course_id, date_played=when)
    if existing:
        return None, False

    row = await repository.insert_review(
        store,
        course_id=course_id,
        user_id=user_id,
        rating=schemas.UNRATED,
        review_text=None,
        date_played=when,
    )
    logger.info("course_marked_played user_id=%s course_id=%s date=%s", user_id, course_id, when)
    return row, True


async def has_user_played_course(store: DataStore, *, course_id: str, user_id: str) -> bool:
    try:
        rows = await repository.find_plays(store, user_id=user_id, course_id=course_id)
    except StoreError:
        logger.exception("played_check_failed user_id=%s course_id=%s", user_id, course_id)
        return False
    return bool(rows)


async def get_course_reviews(store: DataStore, course_id: str) -> list[dict]:
    try:
        return await repository.list_reviews_for_course(store, course_id)
    except StoreError:
        logger.exception("course_reviews_fetch_failed course_id=%s", course_id)
        return []


def _has_content(row: dict) -> bool:
    return (row.get("rating") or 0) > schemas.UNRATED and bool(str(row.get("review_text") or "").strip())


async def _recent_review_view(store: DataStore, row: dict, viewer_id: str | None) -> dict:
    likes = await repository.list_likes(store, str(row["id"]))
    profile = await profile_repository.get_profile_by_id(store, str(row["user_id"]))
    course = await course_repository.get_course_by_id(store, str(row["course_id"]))

    view = dict(row)
    view["likes_count"] = len(likes)
    view["user_has_liked"] = (
        any(like.get("user_id") == viewer_id for like in likes) if viewer_id else False
    )
    view["user"] = {"name": profile.get("name"), "image": profile.get("image_url")} if profile else None
    view["course"] = (
        {"id": course.get("id"), "name": course.get("name"), "location": course.get("location")}
        if course
        else None
    )
    return view


async def get_recent_reviews(
    store: DataStore,
    *,
    limit: int = RECENT_LIMIT,
    viewer_id: str | None = None,
) -> list[dict]:
    """
    Newest reviews that carry both a rating and text, each with its like
    count, author profile and course summary. `user_has_liked` is only ever
    true for a signed-in viewer.
    """
    try:
        rows = await repository.list_reviews_by_recency(store)
        rows = [row for row in rows if _has_content(row)][:limit]
        return [await _recent_review_view(store, row, viewer_id) for row in rows]
    except StoreError:
        logger.exception("recent_reviews_fetch_failed")
        return []


async def toggle_review_like(store: DataStore, *, review_id: str, user_id: str) -> bool:
    """
    Like the review, or remove an existing like. Returns the new state.
    """
    existing = await repository.find_like(store, review_id=review_id, user_id=user_id)
    if existing is not None:
        await repository.delete_like(store, review_id=review_id, user_id=user_id)
        logger.info("review_unliked review_id=%s user_id=%s", review_id, user_id)
        return False

    await repository.insert_like(store, review_id=review_id, user_id=user_id)
    logger.info("review_liked review_id=%s user_id=%s", review_id, user_id)
    return True


async def get_review_likes_count(store: DataStore, review_id: str) -> int:
    try:
        return len(await repository.list_likes(store, review_id))
    except StoreError:
        logger.exception("review_likes_count_failed review_id=%s", review_id)
        return 0
