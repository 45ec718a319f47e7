"""
Review API endpoints.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, Query
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from courselog.auth import dependencies as auth_dependencies
from courselog.core.dependencies import get_store
from courselog.core.errors import AppError
from courselog.core.store import DataStore

from . import schemas, service

logger = logging.getLogger(__name__)

router = APIRouter()

AUTH_REQUIRED = {"error": "Authentication required"}


@router.get("/users/{user_id}/reviews", response_model=None)
async def get_user_reviews(user_id: str, store: DataStore = Depends(get_store)) -> list[dict] | JSONResponse:
    try:
        return await service.get_user_reviews(store, user_id)
    except Exception:
        logger.exception("review_list_failed user_id=%s", user_id)
        return JSONResponse(status_code=500, content={"error": "Failed to fetch reviews"})


@router.post("/courses/{course_id}/review", response_model=None)
async def post_review(
    course_id: str,
    body: dict[str, Any] | None = Body(default=None),
    user_id: str | None = Depends(auth_dependencies.get_session_user_id),
    store: DataStore = Depends(get_store),
) -> dict | JSONResponse:
    if not user_id:
        return JSONResponse(status_code=401, content=AUTH_REQUIRED)

    try:
        payload = schemas.ReviewCreateRequest.model_validate(body or {})
    except ValidationError:
        return JSONResponse(status_code=400, content={"error": "Rating is required"})

    try:
        row = await service.log_play_and_review(
            store,
            course_id=course_id,
            user_id=user_id,
            payload=payload,
        )
    except AppError:
        logger.exception("review_submit_failed course_id=%s user_id=%s", course_id, user_id)
        return JSONResponse(status_code=500, content={"error": "Failed to submit review"})

    return {"success": True, "message": "Review submitted successfully", "data": row}


@router.post("/courses/{course_id}/log", response_model=None)
async def post_round(
    course_id: str,
    body: dict[str, Any] | None = Body(default=None),
    user_id: str | None = Depends(auth_dependencies.get_session_user_id),
    store: DataStore = Depends(get_store),
) -> dict | JSONResponse:
    if not user_id:
        return JSONResponse(status_code=401, content=AUTH_REQUIRED)

    try:
        payload = schemas.RoundLogRequest.model_validate(body or {})
    except ValidationError:
        return JSONResponse(status_code=400, content={"error": "Invalid round data"})

    try:
        row = await service.log_round(store, course_id=course_id, user_id=user_id, payload=payload)
    except AppError:
        logger.exception("round_log_failed course_id=%s user_id=%s", course_id, user_id)
        return JSONResponse(status_code=500, content={"error": "Failed to log round"})

    return {"success": True, "message": "Round logged successfully", "data": row}


@router.post("/courses/{course_id}/played", response_model=None)
async def post_played(
    course_id: str,
    body: dict[str, Any] | None = Body(default=None),
    user_id: str | None = Depends(auth_dependencies.get_session_user_id),
    store: DataStore = Depends(get_store),
) -> dict | JSONResponse:
    if not user_id:
        return JSONResponse(status_code=401, content=AUTH_REQUIRED)

    try:
        payload = schemas.PlayedRequest.model_validate(body or {})
    except ValidationError:
        return JSONResponse(status_code=400, content={"error": "Invalid date played"})

    try:
        row, created = await service.mark_course_as_played(
            store,
            course_id=course_id,
            user_id=user_id,
            date_played=payload.date_played,
        )
    except AppError:
        logger.exception("mark_played_failed course_id=%s user_id=%s", course_id, user_id)
        return JSONResponse(status_code=500, content={"error": "Failed to mark course as played"})

    if not created:
        return {"success": True, "message": "Already marked as played for this date", "data": None}
    return {"success": True, "message": "Course marked as played successfully", "data": row}


@router.get("/courses/{course_id}/played")
async def get_played(
    course_id: str,
    user_id: str | None = Depends(auth_dependencies.get_session_user_id),
    store: DataStore = Depends(get_store),
) -> dict:
    if not user_id:
        return {"played": False}
    return {"played": await service.has_user_played_course(store, course_id=course_id, user_id=user_id)}


@router.get("/courses/{course_id}/reviews")
async def get_course_reviews(course_id: str, store: DataStore = Depends(get_store)) -> list[dict]:
    return await service.get_course_reviews(store, course_id)


@router.get("/reviews/recent")
async def get_recent_reviews(
    limit: int = Query(default=service.RECENT_LIMIT, ge=1, le=50),
    user_id: str | None = Depends(auth_dependencies.get_session_user_id),
    store: DataStore = Depends(get_store),
) -> list[dict]:
    return await service.get_recent_reviews(store, limit=limit, viewer_id=user_id)


@router.post("/reviews/{review_id}/like", response_model=None)
async def post_review_like(
    review_id: str,
    user_id: str | None = Depends(auth_dependencies.get_session_user_id),
    store: DataStore = Depends(get_store),
) -> dict | JSONResponse:
    if not user_id:
        return JSONResponse(status_code=401, content=AUTH_REQUIRED)

    try:
        liked = await service.toggle_review_like(store, review_id=review_id, user_id=user_id)
    except AppError:
        logger.exception("review_like_failed review_id=%s user_id=%s", review_id, user_id)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})
    return {"liked": liked}


@router.get("/reviews/{review_id}/likes")
async def get_review_likes(review_id: str, store: DataStore = Depends(get_store)) -> dict:
    return {"count": await service.get_review_likes_count(store, review_id)}
