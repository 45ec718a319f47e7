"""
Course API endpoints.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from courselog.auth import dependencies as auth_dependencies
from courselog.core.dependencies import get_store
from courselog.core.errors import AppError
from courselog.core.store import DataStore

from . import schemas, service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/courses")
me_router = APIRouter(prefix="/me")

AUTH_REQUIRED = {"error": "Authentication required"}


@router.get("")
async def list_courses(
    province: str | None = Query(default=None, max_length=100),
    store: DataStore = Depends(get_store),
) -> list[dict]:
    return await service.list_courses(store, province=province)


@router.get("/provinces", response_model=None)
async def list_provinces(store: DataStore = Depends(get_store)) -> list[str] | JSONResponse:
    try:
        return await service.list_provinces(store)
    except AppError:
        logger.exception("province_fetch_failed")
        return JSONResponse(status_code=500, content={"error": "Failed to fetch provinces"})


@router.get("/search", response_model=None)
async def search_courses(
    q: str = Query(default="", max_length=200),
    store: DataStore = Depends(get_store),
) -> list[schemas.CourseSearchResult] | JSONResponse:
    try:
        return await service.search_courses(store, q)
    except AppError:
        logger.exception("course_search_failed q=%r", q)
        return JSONResponse(status_code=500, content={"error": "Failed to search courses"})


@router.get("/{course_id}", response_model=None)
async def get_course(course_id: str, store: DataStore = Depends(get_store)) -> dict | JSONResponse:
    # Any failure, including "not found", is reported as a generic 500.
    try:
        return await service.get_course_by_id(store, course_id)
    except Exception:
        logger.exception("course_fetch_failed course_id=%s", course_id)
        return JSONResponse(status_code=500, content={"error": "Failed to fetch course"})


@router.get("/{course_id}/bucket-list", response_model=None)
async def get_bucket_list_status(
    course_id: str,
    user_id: str | None = Depends(auth_dependencies.get_session_user_id),
    store: DataStore = Depends(get_store),
) -> dict | JSONResponse:
    if not user_id:
        return JSONResponse(status_code=401, content=AUTH_REQUIRED)
    listed = await service.is_in_bucket_list(store, user_id=user_id, course_id=course_id)
    return {"success": True, "inBucketList": listed}


@router.post("/{course_id}/bucket-list", response_model=None)
async def add_to_bucket_list(
    course_id: str,
    user_id: str | None = Depends(auth_dependencies.get_session_user_id),
    store: DataStore = Depends(get_store),
) -> dict | JSONResponse:
    if not user_id:
        return JSONResponse(status_code=401, content=AUTH_REQUIRED)
    try:
        await service.add_to_bucket_list(store, user_id=user_id, course_id=course_id)
    except AppError:
        logger.exception("bucket_list_add_failed course_id=%s user_id=%s", course_id, user_id)
        return JSONResponse(status_code=500, content={"error": "Failed to add course to bucket list"})
    return {"success": True, "message": "Course added to bucket list successfully"}


@router.delete("/{course_id}/bucket-list", response_model=None)
async def remove_from_bucket_list(
    course_id: str,
    user_id: str | None = Depends(auth_dependencies.get_session_user_id),
    store: DataStore = Depends(get_store),
) -> dict | JSONResponse:
    if not user_id:
        return JSONResponse(status_code=401, content=AUTH_REQUIRED)
    try:
        await service.remove_from_bucket_list(store, user_id=user_id, course_id=course_id)
    except AppError:
        logger.exception("bucket_list_remove_failed course_id=%s user_id=%s", course_id, user_id)
        return JSONResponse(status_code=500, content={"error": "Failed to remove course from bucket list"})
    return {"success": True, "message": "Course removed from bucket list successfully"}


@router.post("/{course_id}/favorite", response_model=None)
async def toggle_favorite(
    course_id: str,
    user_id: str | None = Depends(auth_dependencies.get_session_user_id),
    store: DataStore = Depends(get_store),
) -> dict | JSONResponse:
    if not user_id:
        return JSONResponse(status_code=401, content=AUTH_REQUIRED)
    try:
        favorite = await service.toggle_favorite(store, user_id=user_id, course_id=course_id)
    except AppError:
        logger.exception("favorite_toggle_failed course_id=%s user_id=%s", course_id, user_id)
        return JSONResponse(status_code=500, content={"error": "Failed to update favorite"})
    return {"favorite": favorite}


@me_router.get("/bucket-list", response_model=None)
async def get_my_bucket_list(
    user_id: str | None = Depends(auth_dependencies.get_session_user_id),
    store: DataStore = Depends(get_store),
) -> list[dict] | JSONResponse:
    if not user_id:
        return JSONResponse(status_code=401, content=AUTH_REQUIRED)
    try:
        return await service.get_bucket_list(store, user_id)
    except AppError:
        logger.exception("bucket_list_fetch_failed user_id=%s", user_id)
        return JSONResponse(status_code=500, content={"error": "Failed to fetch bucket list"})


@me_router.get("/favorites", response_model=None)
async def get_my_favorites(
    user_id: str | None = Depends(auth_dependencies.get_session_user_id),
    store: DataStore = Depends(get_store),
) -> list[dict] | JSONResponse:
    if not user_id:
        return JSONResponse(status_code=401, content=AUTH_REQUIRED)
    try:
        return await service.get_favorites(store, user_id)
    except AppError:
        logger.exception("favorites_fetch_failed user_id=%s", user_id)
        return JSONResponse(status_code=500, content={"error": "Failed to fetch favorites"})
