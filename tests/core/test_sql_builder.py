"""Tests for the SQL text built by the Postgres store."""

import asyncio

import pytest

from courselog.core import db
from courselog.core.errors import StoreError
from courselog.core.store import Join, Search


def test_select_with_filter_and_order():
    sql, args = db.build_select(
        "course_reviews",
        filters={"user_id": "u1"},
        columns=("id", "rating"),
        order_by="date_played",
        descending=True,
    )
    assert sql == (
        'SELECT t."id", t."rating" FROM "course_reviews" t '
        'WHERE t."user_id" = $1 ORDER BY t."date_played" DESC'
    )
    assert args == ["u1"]


def test_select_with_join_aliases_columns():
    join = Join(table="courses", foreign_key="course_id", columns=("name", "location"), alias="courses")
    sql, _ = db.build_select("course_reviews", columns=("id",), join=join)

    assert 'j."name" AS "courses.name"' in sql
    assert 'j."location" AS "courses.location"' in sql
    assert 'LEFT JOIN "courses" j ON j."id" = t."course_id"' in sql


def test_search_escapes_like_wildcards():
    sql, args = db.build_select(
        "courses",
        search=Search(columns=("name", "location"), term="100%_club"),
        limit=10,
    )
    assert '(t."name" ILIKE $1 OR t."location" ILIKE $1)' in sql
    assert sql.endswith("LIMIT $2")
    assert args == ["%100\\%\\_club%", 10]


def test_upsert_updates_non_key_columns():
    sql, args = db.build_upsert("profiles", {"id": "u1", "name": "Alice"}, conflict_key="id")
    assert sql == (
        'INSERT INTO "profiles" ("id", "name") VALUES ($1, $2) '
        'ON CONFLICT ("id") DO UPDATE SET "name" = EXCLUDED."name" RETURNING *'
    )
    assert args == ["u1", "Alice"]


def test_rejects_unsafe_identifiers():
    with pytest.raises(ValueError):
        db.build_select('courses"; DROP TABLE users; --')


def test_nest_joined_missing_relation_is_none():
    join = Join(table="courses", foreign_key="course_id", columns=("name",), alias="courses")
    row = db._nest_joined({"id": 1, "courses.name": None, "__join_key": None}, join)
    assert row == {"id": 1, "courses": None}


def test_sanitize_database_url_drops_sslmode():
    url = "postgresql://u:p@host:5432/db?sslmode=require&application_name=x"
    assert db._sanitize_database_url(url) == "postgresql://u:p@host:5432/db?application_name=x"


async def test_open_store_memory(monkeypatch):
    monkeypatch.setenv("DATA_STORE", "memory")
    store = await db.open_store()
    assert await store.select_many("courses") == []


def test_delete_filters_by_every_key():
    sql, args = db.build_delete("review_likes", filters={"user_id": "u1", "review_id": "r1"})
    assert sql == 'DELETE FROM "review_likes" WHERE "user_id" = $1 AND "review_id" = $2 RETURNING 1'
    assert args == ["u1", "r1"]


def test_delete_requires_a_filter():
    with pytest.raises(ValueError):
        db.build_delete("review_likes", filters={})


class _TimingOutPool:
    async def fetch(self, sql, *args):
        raise asyncio.TimeoutError()


async def test_command_timeout_surfaces_as_store_error():
    store = db.PostgresStore(_TimingOutPool())
    with pytest.raises(StoreError):
        await store.select_many("course_reviews", filters={"user_id": "u1"})
