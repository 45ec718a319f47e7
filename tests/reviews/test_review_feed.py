"""Tests for course review lists, the recent review feed and review likes."""

from datetime import datetime, timedelta, timezone

import pytest

from courselog.reviews import service

T0 = datetime(2024, 6, 1, tzinfo=timezone.utc)


@pytest.fixture
def store(store):
    reviews = store.tables["course_reviews"]
    for offset, row in enumerate(reviews):
        row["created_at"] = T0 + timedelta(hours=offset)
    reviews += [
        {
            "id": 3,
            "user_id": "u2",
            "course_id": "c1",
            "rating": 0,
            "review_text": "Just a quick nine",
            "date_played": "2024-05-01",
            "created_at": T0 + timedelta(hours=5),
        },
        {
            "id": 4,
            "user_id": "u2",
            "course_id": "c1",
            "rating": 3,
            "review_text": "   ",
            "date_played": "2024-05-02",
            "created_at": T0 + timedelta(hours=6),
        },
    ]
    store.tables["review_likes"] = [
        {"id": "l1", "review_id": "2", "user_id": "u2"},
        {"id": "l2", "review_id": "2", "user_id": "u1"},
    ]
    return store


def _auth(token):
    return {"Authorization": f"Bearer {token}"}


async def test_course_reviews_newest_first(client):
    res = await client.get("/courses/c1/reviews")
    assert res.status_code == 200
    assert [r["id"] for r in res.json()] == [4, 3, 1]


async def test_course_reviews_store_failure_is_empty(client, store):
    store.fail_with = "boom"
    res = await client.get("/courses/c1/reviews")
    assert res.status_code == 200
    assert res.json() == []


async def test_recent_reviews_skip_unrated_and_blank(client):
    res = await client.get("/reviews/recent")
    assert res.status_code == 200
    body = res.json()

    assert [r["id"] for r in body] == [2, 1]
    assert body[0]["likes_count"] == 2
    assert body[0]["user_has_liked"] is False
    assert body[0]["user"] == {"name": "Alice", "image": "https://img.example.com/alice.png"}
    assert body[0]["course"] == {"id": "c2", "name": "B", "location": "Y"}


async def test_recent_reviews_mark_viewer_likes(client, token_for):
    res = await client.get("/reviews/recent", params={"limit": 1}, headers=_auth(token_for("u2")))
    body = res.json()
    assert len(body) == 1
    assert body[0]["user_has_liked"] is True


async def test_recent_reviews_author_without_profile(store):
    store.tables["course_reviews"].append(
        {
            "id": 5,
            "user_id": "u2",
            "course_id": "gone",
            "rating": 4,
            "review_text": "Lovely",
            "created_at": T0 + timedelta(days=1),
        }
    )
    recent = await service.get_recent_reviews(store, limit=1)
    assert recent[0]["user"] is None
    assert recent[0]["course"] is None


async def test_recent_reviews_store_failure_is_empty(client, store):
    store.fail_with = "boom"
    res = await client.get("/reviews/recent")
    assert res.json() == []


async def test_like_toggles(client, store, token_for):
    headers = _auth(token_for("u1"))

    liked = await client.post("/reviews/1/like", headers=headers)
    assert liked.json() == {"liked": True}
    assert (await client.get("/reviews/1/likes")).json() == {"count": 1}

    unliked = await client.post("/reviews/1/like", headers=headers)
    assert unliked.json() == {"liked": False}
    assert (await client.get("/reviews/1/likes")).json() == {"count": 0}
    assert len(store.tables["review_likes"]) == 2


async def test_like_requires_session(client):
    res = await client.post("/reviews/1/like")
    assert res.status_code == 401
    assert res.json() == {"error": "Authentication required"}


async def test_like_store_failure(client, store, token_for):
    store.fail_with = "boom"
    res = await client.post("/reviews/1/like", headers=_auth(token_for("u1")))
    assert res.status_code == 500
    assert res.json() == {"error": "Internal server error"}


async def test_likes_count_store_failure_is_zero(client, store):
    store.fail_with = "boom"
    assert (await client.get("/reviews/2/likes")).json() == {"count": 0}
