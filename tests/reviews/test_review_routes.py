"""Tests for logging a round with a review through POST /courses/{id}/review."""

from datetime import datetime, timezone


async def test_requires_session(client):
    res = await client.post("/courses/c1/review", json={"rating": 4})
    assert res.status_code == 401
    assert res.json() == {"error": "Authentication required"}


async def test_rating_is_required(client, token_for):
    res = await client.post(
        "/courses/c1/review",
        json={"review_text": "no rating"},
        headers={"Authorization": f"Bearer {token_for('u2')}"},
    )
    assert res.status_code == 400
    assert res.json() == {"error": "Rating is required"}


async def test_logs_review_with_default_date(client, store, token_for):
    res = await client.post(
        "/courses/c1/review",
        json={"rating": 5, "review_text": "Great day"},
        headers={"Authorization": f"Bearer {token_for('u2')}"},
    )
    assert res.status_code == 200
    body = res.json()
    assert body["success"] is True
    assert body["message"] == "Review submitted successfully"
    assert body["data"]["user_id"] == "u2"
    assert body["data"]["date_played"] == datetime.now(timezone.utc).date().isoformat()

    reviews = [r for r in store.tables["course_reviews"] if r["user_id"] == "u2"]
    assert len(reviews) == 1


async def test_explicit_date_played(client, token_for):
    res = await client.post(
        "/courses/c2/review",
        json={"rating": 3, "date_played": "2024-02-29"},
        headers={"Authorization": f"Bearer {token_for('u2')}"},
    )
    assert res.json()["data"]["date_played"] == "2024-02-29"


async def test_store_failure(client, store, token_for):
    store.fail_with = "boom"
    res = await client.post(
        "/courses/c1/review",
        json={"rating": 4},
        headers={"Authorization": f"Bearer {token_for('u2')}"},
    )
    assert res.status_code == 500
    assert res.json() == {"error": "Failed to submit review"}
