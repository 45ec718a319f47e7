"""Tests for logging rounds and marking courses as played."""

from datetime import datetime, timezone


def _auth(token):
    return {"Authorization": f"Bearer {token}"}


async def test_log_round_requires_session(client):
    res = await client.post("/courses/c1/log", json={"rating": 4})
    assert res.status_code == 401
    assert res.json() == {"error": "Authentication required"}


async def test_log_round_without_rating_stores_zero(client, store, token_for):
    res = await client.post(
        "/courses/c2/log",
        json={"date": "2024-05-04", "notes": "Range session first"},
        headers=_auth(token_for("u2")),
    )
    assert res.status_code == 200
    body = res.json()
    assert body["success"] is True
    assert body["message"] == "Round logged successfully"
    assert body["data"]["rating"] == 0
    assert body["data"]["review_text"] == "Range session first"
    assert body["data"]["date_played"] == "2024-05-04"

    rows = [r for r in store.tables["course_reviews"] if r["user_id"] == "u2"]
    assert len(rows) == 1


async def test_log_round_rejects_out_of_range_rating(client, token_for):
    res = await client.post("/courses/c1/log", json={"rating": 9}, headers=_auth(token_for("u2")))
    assert res.status_code == 400
    assert res.json() == {"error": "Invalid round data"}


async def test_log_round_store_failure(client, store, token_for):
    store.fail_with = "boom"
    res = await client.post("/courses/c1/log", json={"rating": 3}, headers=_auth(token_for("u2")))
    assert res.status_code == 500
    assert res.json() == {"error": "Failed to log round"}


async def test_mark_played_then_again_same_day(client, store, token_for):
    headers = _auth(token_for("u2"))

    first = await client.post("/courses/c1/played", json={"datePlayed": "2024-06-01"}, headers=headers)
    assert first.json()["message"] == "Course marked as played successfully"
    assert first.json()["data"]["rating"] == 0

    second = await client.post("/courses/c1/played", json={"datePlayed": "2024-06-01"}, headers=headers)
    assert second.json() == {
        "success": True,
        "message": "Already marked as played for this date",
        "data": None,
    }
    plays = [r for r in store.tables["course_reviews"] if r["user_id"] == "u2"]
    assert len(plays) == 1


async def test_mark_played_defaults_to_today(client, token_for):
    res = await client.post("/courses/c2/played", headers=_auth(token_for("u2")))
    assert res.json()["data"]["date_played"] == datetime.now(timezone.utc).date().isoformat()


async def test_mark_played_requires_session(client):
    res = await client.post("/courses/c1/played")
    assert res.status_code == 401


async def test_mark_played_store_failure(client, store, token_for):
    store.fail_with = "boom"
    res = await client.post("/courses/c1/played", headers=_auth(token_for("u2")))
    assert res.status_code == 500
    assert res.json() == {"error": "Failed to mark course as played"}


async def test_has_played(client, token_for):
    played = await client.get("/courses/c1/played", headers=_auth(token_for("u1")))
    assert played.json() == {"played": True}

    not_played = await client.get("/courses/c1/played", headers=_auth(token_for("u2")))
    assert not_played.json() == {"played": False}

    anonymous = await client.get("/courses/c1/played")
    assert anonymous.json() == {"played": False}


async def test_has_played_store_failure_is_false(client, store, token_for):
    store.fail_with = "boom"
    res = await client.get("/courses/c1/played", headers=_auth(token_for("u1")))
    assert res.json() == {"played": False}
