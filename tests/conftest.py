"""Shared fixtures: a seeded in-memory store and an API client."""

import os

os.environ.setdefault("JWT_SECRET", "test-secret-not-for-production-use-only")
os.environ.setdefault("DATA_STORE", "memory")

import pytest
from httpx import ASGITransport, AsyncClient

from courselog.auth import security
from courselog.core.dependencies import get_store
from courselog.core.store import MemoryStore
from courselog.main import app

ALICE_ID = "u1"
BOB_ID = "u2"

# bcrypt is slow on purpose; hash once per session.
ALICE_PASSWORD_HASH = security.hash_password("correct-horse")


def seed_tables() -> dict:
    return {
        "users": [
            {
                "id": ALICE_ID,
                "email": "alice@example.com",
                "password_hash": ALICE_PASSWORD_HASH,
            },
            {"id": BOB_ID, "email": "bob@example.com", "password_hash": "x"},
        ],
        "profiles": [
            {
                "id": ALICE_ID,
                "name": "Alice",
                "image_url": "https://img.example.com/alice.png",
                "location": "Cape Town",
            },
        ],
        "courses": [
            {"id": "c1", "name": "A", "location": "X", "province": "Western Cape"},
            {"id": "c2", "name": "B", "location": "Y", "province": "Gauteng"},
        ],
        "course_reviews": [
            {
                "id": 1,
                "user_id": ALICE_ID,
                "course_id": "c1",
                "rating": 4,
                "review_text": "Windy",
                "date_played": "2024-01-01",
            },
            {
                "id": 2,
                "user_id": ALICE_ID,
                "course_id": "c2",
                "rating": 5,
                "review_text": "Perfect greens",
                "date_played": "2024-03-01",
            },
        ],
    }


@pytest.fixture
def store():
    return MemoryStore(seed_tables())


@pytest.fixture
def token_for():
    def _token(user_id: str, email: str = "someone@example.com") -> str:
        return security.build_access_token(user_id=user_id, email=email)

    return _token


@pytest.fixture
async def client(store):
    """API client with the data store dependency pointed at the memory store."""
    app.dependency_overrides[get_store] = lambda: store
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
