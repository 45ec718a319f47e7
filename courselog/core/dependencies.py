"""
Request-scoped dependencies shared by every feature router.
"""

from __future__ import annotations

from fastapi import Request

from .store import DataStore


def get_store(request: Request) -> DataStore:
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise RuntimeError("Data store is not initialized. Call open_store() on startup.")
    return store
