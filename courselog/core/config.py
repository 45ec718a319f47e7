"""
Environment-driven settings and logging setup.
"""

from __future__ import annotations

import logging
import os


def env_str(name: str, default: str) -> str:
    return os.environ.get(name, "").strip() or default


def env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name, "").strip().lower()
    if not raw:
        return default
    return raw in {"1", "true", "yes", "on"}


def data_store_kind() -> str:
    return env_str("DATA_STORE", "postgres").lower()


def cors_origins() -> list[str]:
    raw = env_str("CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000")
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def session_cookie_name() -> str:
    return env_str("SESSION_COOKIE_NAME", "courselog_session")


def session_cookie_secure() -> bool:
    return env_bool("SESSION_COOKIE_SECURE", False)


def configure_logging() -> None:
    level_name = env_str("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
