"""
Row-to-view mapping for user reviews.

`REVIEW_FIELD_MAP` is the whole contract: view field -> store field. The
joined course arrives under the relation alias `courses` and is exposed as
the flat field `course`. Fields not listed here are dropped.
"""

from __future__ import annotations

from typing import Any, Mapping

COURSE_RELATION = "courses"

REVIEW_FIELD_MAP: dict[str, str] = {
    "id": "id",
    "course_id": "course_id",
    "rating": "rating",
    "review_text": "review_text",
    "date_played": "date_played",
    "course": COURSE_RELATION,
}


def to_review_view(row: Mapping[str, Any]) -> dict[str, Any]:
    return {view_field: row.get(store_field) for view_field, store_field in REVIEW_FIELD_MAP.items()}
