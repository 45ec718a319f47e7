"""
Course API schemas.
"""

from __future__ import annotations

from pydantic import BaseModel


class CourseSearchResult(BaseModel):
    id: str
    name: str
    location: str | None = None
    province: str | None = None
    average_rating: float = 0.0
    total_reviews: int = 0
    relevance_score: int = 0
