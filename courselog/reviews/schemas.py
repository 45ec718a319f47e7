"""
Review API schemas.
"""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel, Field

# Rating 0 marks a played round that was not rated.
UNRATED = 0


class ReviewCreateRequest(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    review_text: str | None = Field(default=None, max_length=5000)
    date_played: date | None = None


class RoundLogRequest(BaseModel):
    played_on: date | None = Field(default=None, alias="date")
    rating: int | None = Field(default=None, ge=UNRATED, le=5)
    notes: str | None = Field(default=None, max_length=5000)


class PlayedRequest(BaseModel):
    date_played: date | None = Field(default=None, alias="datePlayed")
