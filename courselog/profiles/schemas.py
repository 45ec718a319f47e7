"""
Profile API schemas.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class UserView(BaseModel):
    id: str
    # Always the identity's email, never a profile field.
    email: str
    name: str
    image: str | None = None
    location: str | None = None


class ProfileUpdateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    image_url: str | None = Field(default=None, max_length=2048)
    location: str | None = Field(default=None, max_length=200)
