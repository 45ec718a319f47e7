"""
Auth API schemas (request/response models) and identity value types.
"""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel, Field


@dataclass(frozen=True)
class Session:
    user_id: str


@dataclass(frozen=True)
class Identity:
    id: str
    email: str


class RegisterRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=320)
    # bcrypt only hashes the first 72 bytes.
    password: str = Field(..., min_length=6, max_length=72)


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=320)
    password: str = Field(..., min_length=1, max_length=72)


class UserResponse(BaseModel):
    id: str
    email: str


class AuthResponse(BaseModel):
    user: UserResponse
    access_token: str
    token_type: str = "bearer"


class SessionResponse(BaseModel):
    user_id: str | None = None
