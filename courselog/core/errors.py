"""
Application error types.

Each error carries the HTTP status and a fixed public message used when it
reaches the API boundary. The public message never includes the underlying
cause; that goes to the log only.
"""

from __future__ import annotations


class AppError(RuntimeError):
    http_status = 500
    public_message = "Internal server error"


class StoreError(AppError):
    """The data store could not complete a query."""


class AuthError(AppError):
    """The identity service failed to validate the current identity."""

    http_status = 401
    public_message = "Authentication failed"


class ProfileLookupError(AppError):
    """An identity exists but its profile row is missing or unreadable."""

    public_message = "Failed to load profile"


# "Not found" deliberately shares the 500 status with other failures.
class NotFoundError(AppError):
    public_message = "Resource not found"


class QueryError(AppError):
    public_message = "Failed to fetch data"
