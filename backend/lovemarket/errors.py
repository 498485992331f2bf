"""Client-facing error types raised by services and rendered by the API."""

from __future__ import annotations

from typing import Any


class APIError(Exception):
    """Failure that should reach the caller with an HTTP status and message."""

    status_code: int = 500

    def __init__(self, message: str, *, status_code: int | None = None, details: Any = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.details = details

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"message": self.message}
        if self.details is not None:
            payload["details"] = self.details
        return payload


class InvalidRequestError(APIError):
    status_code = 400


class UnauthorizedError(APIError):
    status_code = 401


class ForbiddenError(APIError):
    status_code = 403


class NotFoundError(APIError):
    status_code = 404


__all__ = [
    "APIError",
    "ForbiddenError",
    "InvalidRequestError",
    "NotFoundError",
    "UnauthorizedError",
]
