from __future__ import annotations

from typing import Optional


class SiteAlertError(Exception):
    """Base class for errors surfaced to API clients as `{"error": ...}` bodies."""

    status_code = 500

    def __init__(self, error: str, message: Optional[str] = None):
        super().__init__(error)
        self.error = error
        self.message = message

    def to_body(self) -> dict:
        body = {"error": self.error}
        if self.message is not None:
            body["message"] = self.message
        return body


class ValidationError(SiteAlertError):
    """A required field is missing or empty."""

    status_code = 400


class NotFound(SiteAlertError):
    """A referenced site or user does not exist."""

    status_code = 404


class StorageError(SiteAlertError):
    """The storage backend failed an operation."""

    status_code = 500
