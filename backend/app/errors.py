"""
Error taxonomy shared by the service layer and the API boundary.

Services raise these; app.main converts them into the JSON error shape
{"error": ..., "details": {...}} with a fixed HTTP status per class.
"""
from typing import Dict, Optional


class PlatformError(Exception):
    """Base class for errors that map onto an HTTP response."""
    status_code = 500

    def __init__(self, message: str, details: Optional[Dict[str, str]] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        body = {"error": self.message}
        if self.details:
            body["details"] = self.details
        return body


class BadRequestError(PlatformError):
    """Missing or invalid fields."""
    status_code = 400


class UnauthenticatedError(PlatformError):
    status_code = 401


class ForbiddenError(PlatformError):
    status_code = 403


class NotFoundError(PlatformError):
    status_code = 404


class ConflictError(PlatformError):
    """Duplicate resource or disallowed state change."""
    status_code = 409


class InternalError(PlatformError):
    """Datastore or mail failure."""
    status_code = 500
