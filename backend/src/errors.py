from __future__ import annotations


class PortalError(Exception):
    """Base error rendered as ``{"success": false, "error": ...}``."""

    status_code = 500

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(PortalError):
    status_code = 400


class AuthenticationError(PortalError):
    status_code = 401


class NotFoundError(PortalError):
    status_code = 404


class ConflictError(PortalError):
    status_code = 409


class UpstreamError(PortalError):
    status_code = 502
