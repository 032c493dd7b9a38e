# geogate/errors.py
"""
Error taxonomy for the gateway.

Every failure a handler can surface is a GatewayError subclass; main.py maps
them onto HTTP responses with a single exception handler.
"""
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional


class GatewayError(Exception):
    """Base exception carrying a stable code and the HTTP status it maps to."""

    status_code: int = 500
    code: str = "GATEWAY_ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def public_message(self) -> str:
        return self.message


class ValidationError(GatewayError):
    status_code = 400
    code = "VALIDATION_ERROR"


class NotFoundError(GatewayError):
    status_code = 404
    code = "NOT_FOUND"


class AuthFailureReason(str, Enum):
    MISSING_CREDENTIAL = "missing_credential"
    MALFORMED = "malformed"
    INVALID = "invalid"
    VERIFICATION_UNAVAILABLE = "verification_unavailable"


class AuthFailure(GatewayError):
    """
    Credential rejected. The reason is kept for logging only; clients always
    see the same generic message.
    """

    status_code = 401
    code = "UNAUTHORIZED"

    def __init__(self, reason: AuthFailureReason, message: str = ""):
        self.reason = reason
        super().__init__(message or reason.value)

    def public_message(self) -> str:
        return "Unauthorized"


class UpstreamError(GatewayError):
    """A remote collaborator (weather, geocode, primary auth) failed."""

    status_code = 500
    code = "UPSTREAM_ERROR"

    def __init__(self, service: str, message: str = "upstream request failed",
                 details: Optional[Dict[str, Any]] = None):
        self.service = service
        super().__init__(f"{service}: {message}", details)

    def public_message(self) -> str:
        return f"Failed to fetch data from {self.service}"


class StoreUnavailable(GatewayError):
    status_code = 500
    code = "STORE_UNAVAILABLE"

    def public_message(self) -> str:
        return "Geo dataset unavailable"
