# ============================================================================
# ERROR TAXONOMY
# ============================================================================
# STATUS: Foundation - Exceptions raised by clients and services
# PURPOSE: Structured error classification for retry decisions
# LAST_REVIEWED: 19 OCT 2026
# ============================================================================
"""
Error taxonomy.

Retry decisions in the reconciler are made on exception *type*, never on
message text. RequestError parses the ARM error envelope:

    {"error": {"code": "ContainerAppOperationInProgress", "message": "..."}}

so callers can branch on `error_code`.
"""

import json
from typing import Any, Dict, Optional


class DashboardError(Exception):
    """Base exception for dashboard operations."""


class ConfigurationError(DashboardError):
    """Required identifiers missing. Raised before any network call."""

    def __init__(self, message: str, missing: Optional[list] = None):
        self.missing = list(missing or [])
        super().__init__(message)


class RequestError(DashboardError):
    """
    Non-success HTTP status from the management or telemetry API.

    Carries the status code and the raw response body verbatim.
    """

    def __init__(self, status_code: int, body: str, url: Optional[str] = None, service: str = "Azure ARM"):
        self.status_code = status_code
        self.body = body or ""
        self.url = url
        self.service = service
        self.error_code, self.error_message = parse_error_envelope(self.body)
        super().__init__(f"{service} request failed with {status_code}: {self.body}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status_code": self.status_code,
            "error_code": self.error_code,
            "error_message": self.error_message,
            "url": self.url,
        }


class ConflictError(RequestError):
    """The platform reports another operation in progress on the resource."""


class StaleStateError(DashboardError):
    """Provisioning state never reached Succeeded within the attempt budget."""

    def __init__(self, state: str, attempts: int):
        self.state = state
        self.attempts = attempts
        super().__init__(
            f"Container App is still provisioning (state: {state}) after {attempts} attempts."
        )


class RetriesExhaustedError(DashboardError):
    """Conflict retries used up the attempt budget."""

    def __init__(self, attempts: int, last_error: Optional[Exception] = None):
        self.attempts = attempts
        self.last_error = last_error
        detail = f": {last_error}" if last_error else ""
        super().__init__(f"Update still conflicting after {attempts} attempts{detail}")


class InvalidResourceShapeError(DashboardError):
    """Resource is structurally not a deployable app (e.g. no containers)."""


class DecodeError(DashboardError):
    """Response envelope could not be parsed."""


def parse_error_envelope(body: str) -> tuple:
    """
    Extract (code, message) from an ARM/App Insights error body.

    Returns (None, None) when the body is not a JSON error envelope.
    """
    if not body:
        return None, None
    try:
        data = json.loads(body)
    except (ValueError, TypeError):
        return None, None
    if not isinstance(data, dict):
        return None, None

    error = data.get("error")
    if isinstance(error, dict):
        code = error.get("code")
        message = error.get("message")
        return (str(code) if code else None), (str(message) if message else None)
    # Some endpoints return a flat {"code": ..., "message": ...}
    code = data.get("code")
    if code:
        return str(code), (str(data["message"]) if data.get("message") else None)
    return None, None


__all__ = [
    "DashboardError",
    "ConfigurationError",
    "RequestError",
    "ConflictError",
    "StaleStateError",
    "RetriesExhaustedError",
    "InvalidResourceShapeError",
    "DecodeError",
    "parse_error_envelope",
]
