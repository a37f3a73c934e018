"""Error taxonomy for the job market API.

Every error the API reports is a JobMarketError. The FastAPI handlers in
app.main render them as ``{"success": false, "code", "error", "details"}``
using the class-level ``status_code`` and ``code``.
"""

from typing import Any, Dict, List, Optional


class JobMarketError(Exception):
    """Base class for all errors surfaced to API clients."""

    status_code = 500
    code = "InternalError"

    def __init__(self, message: str, details: Any = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "success": False,
            "code": self.code,
            "error": self.message,
        }
        if self.details is not None:
            payload["details"] = self.details
        return payload


# ---------- CLIENT ERRORS ----------

class ValidationError(JobMarketError):
    """Client-supplied parameters are malformed."""

    status_code = 400
    code = "ValidationError"


class QueryValidationError(ValidationError):
    """A fetch_jobs query parameter failed validation.

    The machine-readable reason (EmptyQuery, InvalidPage, ...) is carried per
    instance because one class covers every query rule.
    """

    def __init__(self, code: str, message: str, details: Any = None):
        super().__init__(message, details)
        self.code = code


class AuthError(JobMarketError):
    status_code = 401
    code = "AuthError"


# ---------- UPSTREAM / INFRASTRUCTURE ----------

class UpstreamError(JobMarketError):
    """The upstream job-search API answered with an error status."""

    code = "UpstreamError"

    def __init__(self, message: str, status_code: int, details: Any = None):
        super().__init__(message, details)
        self.status_code = status_code


class NetworkError(JobMarketError):
    """No response from the upstream API."""

    status_code = 500
    code = "NetworkError"


class StoreUnavailableError(NetworkError):
    """The job store could not be reached."""


class InternalError(JobMarketError):
    status_code = 500
    code = "InternalError"


class MalformedUpstreamResponse(InternalError):
    """Upstream answered 2xx but the body has no ``data`` list."""

    code = "MalformedUpstreamResponse"


# ---------- STARTUP ----------

class ConfigurationError(Exception):
    """
    Raised at startup when settings cannot be built from the environment.
    Holds every problem found so they can be fixed in one pass.
    """

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        self.message = message
        self.errors = errors or []
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        parts = [self.message]
        for i, error in enumerate(self.errors, 1):
            parts.append(f"  {i}. {error}")
        return "\n".join(parts)
