# =============================================================================
# app/exceptions.py - Custom Exceptions and Handlers
# =============================================================================
# Centralized exception handling for the API.
# Every error leaves the API in the same envelope:
#
#   {"error": {"code": "...", "message": "...", "details": {...}, "suggestion": "..."}}
#
# "Errors should tell HOW to fix, not just WHAT failed."
# =============================================================================

import logging
from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class JobTrackerException(Exception):
    """
    Base exception for the Job Tracker API.

    All custom exceptions inherit from this class.
    Provides structured error responses with actionable suggestions.
    """

    def __init__(
        self,
        message: str,
        code: str = "JOBTRACKER_ERROR",
        status_code: int = 500,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.suggestion = suggestion
        self.details = details or {}
        self.headers = headers

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response dict."""
        error = {
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }
        if self.suggestion:
            error["suggestion"] = self.suggestion
        return {"error": error}


# =============================================================================
# Request Exceptions
# =============================================================================

class ValidationFailedError(JobTrackerException):
    """Raised when input passes schema parsing but breaks a business rule."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(
            message=message,
            code="VALIDATION_ERROR",
            status_code=400,
            details=details,
        )


class BadRequestError(JobTrackerException):
    """Generic 400 with a caller-chosen code."""

    def __init__(
        self,
        message: str,
        code: str = "BAD_REQUEST",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(
            message=message,
            code=code,
            status_code=400,
            suggestion=suggestion,
            details=details,
        )


class NotFoundError(JobTrackerException):
    """Raised when a resource doesn't exist or isn't owned by the caller."""

    def __init__(self, resource: str = "Resource"):
        super().__init__(
            message=f"{resource} not found",
            code="NOT_FOUND",
            status_code=404,
            suggestion=f"Check that the {resource.lower()} id is correct and hasn't been deleted",
        )


class ConflictError(JobTrackerException):
    """Raised when a create/update collides with an existing record."""

    def __init__(self, message: str, code: str = "CONFLICT", details: dict[str, Any] | None = None):
        super().__init__(
            message=message,
            code=code,
            status_code=409,
            details=details,
        )


# =============================================================================
# Auth Exceptions
# =============================================================================

class UnauthorizedError(JobTrackerException):
    """Raised when the caller isn't authenticated."""

    def __init__(
        self,
        message: str = "Authentication required",
        code: str = "UNAUTHORIZED",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(
            message=message,
            code=code,
            status_code=401,
            details=details,
            headers={"WWW-Authenticate": "Bearer"},
        )


class ForbiddenError(JobTrackerException):
    """Raised when the caller is authenticated but not allowed."""

    def __init__(
        self,
        message: str,
        code: str = "FORBIDDEN",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(
            message=message,
            code=code,
            status_code=403,
            suggestion=suggestion,
            details=details,
        )


class AccountLockedError(JobTrackerException):
    """Raised when login is blocked by the failed-attempt lockout."""

    def __init__(self, retry_after_seconds: int, locked_until: str | None, duration_text: str):
        super().__init__(
            message=f"Too many failed login attempts. Try again in {duration_text}.",
            code="ACCOUNT_LOCKED",
            status_code=429,
            suggestion="Wait for the lockout to expire or reset your password",
            details={
                "retry_after_seconds": retry_after_seconds,
                "locked_until": locked_until,
            },
            headers={"Retry-After": str(retry_after_seconds)},
        )


# =============================================================================
# Plan Exceptions
# =============================================================================

class PlanLimitError(ForbiddenError):
    """Raised when the FREE plan's application cap is reached."""

    def __init__(self, limit: int):
        super().__init__(
            message=f"Free plan is limited to {limit} applications",
            code="PLAN_LIMIT",
            suggestion="Upgrade to Pro for unlimited applications",
            details={"limit": limit},
        )


class PlanRequiredError(ForbiddenError):
    """Raised when a PRO-only feature is used on the FREE plan."""

    def __init__(self, feature: str):
        super().__init__(
            message=f"{feature} requires the Pro plan",
            code="PLAN_REQUIRED",
            suggestion="Upgrade to Pro from the billing settings",
            details={"required_plan": "PRO"},
        )


# =============================================================================
# Rate Limiting / Integrations
# =============================================================================

class RateLimitedError(JobTrackerException):
    """Raised when a rate-limit bucket is exhausted."""

    def __init__(self, retry_after_ms: int):
        retry_after_s = max(1, -(-retry_after_ms // 1000))
        super().__init__(
            message="Too many requests. Please slow down.",
            code="RATE_LIMITED",
            status_code=429,
            details={"retry_after_ms": retry_after_ms},
            headers={"Retry-After": str(retry_after_s)},
        )


class NotConfiguredError(JobTrackerException):
    """Raised when an optional integration has no credentials."""

    def __init__(self, feature: str):
        super().__init__(
            message=f"{feature} is not configured",
            code="NOT_CONFIGURED",
            status_code=503,
            suggestion="Set the related environment variables and restart the service",
        )


class ExternalServiceError(JobTrackerException):
    """Raised when a third-party call fails after retries."""

    def __init__(self, service: str, error: str):
        super().__init__(
            message=f"{service} request failed: {error}",
            code="EXTERNAL_SERVICE_ERROR",
            status_code=502,
            suggestion="Try again later or contact support if the issue persists",
            details={"service": service},
        )


# =============================================================================
# Exception Handlers
# =============================================================================

def _validation_details(errors: list[dict[str, Any]]) -> dict[str, list[str]]:
    """Group pydantic error entries by dotted field path."""
    details: dict[str, list[str]] = {}
    for err in errors:
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        field = ".".join(loc) or "_root"
        details.setdefault(field, []).append(err.get("msg", "Invalid value"))
    return details


async def jobtracker_exception_handler(
    request: Request,
    exc: JobTrackerException
) -> JSONResponse:
    """
    Convert JobTrackerException to JSON response.

    Returns the error envelope with:
    - code: Machine-readable error code
    - message: Human-readable message
    - details: Additional context
    - suggestion: How to fix (if available)
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
        headers=exc.headers,
    )


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError
) -> JSONResponse:
    """
    Handle Pydantic validation errors.

    Converts validation errors to field-level details under a 400.
    """
    return JSONResponse(
        status_code=400,
        content={
            "error": {
                "code": "VALIDATION_ERROR",
                "message": "Invalid input",
                "details": _validation_details(exc.errors()),
            }
        }
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.exception(f"Unexpected error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred",
                "details": {},
            }
        }
    )
