"""Custom exceptions for application-specific error handling."""

from __future__ import annotations

from typing import Optional, Dict, Any


class WildwayException(Exception):
    """Base exception for all application errors."""

    def __init__(
        self,
        message: str,
        *,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 400,
        headers: Optional[Dict[str, str]] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.status_code = status_code
        self.headers = headers
        super().__init__(self.message)

    @property
    def status(self) -> str:
        return "error" if self.status_code >= 500 else "fail"

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to the JSON error envelope returned to clients."""
        payload: Dict[str, Any] = {
            "status": self.status,
            "message": self.message,
            "error_code": self.error_code,
        }
        if self.details:
            payload["details"] = self.details
        return payload


class BadRequestError(WildwayException):
    """Raised when request is invalid."""

    def __init__(self, message: str = "Bad request.", *, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code="BAD_REQUEST", details=details, status_code=400)


class NotFoundError(WildwayException):
    """Raised when a requested resource is not found."""

    def __init__(self, message: str = "Not found.", *, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code="NOT_FOUND", details=details, status_code=404)


class ConflictError(WildwayException):
    """Raised when a request conflicts with current state."""

    def __init__(self, message: str = "Conflict.", *, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code="CONFLICT", details=details, status_code=409)


class RateLimitExceeded(WildwayException):
    """Raised when a client exceeds rate limits."""

    def __init__(self, *, retry_after: int, limit: int, window_seconds: int):
        headers = {
            "Retry-After": str(retry_after),
            "X-RateLimit-Limit": str(limit),
            "X-RateLimit-Window": str(window_seconds),
        }
        super().__init__(
            "Too many requests. Please try again later.",
            error_code="RATE_LIMIT",
            details={"retry_after": retry_after, "limit": limit, "window_seconds": window_seconds},
            status_code=429,
            headers=headers,
        )


class InternalError(WildwayException):
    """Raised for unclassified server-side failures."""

    def __init__(self, message: str = "Something went wrong. Please try again later."):
        super().__init__(message, error_code="INTERNAL_ERROR", status_code=500)


class InvalidConfigurationError(WildwayException):
    """Raised when configuration is invalid."""

    def __init__(self, message: str, setting: Optional[str] = None):
        details = {"setting": setting} if setting else {}
        super().__init__(message, error_code="INVALID_CONFIG", details=details, status_code=500)


# ===== AUTHENTICATION/AUTHORIZATION EXCEPTIONS =====


class AuthenticationError(WildwayException):
    """Raised for bad credentials or an invalid session."""

    def __init__(self, message: str = "Authentication failed.", *, error_code: str = "AUTHENTICATION_FAILED"):
        super().__init__(message, error_code=error_code, status_code=401)


class NotAuthenticatedError(AuthenticationError):
    """Raised when a protected route is reached without a usable session."""

    def __init__(
        self,
        message: str = "You are not logged in. Please log in to get access.",
        *,
        error_code: str = "NOT_AUTHENTICATED",
    ):
        super().__init__(message, error_code=error_code)


class InvalidTokenError(AuthenticationError):
    """Raised when a session token is malformed, forged or expired."""

    def __init__(self, message: str = "Invalid or expired session token."):
        super().__init__(message, error_code="INVALID_TOKEN")


class ForbiddenError(WildwayException):
    """Raised when an authenticated user lacks the required role."""

    def __init__(self, message: str = "You do not have permission to perform this action."):
        super().__init__(message, error_code="FORBIDDEN", status_code=403)


class InvalidOrExpiredTokenError(WildwayException):
    """Raised when a password reset token does not match or has expired."""

    def __init__(self, message: str = "Token is invalid or has expired."):
        super().__init__(message, error_code="INVALID_RESET_TOKEN", status_code=400)


class EmailDeliveryError(WildwayException):
    """Raised when a transactional email could not be handed to the mail server."""

    def __init__(self, message: str = "There was an error sending the email. Try again later."):
        super().__init__(message, error_code="EMAIL_DELIVERY_FAILED", status_code=500)
