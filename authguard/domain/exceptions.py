# authguard/domain/exceptions.py

"""
Domain exceptions.

Every failure raised by the token and sanitization core derives from
DomainException. Each class carries the HTTP status the error handler maps it
to, a stable internal code, and a generic public message that is safe to show
to the caller. The detailed ``message`` is only logged server-side.
"""

from typing import Any, Optional


class DomainException(Exception):
    """Base class for all domain errors."""

    status_code: int = 500
    internal_code: str = "DOMAIN_ERROR"
    public_message: str = "Internal server error."
    # True when ``message`` itself can be returned to the caller
    expose_message: bool = False

    def __init__(
            self,
            message: Optional[str] = None,
            details: Optional[Any] = None,
            original_error: Optional[BaseException] = None,
    ):
        self.message = message or self.public_message
        self.details = details
        self.original_error = original_error
        super().__init__(self.message)


class ConfigurationError(DomainException):
    """Missing or invalid configuration (fatal at startup)."""

    status_code = 500
    internal_code = "CONFIGURATION_ERROR"


class DatabaseOperationException(DomainException):
    """A storage backend failed."""

    status_code = 500
    internal_code = "DATABASE_ERROR"


# ───────────────────────────── Authentication ─────────────────────────────


class AuthenticationError(DomainException):
    """The caller could not be authenticated."""

    status_code = 401
    internal_code = "AUTHENTICATION_FAILED"
    public_message = "Authentication required."


class TokenError(AuthenticationError):
    """Base class for token parsing and verification failures."""

    internal_code = "INVALID_TOKEN"
    public_message = "Invalid or expired token."


class MalformedTokenError(TokenError):
    internal_code = "MALFORMED_TOKEN"


class SignatureError(TokenError):
    internal_code = "INVALID_SIGNATURE"


class ExpiredTokenError(TokenError):
    internal_code = "EXPIRED_TOKEN"


class PrematureTokenError(TokenError):
    internal_code = "TOKEN_NOT_YET_VALID"


class UnsupportedTokenError(TokenError):
    internal_code = "UNSUPPORTED_TOKEN"


class ClaimsMismatchError(TokenError):
    """Issuer or audience do not match the configured values."""

    internal_code = "INVALID_CLAIMS"


class TokenRevokedError(AuthenticationError):
    internal_code = "TOKEN_REVOKED"
    public_message = "Invalid or expired token."


# ───────────────────────────── Authorization ─────────────────────────────


class AuthorizationError(DomainException):
    """Authenticated, but the role does not allow the operation."""

    status_code = 403
    internal_code = "FORBIDDEN"
    public_message = "Access denied."


# ───────────────────────────── Input security ─────────────────────────────


class SecurityViolation(DomainException):
    """Input rejected by the sanitizer or the upload validator."""

    status_code = 400
    internal_code = "SECURITY_VIOLATION"
    public_message = "Request rejected by security policy."
    expose_message = True
