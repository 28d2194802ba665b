# authguard/adapters/inbound/api/deps.py

"""
Dependencies for injection into API endpoints.

This module defines functions that provide dependencies via FastAPI
Depends() for authentication, authorization, client IP resolution and
search input.
"""

import logging
from typing import Callable, Optional

from fastapi import Depends, Query, Request, Response

from authguard.adapters.configuration.container import SecurityContainer
from authguard.adapters.outbound.security.jwt_cookies import ACCESS_TOKEN_COOKIE, REFRESH_TOKEN_COOKIE
from authguard.domain.exceptions import AuthorizationError
from authguard.domain.models.token import AccessResolution, TokenClaims, TokenType
from authguard.shared.utils.input_validation import InputSanitizer

# Configure logger
logger = logging.getLogger(__name__)


def get_container(request: Request) -> SecurityContainer:
    return request.app.state.security


########################################################################
# Client IP
########################################################################


def get_client_ip(request: Request, container: SecurityContainer = Depends(get_container)) -> str:
    """
    Client IP address.

    ``X-Forwarded-For`` is only honoured when TRUST_FORWARDED_FOR is set
    (deployments behind a trusted proxy); otherwise any client could forge it.

    Returns:
        Normalized address, "unknown" or "invalid"
    """
    if container.settings.TRUST_FORWARDED_FOR:
        forwarded_for = request.headers.get("X-Forwarded-For")
        if forwarded_for:
            return InputSanitizer.sanitize_ip_address(forwarded_for.split(",")[0])

    return InputSanitizer.sanitize_ip_address(request.client.host if request.client else None)


########################################################################
# Authentication
########################################################################


def get_access_resolution(
        request: Request,
        response: Response,
        client_ip: str = Depends(get_client_ip),
        container: SecurityContainer = Depends(get_container),
) -> AccessResolution:
    """
    Resolve the caller from the Bearer header or the access token cookie.

    When the access token is missing or expired and a valid refresh token
    cookie is present, a new access token is issued and written to the
    access token cookie of this response.

    Raises:
        AuthenticationError: No usable token.
    """
    transport = container.cookie_transport
    access_token = transport.extract_token(request, ACCESS_TOKEN_COOKIE)
    refresh_token = transport.get_token_from_cookie(request, REFRESH_TOKEN_COOKIE)

    resolution = container.refresh_coordinator.resolve(access_token, refresh_token, client_ip)

    if resolution.renewed_access_token:
        transport.set_token_cookie(response, resolution.renewed_access_token, TokenType.access)
        logger.info(f"Access token renewed in-flight for user_id={resolution.claims.user_id}")

    return resolution


def get_current_identity(resolution: AccessResolution = Depends(get_access_resolution)) -> TokenClaims:
    """
    Claims of the authenticated caller.

    Returns:
        TokenClaims of a verified, non revoked access token
    """
    return resolution.claims


########################################################################
# Authorization
########################################################################


def require_role(*roles: str) -> Callable[..., TokenClaims]:
    """
    Dependency factory restricting an endpoint to the given roles.

    Usage:
        @router.get("/admin", dependencies=[Depends(require_role("ADMIN"))])
    """
    allowed = frozenset(role.upper() for role in roles)

    def dependency(claims: TokenClaims = Depends(get_current_identity)) -> TokenClaims:
        if claims.role.upper() not in allowed:
            logger.warning(
                f"Access denied for user_id={claims.user_id}: role {claims.role} not in {sorted(allowed)}"
            )
            raise AuthorizationError(f"Role {claims.role} is not allowed.")
        return claims

    return dependency


########################################################################
# Search input
########################################################################


def get_search_keyword(
        keyword: Optional[str] = Query(default=None, description="Search keyword (LIKE-escaped)"),
) -> str:
    """
    Sanitized, LIKE-escaped search keyword ("" when absent).

    Raises:
        SecurityViolation: SQL keyword or forbidden character.
    """
    return InputSanitizer.sanitize_search_keyword(keyword)
