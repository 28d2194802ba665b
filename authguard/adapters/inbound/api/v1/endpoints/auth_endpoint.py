# authguard/adapters/inbound/api/v1/endpoints/auth_endpoint.py

"""
Endpoints de autenticação baseada em tokens.

This module provides endpoints for:
- Token refresh (body, Bearer header or cookie)
- Logout (revocation and cookie removal)
- Identity of the current caller
"""

import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends, Request, Response, status

from authguard.adapters.configuration.container import SecurityContainer
from authguard.adapters.inbound.api.deps import get_access_resolution, get_client_ip, get_container
from authguard.adapters.outbound.security.jwt_cookies import ACCESS_TOKEN_COOKIE, REFRESH_TOKEN_COOKIE
from authguard.application.dtos.auth_dto import IdentityOutput, LogoutOutput, RefreshTokenRequest, TokenData
from authguard.domain.models.token import AccessResolution, TokenType
from authguard.shared.utils.error_responses import auth_errors, common_errors

# Configurar logger
logger = logging.getLogger(__name__)

# O prefixo "/api/v1" vem do api_router
router = APIRouter(
    prefix="/auth",
    tags=["Authentication"],
    responses={404: {"description": "Not found"}}
)


@router.post(
    "/refresh",
    response_model=TokenData,
    status_code=status.HTTP_200_OK,
    summary="Refresh access token",
    description="Issues a new access token from a refresh token sent in the body, "
                "the Bearer header or the refresh_token cookie. The refresh token is "
                "rotated when rotation is enabled.",
    responses=auth_errors,
)
def refresh_token(
        request: Request,
        response: Response,
        payload: Optional[RefreshTokenRequest] = Body(default=None),
        client_ip: str = Depends(get_client_ip),
        container: SecurityContainer = Depends(get_container),
):
    """
    Renova o access token e regrava os cookies.
    """
    transport = container.cookie_transport
    token = (
        (payload.refresh_token if payload else None)
        or transport.get_bearer_token(request)
        or transport.get_token_from_cookie(request, REFRESH_TOKEN_COOKIE)
    )

    pair = container.refresh_coordinator.refresh_session(token, client_ip)

    transport.set_token_cookie(response, pair.access_token, TokenType.access)
    transport.set_token_cookie(response, pair.refresh_token, TokenType.refresh)

    return TokenData(
        access_token=pair.access_token,
        refresh_token=pair.refresh_token,
        expires_at=pair.expires_at,
    )


@router.post(
    "/logout",
    response_model=LogoutOutput,
    status_code=status.HTTP_200_OK,
    summary="Logout",
    description="Revokes the presented access and refresh tokens until their expiry and clears the token cookies.",
    responses=common_errors,
)
def logout(
        request: Request,
        response: Response,
        payload: Optional[RefreshTokenRequest] = Body(default=None),
        container: SecurityContainer = Depends(get_container),
):
    """
    Revoga os tokens apresentados e remove os cookies.

    Always succeeds: tokens that are already expired or unusable are skipped.
    """
    transport = container.cookie_transport
    access_token = transport.extract_token(request, ACCESS_TOKEN_COOKIE)
    refresh_token_value = (
        (payload.refresh_token if payload else None)
        or transport.get_token_from_cookie(request, REFRESH_TOKEN_COOKIE)
    )

    revoked = container.refresh_coordinator.logout(access_token, refresh_token_value)
    transport.clear_token_cookies(response)

    return LogoutOutput(revoked_tokens=revoked)


@router.get(
    "/me",
    response_model=IdentityOutput,
    summary="Current identity",
    description="Returns the identity carried by the caller's access token.",
    responses=auth_errors,
)
def read_current_identity(resolution: AccessResolution = Depends(get_access_resolution)):
    return IdentityOutput.from_claims(resolution.claims, resolution.state)
