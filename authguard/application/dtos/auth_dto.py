# authguard/application/dtos/auth_dto.py

"""
Schemas for the token endpoints.

These DTOs validate refresh requests and serialize token and identity data.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from authguard.application.dtos.base_dto import CustomBaseModel
from authguard.domain.models.token import AccessState, TokenClaims


class RefreshTokenRequest(CustomBaseModel):
    """
    Schema for a refresh token request.

    The body is optional on the endpoint: the token can also come from the
    Bearer header or the ``refresh_token`` cookie.
    """
    refresh_token: Optional[str] = Field(
        default=None, description="Refresh token for obtaining a new access token."
    )


class TokenData(CustomBaseModel):
    """
    Schema for authentication token data.

    Used to return the tokens and the access token expiration.
    """
    access_token: str = Field(..., description="Signed access token.")
    refresh_token: str = Field(..., description="Refresh token for obtaining new access tokens.")
    token_type: str = Field(default="bearer", description="Authorization scheme for the access token.")
    expires_at: datetime = Field(..., description="Access token expiration date and time (UTC).")


class LogoutOutput(CustomBaseModel):
    detail: str = Field(default="Logout successful")
    revoked_tokens: int = Field(..., description="Number of tokens revoked until their expiry.")


class IdentityOutput(CustomBaseModel):
    """
    Identity of the authenticated caller, taken from the verified access token.
    """
    user_id: int
    user_account: str
    role: str
    jti: str
    expires_at: datetime
    state: AccessState = Field(
        ..., description="active_access, or needs_refresh when the access token was renewed on this request."
    )

    @classmethod
    def from_claims(cls, claims: TokenClaims, state: AccessState) -> "IdentityOutput":
        return cls(
            user_id=claims.user_id,
            user_account=claims.user_account,
            role=claims.role,
            jti=claims.jti,
            expires_at=claims.expires_at_datetime,
            state=state,
        )
