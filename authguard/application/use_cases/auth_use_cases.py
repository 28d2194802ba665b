# authguard/application/use_cases/auth_use_cases.py

"""
Token renewal and session termination.

This module implements the access/refresh state machine:

    ActiveAccess --(access token expired)--> NeedsRefresh --(refresh)--> ActiveAccess

A refresh token can only mint access tokens and an access token can never be
used as a refresh token.
"""

import logging
from typing import Optional

from authguard.adapters.outbound.security.token_issuer import TokenIssuer
from authguard.adapters.outbound.security.token_validator import TokenValidator
from authguard.application.ports.outbound.revocation_gate_port import IRevocationGate
from authguard.domain.exceptions import AuthenticationError, ExpiredTokenError, TokenError
from authguard.domain.models.token import AccessResolution, AccessState, TokenClaims, TokenPair, TokenType

logger = logging.getLogger(__name__)


class RefreshCoordinator:
    """
    Application service for token renewal.

    Responsibilities:
    - Issue new access tokens from verified refresh tokens
    - Optionally rotate refresh tokens (single use)
    - Decide between ActiveAccess and NeedsRefresh for a request
    - Revoke tokens on logout
    """

    def __init__(
            self,
            issuer: TokenIssuer,
            validator: TokenValidator,
            revocation_gate: IRevocationGate,
            rotate_refresh_tokens: bool = True,
    ):
        self.issuer = issuer
        self.validator = validator
        self.revocation_gate = revocation_gate
        self.rotate_refresh_tokens = rotate_refresh_tokens

    def _verify_refresh_token(self, refresh_token: Optional[str], current_ip: Optional[str]) -> TokenClaims:
        if not refresh_token:
            raise AuthenticationError("Refresh token missing.")

        try:
            claims = self.validator.validate(refresh_token, current_ip)
        except AuthenticationError as e:
            logger.warning(f"Invalid refresh token [{e.internal_code}]: {e.message}")
            raise AuthenticationError("Invalid refresh token.", original_error=e) from e

        if claims.token_type is not TokenType.refresh:
            logger.warning(f"Wrong token type presented for refresh: {claims.token_type.value} jti={claims.jti}")
            raise AuthenticationError("Wrong token type: a refresh token is required.")

        return claims

    def refresh(self, refresh_token: str, current_ip: Optional[str]) -> str:
        """
        Issue a new access token from a valid refresh token.

        The refresh token itself stays valid until its own expiry.

        Raises:
            AuthenticationError: Invalid, revoked or expired token, or not a refresh token.
        """
        claims = self._verify_refresh_token(refresh_token, current_ip)
        access_token = self.issuer.issue_access_token(
            claims.user_id, claims.user_account, current_ip, claims.role
        )
        logger.info(f"Access token refreshed for user_id={claims.user_id}")
        return access_token

    def refresh_session(self, refresh_token: str, current_ip: Optional[str]) -> TokenPair:
        """
        Issue a new access token and, when rotation is enabled, a new refresh
        token while revoking the presented one.

        Raises:
            AuthenticationError: See ``refresh``.
        """
        claims = self._verify_refresh_token(refresh_token, current_ip)

        # consume() checks and revokes atomically; only one concurrent refresh wins
        if self.rotate_refresh_tokens and not self.revocation_gate.consume(
                claims.jti, claims.expires_at_datetime):
            logger.warning(f"Refresh token reused: jti={claims.jti} user_id={claims.user_id}")
            raise AuthenticationError("Invalid refresh token.")

        access_token = self.issuer.issue_access_token(
            claims.user_id, claims.user_account, current_ip, claims.role
        )

        if self.rotate_refresh_tokens:
            new_refresh_token = self.issuer.issue_refresh_token(
                claims.user_id, claims.user_account, current_ip, claims.role
            )
            logger.info(f"Refresh token rotated for user_id={claims.user_id} (revoked jti={claims.jti})")
        else:
            new_refresh_token = refresh_token

        access_claims = self.validator.parse(access_token)
        return TokenPair(
            access_token=access_token,
            refresh_token=new_refresh_token,
            expires_at=access_claims.expires_at_datetime,
        )

    def _access_claims(self, access_token: str, current_ip: Optional[str]) -> Optional[TokenClaims]:
        """Verified access claims, or None when the token has only expired."""
        try:
            claims = self.validator.validate(access_token, current_ip)
        except ExpiredTokenError:
            return None

        if claims.token_type is not TokenType.access:
            logger.warning(f"Wrong token type presented as access token: jti={claims.jti}")
            raise AuthenticationError("Wrong token type: an access token is required.")
        return claims

    def state_of(self, access_token: str, current_ip: Optional[str] = None) -> AccessState:
        """
        ActiveAccess for a valid access token, NeedsRefresh when it has only
        expired.

        Raises:
            AuthenticationError: Any other failure, or a refresh token used as access token.
        """
        if self._access_claims(access_token, current_ip) is None:
            return AccessState.needs_refresh
        return AccessState.active_access

    def resolve(
            self,
            access_token: Optional[str],
            refresh_token: Optional[str],
            current_ip: Optional[str] = None,
    ) -> AccessResolution:
        """
        Resolve the caller identity, renewing the access token when needed.

        A missing access token counts as expired (the cookie's Max-Age equals
        the token TTL, so browsers drop it at expiry).

        Raises:
            AuthenticationError: No usable token.
        """
        if access_token:
            claims = self._access_claims(access_token, current_ip)
            if claims is not None:
                return AccessResolution(state=AccessState.active_access, claims=claims)

        if not refresh_token:
            raise AuthenticationError("Missing identity: no valid access token.")

        renewed = self.refresh(refresh_token, current_ip)
        claims = self.validator.parse(renewed)
        return AccessResolution(state=AccessState.needs_refresh, claims=claims, renewed_access_token=renewed)

    def logout(self, access_token: Optional[str], refresh_token: Optional[str] = None) -> int:
        """
        Revoke every presented token until its natural expiry.

        Tokens that no longer parse (expired, forged) are skipped.

        Returns:
            Number of tokens revoked
        """
        revoked = 0
        for token in (access_token, refresh_token):
            if not token:
                continue
            try:
                claims = self.validator.parse(token)
            except TokenError as e:
                logger.info(f"Skipping revocation of unusable token [{e.internal_code}]")
                continue
            self.revocation_gate.revoke(claims.jti, claims.expires_at_datetime)
            revoked += 1

        logger.info(f"Logout revoked {revoked} token(s)")
        return revoked
