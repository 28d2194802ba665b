# authguard/adapters/outbound/security/token_issuer.py

import logging
import secrets
import time
from datetime import datetime, timezone
from typing import Callable, Optional

from jose import jwt

from authguard.adapters.outbound.security.jwt_config import JWT_ALGORITHM, SecretKeyProvider
from authguard.domain.models.token import TokenPair, TokenType
from authguard.domain.services.auth_service import AuthService
from authguard.shared.utils.input_validation import InputSanitizer

# Configure logger
logger = logging.getLogger(__name__)

JTI_RANDOM_BYTES = 32


class TokenIssuer:
    """
    Builds and signs access and refresh tokens.

    Responsibilities:
    - Claim construction (standard claims plus identity, type, IP and jti)
    - HS512 signing with the key from SecretKeyProvider
    """

    def __init__(
            self,
            key_provider: SecretKeyProvider,
            issuer: str,
            audience: str,
            access_ttl_seconds: int,
            refresh_ttl_seconds: int,
            clock: Callable[[], float] = time.time,
    ):
        self._key_provider = key_provider
        self.issuer = issuer
        self.audience = audience
        self._ttl = {
            TokenType.access: access_ttl_seconds,
            TokenType.refresh: refresh_ttl_seconds,
        }
        self._clock = clock

    def ttl_seconds(self, token_type: TokenType) -> int:
        return self._ttl[TokenType(token_type)]

    @staticmethod
    def generate_jti() -> str:
        """32 CSPRNG bytes, URL-safe base64 without padding."""
        return secrets.token_urlsafe(JTI_RANDOM_BYTES)

    def issue(
            self,
            user_id: int,
            account: str,
            token_type: TokenType,
            client_ip: Optional[str],
            role: Optional[str] = None,
            issued_at: Optional[int] = None,
    ) -> str:
        """
        Create and sign a token.

        Args:
            user_id: Numeric identity
            account: Account name (becomes the subject)
            token_type: access or refresh
            client_ip: Client IP at issuance time
            role: Optional role claim
            issued_at: Issue time (epoch seconds), read from the clock when omitted

        Returns:
            Compact signed token

        Raises:
            ConfigurationError: If the signing key cannot be derived.
        """
        token_type = TokenType(token_type)
        if issued_at is None:
            issued_at = int(self._clock())
        key = self._key_provider.get_signing_key()

        payload = AuthService.create_token_payload(
            user_id=user_id,
            user_account=account,
            token_type=token_type,
            ip_address=InputSanitizer.sanitize_ip_address(client_ip),
            issuer=self.issuer,
            audience=self.audience,
            issued_at=issued_at,
            ttl_seconds=self.ttl_seconds(token_type),
            jti=self.generate_jti(),
            role=role,
        )

        token = jwt.encode(payload, key, algorithm=JWT_ALGORITHM)
        logger.debug(f"{token_type.value} token issued for user_id={user_id} jti={payload['jti']}")
        return token

    def issue_access_token(self, user_id: int, account: str, client_ip: Optional[str],
                           role: Optional[str] = None) -> str:
        return self.issue(user_id, account, TokenType.access, client_ip, role)

    def issue_refresh_token(self, user_id: int, account: str, client_ip: Optional[str],
                            role: Optional[str] = None) -> str:
        return self.issue(user_id, account, TokenType.refresh, client_ip, role)

    def issue_token_pair(self, user_id: int, account: str, client_ip: Optional[str],
                         role: Optional[str] = None) -> TokenPair:
        """Issue the access and refresh tokens handed out at login."""
        issued_at = int(self._clock())
        access_token = self.issue(user_id, account, TokenType.access, client_ip, role, issued_at=issued_at)
        refresh_token = self.issue(user_id, account, TokenType.refresh, client_ip, role, issued_at=issued_at)
        expires_at = datetime.fromtimestamp(issued_at + self.ttl_seconds(TokenType.access), tz=timezone.utc)
        return TokenPair(access_token=access_token, refresh_token=refresh_token, expires_at=expires_at)
