# authguard/domain/services/auth_service.py

from typing import Any, Dict, Optional

from authguard.domain.exceptions import MalformedTokenError
from authguard.domain.models.token import DEFAULT_ROLE, TokenClaims, TokenType


class AuthService:
    """
    Domain service for token payload construction and interpretation.
    """

    REQUIRED_CLAIMS = (
        "sub", "iss", "aud", "iat", "nbf", "exp",
        "userId", "userAccount", "tokenType", "ipAddress", "jti",
    )

    @staticmethod
    def create_token_payload(
            user_id: int,
            user_account: str,
            token_type: TokenType,
            ip_address: str,
            issuer: str,
            audience: str,
            issued_at: int,
            ttl_seconds: int,
            jti: str,
            role: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Create a token payload with standard and application claims.

        Args:
            user_id: Numeric identity
            user_account: Account name, also used as the subject
            token_type: access or refresh
            ip_address: Client IP at issuance time
            issuer: Configured issuer
            audience: Configured audience
            issued_at: Epoch seconds used for both iat and nbf
            ttl_seconds: Lifetime added to issued_at to build exp
            jti: Unique token identifier
            role: Optional role claim

        Returns:
            Dict with all token claims
        """
        return {
            "sub": user_account,
            "iss": issuer,
            "aud": audience,
            "iat": issued_at,
            "nbf": issued_at,
            "exp": issued_at + ttl_seconds,
            "userId": int(user_id),
            "userAccount": user_account,
            "tokenType": TokenType(token_type).value,
            "ipAddress": ip_address,
            "jti": jti,
            "role": role or DEFAULT_ROLE,
        }

    @classmethod
    def claims_from_payload(cls, payload: Dict[str, Any]) -> TokenClaims:
        """
        Convert a decoded payload into typed claims.

        Raises:
            MalformedTokenError: If a required claim is missing or has the wrong type.
        """
        missing = [k for k in cls.REQUIRED_CLAIMS if k not in payload]
        if missing:
            raise MalformedTokenError(f"Token is missing required claims: {', '.join(missing)}")

        user_id = payload["userId"]
        # bool is an int subclass
        if isinstance(user_id, bool) or not isinstance(user_id, int):
            raise MalformedTokenError("Claim 'userId' must be an integer.")

        for name in ("iat", "nbf", "exp"):
            value = payload[name]
            if isinstance(value, bool) or not isinstance(value, int):
                raise MalformedTokenError(f"Claim '{name}' must be an integer timestamp.")

        for name in ("sub", "iss", "aud", "userAccount", "ipAddress", "jti"):
            if not isinstance(payload[name], str):
                raise MalformedTokenError(f"Claim '{name}' must be a string.")

        try:
            token_type = TokenType(payload["tokenType"])
        except ValueError:
            raise MalformedTokenError(f"Unknown token type: {payload['tokenType']!r}")

        role = payload.get("role") or DEFAULT_ROLE
        if not isinstance(role, str):
            raise MalformedTokenError("Claim 'role' must be a string.")

        return TokenClaims(
            subject=payload["sub"],
            user_id=user_id,
            user_account=payload["userAccount"],
            token_type=token_type,
            issuer=payload["iss"],
            audience=payload["aud"],
            issued_at=payload["iat"],
            not_before=payload["nbf"],
            expires_at=payload["exp"],
            jti=payload["jti"],
            ip_address=payload["ipAddress"],
            role=role,
        )
