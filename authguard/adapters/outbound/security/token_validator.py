# authguard/adapters/outbound/security/token_validator.py

"""
Token parsing and verification.

``parse`` raises one typed error per failure class; ``validate`` adds the
revocation check and the advisory IP comparison; ``is_valid`` collapses every
failure into ``False``. The raw token is never written to the log.
"""

import json
import logging
import time
from typing import Callable, Optional

from jose import jws, jwt
from jose.exceptions import JOSEError

from authguard.adapters.outbound.security.jwt_config import JWT_ALGORITHM, SecretKeyProvider
from authguard.application.ports.outbound.revocation_gate_port import IRevocationGate
from authguard.domain.exceptions import (
    AuthenticationError,
    ClaimsMismatchError,
    ExpiredTokenError,
    MalformedTokenError,
    PrematureTokenError,
    SignatureError,
    TokenRevokedError,
    UnsupportedTokenError,
)
from authguard.domain.models.token import TokenClaims
from authguard.domain.services.auth_service import AuthService
from authguard.shared.utils.input_validation import InputSanitizer

logger = logging.getLogger(__name__)


class TokenValidator:
    """
    Verifies tokens produced by TokenIssuer.

    Checks, in order: structure, algorithm, signature, claim types, issuer and
    audience, not-before and expiry. ``validate`` then consults the
    revocation gate.
    """

    def __init__(
            self,
            key_provider: SecretKeyProvider,
            issuer: str,
            audience: str,
            revocation_gate: IRevocationGate,
            clock: Callable[[], float] = time.time,
    ):
        self._key_provider = key_provider
        self.issuer = issuer
        self.audience = audience
        self.revocation_gate = revocation_gate
        self._clock = clock

    def parse(self, token: str) -> TokenClaims:
        """
        Parse and verify a token without consulting the revocation gate.

        Raises:
            MalformedTokenError: Structural corruption or missing/ill-typed claims.
            UnsupportedTokenError: Algorithm other than HS512.
            SignatureError: Signature does not match.
            ClaimsMismatchError: Issuer or audience differ from the configuration.
            PrematureTokenError: Current time is before ``nbf``.
            ExpiredTokenError: Current time is at or after ``exp``.
        """
        InputSanitizer.validate_token_format(token)

        try:
            header = jwt.get_unverified_header(token)
        except JOSEError as e:
            raise MalformedTokenError("Token header could not be decoded.", original_error=e)

        algorithm = header.get("alg")
        if algorithm != JWT_ALGORITHM:
            raise UnsupportedTokenError(f"Unsupported token algorithm: {algorithm!r}")

        key = self._key_provider.get_signing_key()
        try:
            # Estrutura e algoritmo já verificados: aqui só pode falhar a assinatura
            raw_payload = jws.verify(token, key, algorithms=[JWT_ALGORITHM])
        except JOSEError as e:
            raise SignatureError("Token signature verification failed.", original_error=e)

        try:
            payload = json.loads(raw_payload.decode("utf-8"))
        except (UnicodeDecodeError, ValueError) as e:
            raise MalformedTokenError("Token payload is not valid JSON.", original_error=e)
        if not isinstance(payload, dict):
            raise MalformedTokenError("Token payload is not a JSON object.")

        claims = AuthService.claims_from_payload(payload)

        if claims.issuer != self.issuer:
            raise ClaimsMismatchError(f"Invalid token issuer: {claims.issuer!r}")
        if claims.audience != self.audience:
            raise ClaimsMismatchError(f"Invalid token audience: {claims.audience!r}")

        now = self._clock()
        if now < claims.not_before:
            raise PrematureTokenError(f"Token jti={claims.jti} is not valid before {claims.not_before}")
        if now >= claims.expires_at:
            raise ExpiredTokenError(f"Token jti={claims.jti} expired at {claims.expires_at}")

        return claims

    def validate(self, token: str, current_ip: Optional[str] = None) -> TokenClaims:
        """
        Parse a token, reject it when revoked and compare the client IP.

        An IP different from the one bound at issuance is logged and tolerated
        (mobile and NAT clients change addresses).

        Raises:
            TokenError subclasses: see ``parse``.
            TokenRevokedError: The jti has been revoked.
        """
        claims = self.parse(token)

        if self.revocation_gate.is_revoked(claims.jti):
            logger.warning(f"Revoked token used: jti={claims.jti} user_id={claims.user_id}")
            raise TokenRevokedError(f"Token jti={claims.jti} has been revoked.")

        if current_ip is not None:
            normalized_ip = InputSanitizer.sanitize_ip_address(current_ip)
            if normalized_ip != claims.ip_address:
                InputSanitizer.log_security_event(
                    "TOKEN_IP_MISMATCH",
                    f"jti={claims.jti} bound_ip={claims.ip_address}",
                    current_ip,
                    claims.user_id,
                )

        return claims

    def is_valid(self, token: str, current_ip: Optional[str] = None) -> bool:
        """Return True when ``validate`` succeeds; never raises for token failures."""
        try:
            self.validate(token, current_ip)
            return True
        except ExpiredTokenError as e:
            logger.warning(f"Expired token: {e.message}")
        except (SignatureError, MalformedTokenError, UnsupportedTokenError) as e:
            logger.error(f"Token rejected [{e.internal_code}]: {e.message}")
        except AuthenticationError as e:
            logger.warning(f"Token rejected [{e.internal_code}]: {e.message}")
        return False
