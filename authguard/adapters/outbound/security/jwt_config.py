# authguard/adapters/outbound/security/jwt_config.py

"""Signing key and algorithm configuration for access and refresh tokens."""

import base64
import binascii
import logging
from typing import Optional, Union

from pydantic import SecretStr

from authguard.domain.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

JWT_ALGORITHM: str = "HS512"

MIN_SECRET_LENGTH = 32
# HS512 recommends a key at least as long as the hash output
RECOMMENDED_KEY_BYTES = 64


class SecretKeyProvider:
    """
    Derives the HMAC signing key from the configured secret.

    The secret is the base64 representation of the key bytes. It is checked and
    decoded on first use; the resulting key is read-only afterwards.
    """

    def __init__(self, secret: Optional[Union[str, SecretStr]]):
        self._secret = secret.get_secret_value() if isinstance(secret, SecretStr) else secret
        self._key: Optional[bytes] = None

    def get_signing_key(self) -> bytes:
        """
        Return the signing key.

        Raises:
            ConfigurationError: If the secret is missing, shorter than 32
                characters or not valid base64.
        """
        if self._key is None:
            self._key = self._derive_key(self._secret)
        return self._key

    @staticmethod
    def _derive_key(secret: Optional[str]) -> bytes:
        if secret is None or not secret.strip():
            raise ConfigurationError("JWT secret is not configured.")

        if len(secret) < MIN_SECRET_LENGTH:
            raise ConfigurationError(
                f"JWT secret is too short ({len(secret)} characters, minimum {MIN_SECRET_LENGTH})."
            )

        try:
            key = base64.b64decode(secret.encode("utf-8"), validate=True)
        except (binascii.Error, ValueError) as e:
            raise ConfigurationError("JWT secret is not valid base64.", original_error=e)

        if not key:
            raise ConfigurationError("JWT secret decodes to an empty key.")

        if len(key) < RECOMMENDED_KEY_BYTES:
            logger.warning(
                f"JWT signing key has {len(key) * 8} bits; {RECOMMENDED_KEY_BYTES * 8} bits are recommended for {JWT_ALGORITHM}"
            )

        return key
