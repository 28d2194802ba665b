# authguard/domain/models/token.py

"""
Token value objects.

Tokens are never persisted: they are signed, self-describing values. These
types describe what a verified token carries once the validator has accepted
it.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional


class TokenType(str, Enum):
    access = "access"
    refresh = "refresh"


class AccessState(str, Enum):
    """States of the access/refresh state machine."""

    active_access = "active_access"
    needs_refresh = "needs_refresh"


DEFAULT_ROLE = "USER"


@dataclass(frozen=True)
class TokenClaims:
    """
    Verified claims of a token.

    Attributes:
        subject: Account the token was issued to (``sub``)
        user_id: Numeric identity (``userId``)
        user_account: Account name (``userAccount``)
        token_type: access or refresh (``tokenType``)
        issuer: ``iss``
        audience: ``aud``
        issued_at: ``iat`` in epoch seconds
        not_before: ``nbf`` in epoch seconds
        expires_at: ``exp`` in epoch seconds
        jti: Unique token identifier, the unit of revocation
        ip_address: Client IP captured at issuance (``ipAddress``)
        role: Role claim consumed by authorization checks
    """

    subject: str
    user_id: int
    user_account: str
    token_type: TokenType
    issuer: str
    audience: str
    issued_at: int
    not_before: int
    expires_at: int
    jti: str
    ip_address: str
    role: str = DEFAULT_ROLE

    @property
    def is_access(self) -> bool:
        return self.token_type is TokenType.access

    @property
    def is_refresh(self) -> bool:
        return self.token_type is TokenType.refresh

    @property
    def expires_at_datetime(self) -> datetime:
        return datetime.fromtimestamp(self.expires_at, tz=timezone.utc)

    @property
    def issued_at_datetime(self) -> datetime:
        return datetime.fromtimestamp(self.issued_at, tz=timezone.utc)


@dataclass(frozen=True)
class TokenPair:
    """Access token plus the refresh token that can renew it."""

    access_token: str
    refresh_token: str
    expires_at: datetime


@dataclass(frozen=True)
class AccessResolution:
    """Outcome of resolving an access token, possibly after a renewal."""

    state: AccessState
    claims: TokenClaims
    renewed_access_token: Optional[str] = None
