# authguard/adapters/outbound/persistence/models/token_blacklist_model.py

"""
Modelo para blacklist de tokens.

Stores revoked token identifiers until the token would have expired anyway,
so that a revoked jti is rejected across processes.
"""

from sqlalchemy import Column, DateTime, String

from authguard.adapters.outbound.persistence.models.base_model import Base


class TokenBlacklist(Base):
    """
    Revoked token.

    Attributes:
        jti: Token identifier (URL-safe, 43 characters for 32 random bytes)
        expires_at: Natural expiry of the token (naive UTC)
        revoked_at: When the token was revoked (naive UTC)
    """
    __tablename__ = "token_blacklist"

    jti = Column(String(128), primary_key=True)
    expires_at = Column(DateTime(timezone=False), nullable=False, index=True)  # explicitamente timezone=False
    revoked_at = Column(DateTime(timezone=False), nullable=False)
