# authguard/adapters/outbound/persistence/repositories/token_repository.py

from datetime import datetime, timezone

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from authguard.adapters.outbound.persistence.models.token_blacklist_model import TokenBlacklist
from authguard.domain.exceptions import DatabaseOperationException


def _naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class TokenRepository:
    """Repository for managing token blacklist."""

    @staticmethod
    def add_to_blacklist(db: Session, jti: str, expires_at: datetime,
                         revoked_at: datetime) -> TokenBlacklist:
        """
        Add a token to the blacklist.

        Revoking the same jti twice keeps a single row with the later expiry.

        Args:
            db: Database session
            jti: JWT ID to blacklist
            expires_at: When the token naturally expires
            revoked_at: When the token was manually revoked

        Returns:
            The TokenBlacklist record
        """
        expires_at = _naive_utc(expires_at)
        revoked_at = _naive_utc(revoked_at)
        try:
            token = db.get(TokenBlacklist, jti)
            if token is None:
                token = TokenBlacklist(jti=jti, expires_at=expires_at, revoked_at=revoked_at)
                db.add(token)
            elif token.expires_at < expires_at:
                token.expires_at = expires_at
            db.commit()
            db.refresh(token)
            return token
        except IntegrityError:
            # revogado em paralelo por outro worker
            db.rollback()
            return db.get(TokenBlacklist, jti)
        except SQLAlchemyError as e:
            db.rollback()
            raise DatabaseOperationException(
                message="Error adding token to blacklist",
                original_error=e
            )

    @staticmethod
    def insert_once(db: Session, jti: str, expires_at: datetime, revoked_at: datetime) -> bool:
        """
        Insert a blacklist row unless one already exists for ``jti``.

        The primary key decides between concurrent callers.

        Returns:
            True if this call inserted the row, False if the jti was already there
        """
        try:
            db.add(TokenBlacklist(
                jti=jti,
                expires_at=_naive_utc(expires_at),
                revoked_at=_naive_utc(revoked_at),
            ))
            db.commit()
            return True
        except IntegrityError:
            db.rollback()
            return False
        except SQLAlchemyError as e:
            db.rollback()
            raise DatabaseOperationException(
                message="Error consuming token",
                original_error=e
            )

    @staticmethod
    def is_blacklisted(db: Session, jti: str) -> bool:
        """
        Check if a token is in the blacklist and has not yet expired.

        Args:
            db: Database session
            jti: JWT ID to check

        Returns:
            True if token is blacklisted, False otherwise
        """
        try:
            now = datetime.now(timezone.utc).replace(tzinfo=None)
            query = select(TokenBlacklist.jti).where(
                TokenBlacklist.jti == jti,
                TokenBlacklist.expires_at > now,
            )
            return db.execute(query).scalar_one_or_none() is not None
        except SQLAlchemyError as e:
            raise DatabaseOperationException(
                message="Error checking token blacklist",
                original_error=e
            )

    @staticmethod
    def cleanup_expired(db: Session) -> int:
        """
        Remove expired tokens from blacklist to keep the table size manageable.

        Args:
            db: Database session

        Returns:
            Number of records deleted
        """
        try:
            now = datetime.now(timezone.utc).replace(tzinfo=None)
            result = db.execute(delete(TokenBlacklist).where(TokenBlacklist.expires_at <= now))
            db.commit()
            return result.rowcount or 0
        except SQLAlchemyError as e:
            db.rollback()
            raise DatabaseOperationException(
                message="Error cleaning up expired blacklisted tokens",
                original_error=e
            )


# Create singleton instance
token_repository = TokenRepository()
