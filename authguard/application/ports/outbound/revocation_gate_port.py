# authguard/application/ports/outbound/revocation_gate_port.py

from abc import ABC, abstractmethod
from datetime import datetime


class IRevocationGate(ABC):
    """
    Revoked token identifiers (jti).

    Implementations backed by a shared store must provide their own
    consistency guarantees; an in-process lock is not enough across workers.
    """

    @abstractmethod
    def is_revoked(self, jti: str) -> bool:
        pass

    @abstractmethod
    def revoke(self, jti: str, expires_at: datetime) -> None:
        """Mark ``jti`` as revoked until its natural expiry."""
        pass

    @abstractmethod
    def consume(self, jti: str, expires_at: datetime) -> bool:
        """
        Revoke ``jti`` in a single atomic step.

        Returns:
            False when ``jti`` was already revoked, True otherwise
        """
        pass

    @abstractmethod
    def cleanup_expired(self) -> int:
        """Drop entries whose token has expired; returns how many were removed."""
        pass
