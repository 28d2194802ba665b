# authguard/adapters/outbound/security/revocation.py

"""
Revocation gate implementations.

InMemoryRevocationGate is the default: bounded, TTL-evicting and local to the
process. Deployments with more than one worker need SqlRevocationGate (or any
other IRevocationGate backed by a shared store).
"""

import contextlib
import heapq
import logging
import threading
import time
from datetime import datetime, timezone
from typing import Callable, Dict, List, Tuple

from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from authguard.adapters.outbound.persistence.database import build_session_factory, shares_single_connection
from authguard.adapters.outbound.persistence.repositories.token_repository import token_repository
from authguard.application.ports.outbound.revocation_gate_port import IRevocationGate

logger = logging.getLogger(__name__)


def _to_epoch(value: datetime) -> float:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.timestamp()


class InMemoryRevocationGate(IRevocationGate):
    """
    Process-local revocation list.

    Entries are dropped once their token would have expired anyway.

    The list holds at most ``max_entries`` identifiers. When it is full, the
    entry closest to expiry is evicted to make room, and the token it belonged
    to is accepted again for the rest of its lifetime. Size
    REVOCATION_MEMORY_MAX_ENTRIES for the expected number of revocations per
    refresh TTL, or use the database backend.
    """

    def __init__(self, max_entries: int = 100_000, clock: Callable[[], float] = time.time):
        if max_entries <= 0:
            raise ValueError("max_entries must be positive")
        self.max_entries = max_entries
        self._clock = clock
        self._entries: Dict[str, float] = {}
        self._expiry_heap: List[Tuple[float, str]] = []
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            self._purge_expired(self._clock())
            return len(self._entries)

    def is_revoked(self, jti: str) -> bool:
        with self._lock:
            return self._is_revoked(jti, self._clock())

    def revoke(self, jti: str, expires_at: datetime) -> None:
        expires_epoch = _to_epoch(expires_at)
        with self._lock:
            self._store(jti, expires_epoch, self._clock())
        logger.info(f"Token revoked: jti={jti}")

    def consume(self, jti: str, expires_at: datetime) -> bool:
        expires_epoch = _to_epoch(expires_at)
        with self._lock:
            now = self._clock()
            if self._is_revoked(jti, now):
                logger.warning(f"Token already consumed: jti={jti}")
                return False
            self._store(jti, expires_epoch, now)
        logger.info(f"Token consumed: jti={jti}")
        return True

    def cleanup_expired(self) -> int:
        with self._lock:
            before = len(self._entries)
            self._purge_expired(self._clock())
            return before - len(self._entries)

    def _is_revoked(self, jti: str, now: float) -> bool:
        expires_at = self._entries.get(jti)
        if expires_at is None:
            return False
        if now >= expires_at:
            del self._entries[jti]
            return False
        return True

    def _store(self, jti: str, expires_epoch: float, now: float) -> None:
        if expires_epoch <= now:
            # already expired tokens are rejected by the validator
            return

        self._purge_expired(now)

        previous = self._entries.get(jti)
        if previous is not None and previous >= expires_epoch:
            return

        while len(self._entries) >= self.max_entries and self._expiry_heap:
            self._evict_one()

        self._entries[jti] = expires_epoch
        heapq.heappush(self._expiry_heap, (expires_epoch, jti))

    def _purge_expired(self, now: float) -> None:
        while self._expiry_heap and self._expiry_heap[0][0] <= now:
            expires_epoch, jti = heapq.heappop(self._expiry_heap)
            if self._entries.get(jti) == expires_epoch:
                del self._entries[jti]

    def _evict_one(self) -> None:
        expires_epoch, jti = heapq.heappop(self._expiry_heap)
        if self._entries.get(jti) == expires_epoch:
            del self._entries[jti]
            logger.warning(
                f"Revocation list full ({self.max_entries}); evicted jti={jti}, "
                "which is accepted again until it expires"
            )


class SqlRevocationGate(IRevocationGate):
    """
    Durable revocation list stored in the ``token_blacklist`` table.

    With ``serialize=True`` every session runs under one lock. Required when
    the engine hands the same DBAPI connection to every thread (in-memory
    SQLite).
    """

    def __init__(self, session_factory: sessionmaker, serialize: bool = False):
        self._session_factory = session_factory
        self._lock = threading.Lock() if serialize else contextlib.nullcontext()

    @classmethod
    def from_engine(cls, engine: Engine) -> "SqlRevocationGate":
        return cls(build_session_factory(engine), serialize=shares_single_connection(engine))

    def is_revoked(self, jti: str) -> bool:
        with self._lock, self._session_factory() as db:
            return token_repository.is_blacklisted(db, jti)

    def revoke(self, jti: str, expires_at: datetime) -> None:
        with self._lock, self._session_factory() as db:
            token_repository.add_to_blacklist(
                db,
                jti=jti,
                expires_at=expires_at,
                revoked_at=datetime.now(timezone.utc),
            )
        logger.info(f"Token revoked (database): jti={jti}")

    def consume(self, jti: str, expires_at: datetime) -> bool:
        with self._lock, self._session_factory() as db:
            consumed = token_repository.insert_once(
                db,
                jti=jti,
                expires_at=expires_at,
                revoked_at=datetime.now(timezone.utc),
            )
        if consumed:
            logger.info(f"Token consumed (database): jti={jti}")
        else:
            logger.warning(f"Token already consumed (database): jti={jti}")
        return consumed

    def cleanup_expired(self) -> int:
        with self._lock, self._session_factory() as db:
            return token_repository.cleanup_expired(db)
