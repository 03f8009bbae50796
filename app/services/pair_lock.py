"""
Desire — Per-pair serialization for like / unmatch / conversation start.

Two users acting on each other at the same instant (A likes B while B likes
A) must not interleave between the reciprocal-like check and the match
write.  Every pair-scoped operation therefore runs while holding a lock keyed
by the canonical unordered pair ``pair:<min>:<max>``:

* ``RedisPairLock``  — redis-py asyncio ``Lock``; serializes across
  processes and hosts.
* ``LocalPairLock``  — ``asyncio.Lock`` per key; single-process deployments
  and tests.
* ``NullPairLock``   — no serialization.  The engine still never writes a
  duplicate match row (unique constraint + idempotent insert).
"""

from __future__ import annotations

import asyncio
import uuid
from contextlib import asynccontextmanager
from typing import AsyncIterator

import structlog

from app.errors import InternalError
from app.models.match import canonical_pair

logger = structlog.get_logger("desire.pair_lock")


def pair_key(a: uuid.UUID, b: uuid.UUID) -> str:
    low, high = canonical_pair(a, b)
    return f"pair:{low}:{high}"


class PairLockTimeout(InternalError):
    default_message = "Another action on this pair is in progress. Please retry."


class NullPairLock:
    """Pass-through lock: operations on the same pair may interleave."""

    @asynccontextmanager
    async def hold(self, a: uuid.UUID, b: uuid.UUID) -> AsyncIterator[None]:
        yield


class LocalPairLock:
    """In-process lock table keyed by unordered pair.

    Entries are reference-counted and dropped when the last holder or waiter
    leaves, so the table only ever contains pairs with in-flight actions.
    """

    def __init__(self, wait_seconds: float = 5.0) -> None:
        self.wait_seconds = wait_seconds
        self._locks: dict[str, asyncio.Lock] = {}
        self._refs: dict[str, int] = {}

    @asynccontextmanager
    async def hold(self, a: uuid.UUID, b: uuid.UUID) -> AsyncIterator[None]:
        key = pair_key(a, b)
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._refs[key] = self._refs.get(key, 0) + 1
        try:
            try:
                await asyncio.wait_for(lock.acquire(), timeout=self.wait_seconds)
            except asyncio.TimeoutError:
                logger.warning("pair_lock_timeout", key=key, backend="local")
                raise PairLockTimeout()
            try:
                yield
            finally:
                lock.release()
        finally:
            self._refs[key] -= 1
            if self._refs[key] == 0:
                del self._refs[key]
                del self._locks[key]

    @property
    def size(self) -> int:
        """Number of pairs with an in-flight holder or waiter."""
        return len(self._locks)


class RedisPairLock:
    """Distributed lock backed by ``redis.asyncio``.

    ``timeout_seconds`` bounds how long a crashed holder can block the pair;
    ``wait_seconds`` bounds how long a caller waits before giving up.
    """

    def __init__(
        self,
        redis_client,
        timeout_seconds: float = 10.0,
        wait_seconds: float = 5.0,
        prefix: str = "desire",
    ) -> None:
        self.redis = redis_client
        self.timeout_seconds = timeout_seconds
        self.wait_seconds = wait_seconds
        self.prefix = prefix

    @asynccontextmanager
    async def hold(self, a: uuid.UUID, b: uuid.UUID) -> AsyncIterator[None]:
        from redis.exceptions import LockError

        key = f"{self.prefix}:{pair_key(a, b)}"
        lock = self.redis.lock(
            key,
            timeout=self.timeout_seconds,
            blocking_timeout=self.wait_seconds,
        )
        acquired = await lock.acquire()
        if not acquired:
            logger.warning("pair_lock_timeout", key=key, backend="redis")
            raise PairLockTimeout()
        try:
            yield
        finally:
            try:
                await lock.release()
            except LockError:
                # Expired while held; the critical section already committed.
                logger.warning("pair_lock_release_failed", key=key)
