"""
Rate Limit Service - fixed-window limiting for the contact form.

Each client identifier gets ``max_requests`` attempts per window. A window
starts at the client's first request and is never extended by later ones.

Note: the default store is in-memory and process-local. With several
instances behind a load balancer each keeps its own counters, so the
effective limit is ``max_requests`` times the instance count. Swap in a
shared ``RateLimitStore`` implementation to lift that.
"""

import math
import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Optional

from models.config import settings


@dataclass(frozen=True)
class RateLimitConfig:
    window_ms: int
    max_requests: int


@dataclass
class RateLimitEntry:
    count: int
    reset_time: float  # epoch milliseconds


@dataclass(frozen=True)
class RateLimitResult:
    """Outcome of one rate-limit check."""

    allowed: bool
    remaining: int
    reset_time: float  # epoch milliseconds
    limit: int

    def retry_after_seconds(self, now: Optional[float] = None) -> int:
        """Whole seconds until the window resets, never negative."""
        now = _now_ms() if now is None else now
        return max(0, math.ceil((self.reset_time - now) / 1000))


def _now_ms() -> float:
    return time.time() * 1000


def get_rate_limit_config() -> RateLimitConfig:
    """Read the window and quota from settings."""
    return RateLimitConfig(
        window_ms=settings.RATE_LIMIT_WINDOW_MS,
        max_requests=settings.RATE_LIMIT_MAX_REQUESTS,
    )


class RateLimitStore(ABC):
    """Storage for per-identifier rate-limit entries."""

    lock: threading.Lock

    @abstractmethod
    def get(self, identifier: str) -> Optional[RateLimitEntry]:
        pass

    @abstractmethod
    def set(self, identifier: str, entry: RateLimitEntry) -> None:
        pass

    @abstractmethod
    def sweep(self, now: float) -> int:
        """Drop entries whose window ended before *now*. Returns the count dropped."""
        pass

    @abstractmethod
    def clear(self) -> None:
        pass

    @abstractmethod
    def __len__(self) -> int:
        pass


class InMemoryRateLimitStore(RateLimitStore):
    """Process-local store backed by a dict."""

    def __init__(self) -> None:
        self._entries: Dict[str, RateLimitEntry] = {}
        # Sync endpoints run in a threadpool, so check-and-increment is locked
        self.lock = threading.Lock()

    def get(self, identifier: str) -> Optional[RateLimitEntry]:
        return self._entries.get(identifier)

    def set(self, identifier: str, entry: RateLimitEntry) -> None:
        self._entries[identifier] = entry

    def sweep(self, now: float) -> int:
        expired = [key for key, entry in self._entries.items() if entry.reset_time < now]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


# Module-level default; callers and tests may pass their own store
default_store = InMemoryRateLimitStore()


class RateLimitService:
    """Service for fixed-window rate limiting."""

    @staticmethod
    def check_rate_limit(
        identifier: str,
        config: Optional[RateLimitConfig] = None,
        store: Optional[RateLimitStore] = None,
        now: Optional[float] = None,
    ) -> RateLimitResult:
        """
        Count one attempt for *identifier* and report whether it is allowed.

        Expired entries for all identifiers are swept first. A missing or
        expired entry is replaced by a fresh window. Attempts beyond the
        quota are not counted.

        Args:
            identifier: Client key (see ``get_client_identifier``)
            config: Window and quota; settings are used when omitted
            store: Entry storage; the module default when omitted
            now: Current time in epoch milliseconds (tests pin it)

        Returns:
            RateLimitResult for this attempt
        """
        config = config or get_rate_limit_config()
        store = store if store is not None else default_store
        now = _now_ms() if now is None else now

        with store.lock:
            store.sweep(now)

            entry = store.get(identifier)
            if entry is None or entry.reset_time < now:
                entry = RateLimitEntry(count=0, reset_time=now + config.window_ms)
                store.set(identifier, entry)

            allowed = entry.count < config.max_requests
            if allowed:
                entry.count += 1

            return RateLimitResult(
                allowed=allowed,
                remaining=max(0, config.max_requests - entry.count),
                reset_time=entry.reset_time,
                limit=config.max_requests,
            )

    @staticmethod
    def reset_limits(store: Optional[RateLimitStore] = None) -> None:
        """Forget every counter. Useful for tests and admin operations."""
        store = store if store is not None else default_store
        with store.lock:
            store.clear()

    @staticmethod
    def active_identifiers(store: Optional[RateLimitStore] = None) -> int:
        """Number of identifiers currently holding a window."""
        store = store if store is not None else default_store
        with store.lock:
            return len(store)
