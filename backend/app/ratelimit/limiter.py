"""In-process fixed-window rate limiter.

A counter resets to 1 as soon as its window has elapsed; it does not decay
continuously. Counter state lives in an explicitly passed store so separate
limiters (and tests) never share it.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateLimitPolicy:
    """Request allowance for one class of caller."""

    name: str
    max_requests: int
    window_seconds: int


@dataclass
class CounterState:
    count: int
    window_start: float


@dataclass(frozen=True)
class RateLimitDecision:
    """Outcome of a single rate-limit check."""

    allowed: bool
    limit: int
    remaining: int
    reset_at: datetime

    def headers(self) -> dict[str, str]:
        return {
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": str(self.remaining),
            "X-RateLimit-Reset": self.reset_at.isoformat(),
        }


class InMemoryRateLimitStore:
    """Thread-safe identity -> counter mapping."""

    def __init__(self) -> None:
        self._counters: dict[str, CounterState] = {}
        self._lock = threading.Lock()
        self._last_pruned: float | None = None

    def _prune(self, now: float, window_seconds: int) -> None:
        # Runs at most once per window; caller holds the lock
        if self._last_pruned is not None and now - self._last_pruned <= window_seconds:
            return
        expired = [
            identifier
            for identifier, state in self._counters.items()
            if now - state.window_start > window_seconds
        ]
        for identifier in expired:
            del self._counters[identifier]
        if expired:
            logger.debug("Pruned %d expired rate-limit counters", len(expired))
        self._last_pruned = now

    def hit(self, identifier: str, now: float, window_seconds: int) -> CounterState:
        """Record one request for ``identifier`` and return its updated counter.

        Counters whose window has elapsed are dropped along the way, so the
        store does not grow with every identity ever seen.
        """
        with self._lock:
            self._prune(now, window_seconds)
            state = self._counters.get(identifier)
            if state is None:
                state = CounterState(count=1, window_start=now)
                logger.debug("First request from %s", identifier)
            elif now - state.window_start > window_seconds:
                state = CounterState(count=1, window_start=now)
                logger.info("Window expired for %s, reset count to 1", identifier)
            else:
                state = CounterState(count=state.count + 1, window_start=state.window_start)
            self._counters[identifier] = state
            return state

    def get(self, identifier: str) -> CounterState | None:
        with self._lock:
            return self._counters.get(identifier)

    def clear(self) -> None:
        with self._lock:
            self._counters.clear()


class RateLimiter:
    """Applies a ``RateLimitPolicy`` to identities using a counter store."""

    def __init__(
        self,
        store: InMemoryRateLimitStore | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.store = store if store is not None else InMemoryRateLimitStore()
        self._clock = clock

    def check(self, identifier: str, policy: RateLimitPolicy) -> RateLimitDecision:
        """Count a request against ``identifier`` and decide whether it may proceed."""
        state = self.store.hit(identifier, self._clock(), policy.window_seconds)
        reset_at = datetime.fromtimestamp(state.window_start + policy.window_seconds, tz=timezone.utc)
        allowed = state.count <= policy.max_requests

        if not allowed:
            logger.warning(
                "Rate limit exceeded for %s (%d/%d, policy=%s)",
                identifier,
                state.count,
                policy.max_requests,
                policy.name,
            )

        return RateLimitDecision(
            allowed=allowed,
            limit=policy.max_requests,
            remaining=max(0, policy.max_requests - state.count),
            reset_at=reset_at,
        )
