"""Fixed-window call budget for remote model requests, persisted across restarts."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

from quillstack.models import RateWindowStats
from quillstack.stores.kv import KeyValueStore

logger = logging.getLogger(__name__)

_KEY_PREFIX = "rate."


@dataclass
class RateWindow:
    """One horizon of the limiter. ``window_start`` of 0.0 means never opened."""

    name: str
    length_seconds: int
    limit: int
    count: int = 0
    window_start: float = 0.0

    def expired(self, now: float) -> bool:
        return now - self.window_start >= self.length_seconds


@dataclass(frozen=True)
class RateReservation:
    """A slot held by an in-flight call, keyed by the window starts it was counted in."""

    window_starts: dict[str, float]


class RateLimiter:
    """Minute/hour/day fixed windows. A call may proceed only if every window has room.

    Windows reset lazily: whenever a check happens at least ``length_seconds``
    after the window opened, the counter drops to zero and the window reopens
    at the current time. Counters advance through ``try_acquire`` (given back by
    ``release`` when the call fails) or ``record_success``.
    """

    def __init__(
        self,
        store: KeyValueStore,
        per_minute: int = 5,
        per_hour: int = 50,
        per_day: int = 200,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._store = store
        self._clock = clock
        self._horizons: list[tuple[str, int, int]] = [
            ("minute", 60, per_minute),
            ("hour", 3600, per_hour),
            ("day", 86400, per_day),
        ]

    def _load(self, name: str, length_seconds: int, limit: int) -> RateWindow:
        return RateWindow(
            name=name,
            length_seconds=length_seconds,
            limit=limit,
            count=int(self._store.get(f"{_KEY_PREFIX}{name}.count")),
            window_start=self._store.get(f"{_KEY_PREFIX}{name}.window_start"),
        )

    def _refresh(self, now: float) -> list[RateWindow]:
        """Load all windows, resetting any that have fully elapsed. Caller holds the lock."""
        windows = [self._load(*horizon) for horizon in self._horizons]
        updates: dict[str, float] = {}
        for window in windows:
            if window.window_start == 0.0 or window.expired(now):
                if window.count:
                    logger.debug("Rate window '%s' elapsed, resetting", window.name)
                window.count = 0
                window.window_start = now
                updates[f"{_KEY_PREFIX}{window.name}.count"] = 0
                updates[f"{_KEY_PREFIX}{window.name}.window_start"] = now
        if updates:
            self._store.set_many(updates)
        return windows

    def can_proceed(self) -> bool:
        """True only if all three windows are under their limits."""
        with self._store.lock:
            windows = self._refresh(self._clock())
        for window in windows:
            if window.count >= window.limit:
                logger.info(
                    "Rate limit reached for %s window (%d/%d)",
                    window.name,
                    window.count,
                    window.limit,
                )
                return False
        return True

    def record_success(self) -> None:
        """Count one confirmed successful remote call against every window."""
        with self._store.lock:
            windows = self._refresh(self._clock())
            self._store.set_many(
                {f"{_KEY_PREFIX}{w.name}.count": w.count + 1 for w in windows}
            )

    def try_acquire(self) -> RateReservation | None:
        """Check and count one call in a single step, or return None if any window is full.

        The slot is held while the call is in flight so concurrent callers
        cannot all pass the check before any of them is counted. Hand the
        reservation to ``release`` if the call does not succeed.
        """
        with self._store.lock:
            windows = self._refresh(self._clock())
            for window in windows:
                if window.count >= window.limit:
                    logger.info(
                        "Rate limit reached for %s window (%d/%d)",
                        window.name,
                        window.count,
                        window.limit,
                    )
                    return None
            self._store.set_many(
                {f"{_KEY_PREFIX}{w.name}.count": w.count + 1 for w in windows}
            )
        return RateReservation(window_starts={w.name: w.window_start for w in windows})

    def release(self, reservation: RateReservation) -> None:
        """Give back a slot taken by ``try_acquire`` for a call that did not succeed.

        Windows that reset since the slot was taken no longer hold it and are left alone.
        """
        with self._store.lock:
            windows = self._refresh(self._clock())
            updates: dict[str, float] = {
                f"{_KEY_PREFIX}{w.name}.count": w.count - 1
                for w in windows
                if w.count > 0 and reservation.window_starts.get(w.name) == w.window_start
            }
            if updates:
                self._store.set_many(updates)

    def stats(self) -> dict[str, RateWindowStats]:
        """Current count and limit per window, for display."""
        with self._store.lock:
            windows = self._refresh(self._clock())
        return {
            w.name: RateWindowStats(
                window_seconds=w.length_seconds,
                limit=w.limit,
                count=w.count,
                window_start=w.window_start,
            )
            for w in windows
        }

    def reset(self) -> None:
        """Clear every window."""
        with self._store.lock:
            self._store.delete_prefix(_KEY_PREFIX)
