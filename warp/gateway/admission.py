"""
Admission Control - Fixed-window request counting per caller.

Each caller identity gets a window that starts on its first request. Up to
max_requests are admitted while the window is open; once it has fully
elapsed the next request starts a new window.

Read-modify-write of a window is serialized per identity with a pool of
striped locks, so callers never contend on a table-wide lock.
"""

from __future__ import annotations
from dataclasses import dataclass
import threading
import time
from typing import Callable


@dataclass
class AdmissionWindow:
    """Request count for one caller within the current window."""
    count: int
    window_start: float


class AdmissionTable:
    """
    Per-identity fixed-window admission counters.

    Usage:
        table = AdmissionTable(window_seconds=10, max_requests=5)
        if not table.check_and_increment(caller_id):
            raise RateLimited()
    """

    def __init__(
        self,
        window_seconds: float,
        max_requests: int,
        clock: Callable[[], float] = time.monotonic,
        stripes: int = 64,
    ):
        self.window_seconds = window_seconds
        self.max_requests = max_requests
        self._clock = clock
        self._windows: dict[str, AdmissionWindow] = {}
        self._locks = [threading.Lock() for _ in range(stripes)]

    def _lock_for(self, identity: str) -> threading.Lock:
        return self._locks[hash(identity) % len(self._locks)]

    def check_and_increment(self, identity: str) -> bool:
        """
        Count a request against the identity's window.

        Returns:
            True if admitted, False if the window is already full
        """
        with self._lock_for(identity):
            now = self._clock()
            window = self._windows.get(identity)

            if window is None or now - window.window_start > self.window_seconds:
                self._windows[identity] = AdmissionWindow(count=1, window_start=now)
                return True

            if window.count >= self.max_requests:
                return False

            window.count += 1
            return True

    def get(self, identity: str) -> AdmissionWindow | None:
        window = self._windows.get(identity)
        if window is None:
            return None
        return AdmissionWindow(count=window.count, window_start=window.window_start)

    def sweep_expired(self) -> int:
        """
        Forget identities whose window has fully elapsed.

        Returns how many identities were removed.
        """
        removed = 0
        for identity in self._windows.copy():
            with self._lock_for(identity):
                window = self._windows.get(identity)
                if window is None:
                    continue
                if self._clock() - window.window_start > self.window_seconds:
                    del self._windows[identity]
                    removed += 1
        return removed

    def __len__(self) -> int:
        return len(self._windows)
