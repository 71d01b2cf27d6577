"""Cooperative cancellation for analysis runs.

A token is created per run and handed to every stage. Stages call
``raise_if_cancelled()`` before each file read, so a timeout stops work at
the next checkpoint instead of leaving a background thread running.
"""

from __future__ import annotations

import threading
import time
from typing import Optional

from .exceptions import AnalysisCancelledError, AnalysisTimeoutError


class CancellationToken:
    """Shared flag plus an optional monotonic deadline."""

    def __init__(self, timeout_seconds: Optional[float] = None) -> None:
        self._event = threading.Event()
        self._reason: Optional[str] = None
        self.timeout_seconds = timeout_seconds
        self._deadline = (
            time.monotonic() + timeout_seconds if timeout_seconds is not None else None
        )

    @classmethod
    def none(cls) -> CancellationToken:
        """A token that never fires unless cancelled explicitly."""
        return cls()

    def cancel(self, reason: str = "Analysis cancelled") -> None:
        self._reason = reason
        self._event.set()

    @property
    def timed_out(self) -> bool:
        return self._deadline is not None and time.monotonic() >= self._deadline

    @property
    def cancelled(self) -> bool:
        return self._event.is_set() or self.timed_out

    @property
    def remaining(self) -> Optional[float]:
        """Seconds left before the deadline, or None without one."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def raise_if_cancelled(self) -> None:
        """Raise if the token has been cancelled or its deadline has passed.

        Raises:
            AnalysisCancelledError: After an explicit ``cancel()``
            AnalysisTimeoutError: Once the deadline has passed
        """
        if self._event.is_set():
            raise AnalysisCancelledError(self._reason or "Analysis cancelled")
        if self.timed_out:
            raise AnalysisTimeoutError(self.timeout_seconds or 0.0)


def checkpoint(token: Optional[CancellationToken]) -> None:
    """Check ``token`` if one was supplied."""
    if token is not None:
        token.raise_if_cancelled()
