"""
SysTune — Cooperative cancellation shared by the executor, estimator and shell runner.
"""

from __future__ import annotations

import threading
from typing import List, Optional


class OperationCancelled(Exception):
    """Raised at a cancellation checkpoint once the token has been cancelled.

    ``completed`` holds the outcomes of actions that finished before the
    checkpoint (batch execution); ``partial_total`` holds the bytes summed for
    fully estimated actions (size estimation).
    """

    def __init__(self, message: str = "Operation cancelled",
                 completed: Optional[List] = None,
                 partial_total: int = 0) -> None:
        super().__init__(message)
        self.completed = completed if completed is not None else []
        self.partial_total = partial_total


class CancellationToken:
    """Thread-safe cancellation flag checked at well-defined points."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise OperationCancelled()

    def wait(self, timeout: float) -> bool:
        """Sleep up to ``timeout`` seconds, waking early on cancel. Returns True if cancelled."""
        return self._event.wait(timeout)
