"""
SysTune — Windows service control.

Start mode lives in the service's registry key (``Start`` DWORD); run state
comes from the Service Control Manager through psutil. Stopping goes through
``sc stop`` and then polls until the service reports stopped.
"""

from __future__ import annotations

import logging
import subprocess
import time
from typing import Optional

import psutil

from models import RunState, StartMode, ValueKind
from registry import ConfigStore

logger = logging.getLogger(__name__)

SERVICES_KEY = r"SYSTEM\CurrentControlSet\Services"

_PSUTIL_STATES = {
    "running": RunState.RUNNING,
    "paused": RunState.PAUSED,
    "start_pending": RunState.START_PENDING,
    "pause_pending": RunState.PAUSE_PENDING,
    "continue_pending": RunState.CONTINUE_PENDING,
    "stop_pending": RunState.STOP_PENDING,
    "stopped": RunState.STOPPED,
}


class ServiceController:
    """Service accessor consumed by the executor and inspector."""

    def get_start_mode(self, name: str) -> Optional[StartMode]:
        """Return the start mode, or None if the service does not exist."""
        raise NotImplementedError

    def set_start_mode(self, name: str, mode: StartMode) -> None:
        raise NotImplementedError

    def get_run_state(self, name: str) -> Optional[RunState]:
        """Return the run state, or None if the service does not exist."""
        raise NotImplementedError

    def stop(self, name: str, timeout: float) -> None:
        """Request a stop and wait up to ``timeout`` seconds for it to complete."""
        raise NotImplementedError


class WindowsServiceController(ServiceController):
    """ServiceController for the local Windows Service Control Manager."""

    def __init__(self, store: ConfigStore, poll_interval: float = 0.25) -> None:
        self._store = store
        self._poll_interval = poll_interval

    def get_start_mode(self, name: str) -> Optional[StartMode]:
        raw = self._store.get("HKLM", f"{SERVICES_KEY}\\{name}", "Start")
        if raw is None:
            return None
        return StartMode(int(raw))

    def set_start_mode(self, name: str, mode: StartMode) -> None:
        self._store.set("HKLM", f"{SERVICES_KEY}\\{name}", "Start",
                        mode.value, ValueKind.INTEGER32)

    def get_run_state(self, name: str) -> Optional[RunState]:
        try:
            status = psutil.win_service_get(name).status()
        except psutil.NoSuchProcess:
            return None
        return _PSUTIL_STATES.get(status, RunState.RUNNING)

    def stop(self, name: str, timeout: float) -> None:
        result = subprocess.run(
            ["sc.exe", "stop", name],
            capture_output=True,
            text=True,
            timeout=max(timeout, 1.0),
        )
        logger.debug("sc stop finished. [service=%s, exitCode=%s, output=%s]",
                     name, result.returncode, result.stdout.strip())

        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            state = self.get_run_state(name)
            if state is None or state == RunState.STOPPED:
                return
            time.sleep(self._poll_interval)
        raise TimeoutError(f"Service {name} did not stop within {timeout:.0f}s")
