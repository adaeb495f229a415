"""
SysTune — Shell command runner with a cancellable exit-wait.
"""

from __future__ import annotations

import logging
import subprocess
from typing import Optional

from cancellation import CancellationToken, OperationCancelled
from models import CommandResult

logger = logging.getLogger(__name__)


class CommandRunner:
    """Runs one command line through the platform shell."""

    def run(self, command_line: str, token: CancellationToken) -> CommandResult:
        raise NotImplementedError


class SubprocessCommandRunner(CommandRunner):
    """
    CommandRunner on top of ``subprocess``.

    The command goes through the platform shell (``cmd.exe /c`` on Windows,
    ``/bin/sh -c`` elsewhere). While waiting for it to exit the token is
    polled every ``poll_interval`` seconds; on cancel the child is killed and
    ``OperationCancelled`` is raised.
    """

    def __init__(self, poll_interval: float = 0.2, timeout: Optional[float] = None) -> None:
        self._poll_interval = poll_interval
        self._timeout = timeout

    def run(self, command_line: str, token: CancellationToken) -> CommandResult:
        token.raise_if_cancelled()

        process = subprocess.Popen(
            command_line,
            shell=True,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            errors="replace",
        )

        waited = 0.0
        while True:
            try:
                stdout, stderr = process.communicate(timeout=self._poll_interval)
                break
            except subprocess.TimeoutExpired:
                waited += self._poll_interval
                if token.cancelled:
                    _kill(process)
                    raise OperationCancelled(f"Cancelled while running: {command_line}")
                if self._timeout is not None and waited >= self._timeout:
                    _kill(process)
                    raise

        return CommandResult(
            command=command_line,
            exit_code=process.returncode,
            stdout=stdout or "",
            stderr=stderr or "",
        )


def _kill(process: subprocess.Popen) -> None:
    """Kill the child and reap it so no pipes are left open."""
    process.kill()
    try:
        process.communicate(timeout=5)
    except subprocess.TimeoutExpired:
        logger.warning("Child process did not exit after kill. [pid=%s]", process.pid)
