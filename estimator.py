r"""
SysTune — Cleanup size estimation.

Walks the well-known locations behind each cleanup action and sums file
sizes without touching anything. The action-to-location table is closed and
hand-maintained. Locations may overlap (%SystemRoot%\Temp is usually
%SystemDrive%\Windows\Temp), and overlapping files are counted once per
location. The system drive root is walked top-level only, never the whole
drive.
"""

from __future__ import annotations

import fnmatch
import logging
import os
import threading
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from cancellation import CancellationToken, OperationCancelled
from catalog import ActionCatalog, normalize_keys
from custom_rules import evaluate_rules, expand_environment
from models import Action, CleanupLocation as Loc, CustomCleanup, CustomCleanupRule, EvaluationMode

logger = logging.getLogger(__name__)

RulesProvider = Callable[[], List[CustomCleanupRule]]


CLEANUP_LOCATIONS: Dict[str, Tuple[Loc, ...]] = {
    "cleanup.browserCache": (
        Loc(r"%LocalAppData%\Microsoft\Windows\INetCache"),
        Loc(r"%LocalAppData%\Microsoft\Windows\INetCookies"),
    ),
    "cleanup.thumbnailCache": (
        Loc(r"%LocalAppData%\Microsoft\Windows\Explorer", pattern="thumbcache_*.db"),
        Loc(r"%LocalAppData%\Local\D3DSCache"),
    ),
    "cleanup.remoteDesktopCache": (
        Loc(r"%LocalAppData%\Microsoft\Terminal Server Client\Cache"),
    ),
    "cleanup.tempFiles": (
        Loc(r"%SystemRoot%\Temp"),
        Loc(r"%SystemDrive%\Windows\Temp"),
        Loc(r"%TEMP%"),
    ),
    "cleanup.logs": (
        Loc(r"%SystemRoot%\Logs"),
        Loc(r"%ProgramData%\Microsoft\Windows\WER\ReportQueue"),
        Loc(r"%ProgramData%\Microsoft\Diagnosis"),
    ),
    "cleanup.crashDumps": (
        Loc(r"%SystemRoot%\Minidump", pattern="*.dmp"),
        Loc(r"%SystemRoot%\memory.dmp", single_file=True),
        Loc("%SystemDrive%\\", pattern="*.dmp", recursive=False),
    ),
    "cleanup.recycleBin": (
        Loc(r"%SystemDrive%\$Recycle.bin"),
    ),
    "cleanup.defender": (
        Loc(r"%ProgramData%\Microsoft\Windows Defender\Scans"),
    ),
    "cleanup.windowsUpdate": (
        Loc(r"%SystemRoot%\SoftwareDistribution\Download"),
        Loc(r"%SystemRoot%\SoftwareDistribution\DeliveryOptimization"),
    ),
    "cleanup.componentStore": (
        Loc(r"%SystemRoot%\WinSxS\Temp"),
    ),
    "cleanup.dotnetNative": (
        Loc(r"%WinDir%\assembly\NativeImages_v4.0.30319_32"),
        Loc(r"%WinDir%\assembly\NativeImages_v4.0.30319_64"),
    ),
    "cleanup.prefetch": (
        Loc(r"%SystemRoot%\Prefetch"),
    ),
}


def file_size(path: str) -> int:
    """Get file size, returning 0 on error."""
    try:
        if not os.path.isfile(path):
            return 0
        return os.path.getsize(path)
    except OSError:
        return 0


def walk_size(location: Loc, token: CancellationToken) -> int:
    """
    Sum the sizes of files under one location, recursively unless the
    location says otherwise.

    A missing directory is 0. Files that vanish or cannot be read between
    enumeration and stat are skipped. The token is checked for every file.
    """
    path = expand_environment(location.path)
    if location.single_file:
        token.raise_if_cancelled()
        return file_size(path)

    if not os.path.isdir(path):
        return 0

    pattern = location.pattern.lower() if location.pattern else None
    total = 0

    def _on_error(exc: OSError) -> None:
        logger.debug("Estimate skipped unreadable directory. [path=%s, error=%s]",
                     exc.filename, exc)

    for dirpath, dirnames, filenames in os.walk(path, onerror=_on_error):
        if not location.recursive:
            dirnames.clear()
        for name in filenames:
            token.raise_if_cancelled()
            if pattern and not fnmatch.fnmatchcase(name.lower(), pattern):
                continue
            try:
                total += os.path.getsize(os.path.join(dirpath, name))
            except OSError:
                continue
    return total


class CleanupEstimator:
    """Read-only size estimate for a selection of cleanup actions."""

    def __init__(
        self,
        catalog: ActionCatalog,
        rules_provider: RulesProvider,
        locations: Optional[Dict[str, Tuple[Loc, ...]]] = None,
    ) -> None:
        self._catalog = catalog
        self._rules_provider = rules_provider
        table = CLEANUP_LOCATIONS if locations is None else locations
        self._locations = {k.casefold(): v for k, v in table.items()}

    def estimate(self, keys: Optional[Iterable[str]], token: CancellationToken) -> int:
        """
        Sum the reclaimable bytes of the given actions.

        Unknown keys and actions without locations contribute 0. A failure
        while estimating one action is logged and contributes 0. Cancellation
        raises ``OperationCancelled`` whose ``partial_total`` covers the
        actions finished before it.
        """
        total = 0
        for key in normalize_keys(keys):
            if token.cancelled:
                raise OperationCancelled(partial_total=total)

            action = self._catalog.lookup(key)
            if action is None:
                continue

            try:
                total += self.estimate_action(action, token)
            except OperationCancelled:
                raise OperationCancelled(partial_total=total) from None
            except Exception:
                logger.debug("Failed to estimate cleanup size for action. [action=%s]",
                             key, exc_info=True)
        return total

    def estimate_action(self, action: Action, token: CancellationToken) -> int:
        if isinstance(action.target, CustomCleanup):
            # Re-read on every call; the user may have edited rules since the last one
            return evaluate_rules(self._rules_provider(), EvaluationMode.SIZE_ONLY, token)

        size = 0
        for location in self._locations.get(action.key.casefold(), ()):
            size += walk_size(location, token)
        return size


class EstimationSession:
    """
    Re-estimation for one changing selection.

    Each ``request`` cancels the estimate still running for the previous
    selection before starting the new one on a worker thread. ``on_result``
    fires only for the newest request, so a superseded estimate is never
    delivered.
    """

    def __init__(self, estimate: Callable[[Sequence[str], CancellationToken], int]) -> None:
        self._estimate = estimate
        self._lock = threading.RLock()
        self._generation = 0
        self._token: Optional[CancellationToken] = None
        self._worker: Optional[threading.Thread] = None

    def request(
        self,
        keys: Iterable[str],
        on_result: Callable[[int], None],
    ) -> CancellationToken:
        """Start estimating ``keys``, superseding any earlier request."""
        keys = list(keys)
        with self._lock:
            if self._token is not None:
                self._token.cancel()
            self._generation += 1
            generation = self._generation
            token = CancellationToken()
            self._token = token

            def _run() -> None:
                try:
                    total = self._estimate(keys, token)
                except OperationCancelled:
                    logger.debug("Superseded cleanup estimate cancelled. [generation=%s]",
                                 generation)
                    return
                except Exception:
                    logger.error("Cleanup estimate failed. [generation=%s]", generation,
                                 exc_info=True)
                    return
                with self._lock:
                    if generation != self._generation or token.cancelled:
                        return
                    on_result(total)

            self._worker = threading.Thread(
                target=_run,
                name=f"SysTuneEstimate-{generation}",
                daemon=True,
            )
            self._worker.start()
        return token

    def cancel(self) -> None:
        """Cancel the running estimate, if any, without starting a new one."""
        with self._lock:
            if self._token is not None:
                self._token.cancel()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Wait for the newest request's worker. Returns True if it finished."""
        with self._lock:
            worker = self._worker
        if worker is None:
            return True
        worker.join(timeout)
        return not worker.is_alive()
