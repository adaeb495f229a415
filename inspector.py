"""
SysTune — Applied-state inspection.

Answers "does this action's target state currently hold?" as True, False or
None (unknown). Inspection is advisory: it never raises for a per-action
problem.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, Optional

from cancellation import CancellationToken, OperationCancelled
from catalog import ActionCatalog, normalize_keys
from models import ConfigTweak, ServiceDisable, StartMode
from registry import ConfigStore, values_equal
from service_control import ServiceController

logger = logging.getLogger(__name__)


def tweak_applied(tweak: ConfigTweak, store: ConfigStore) -> bool:
    """True iff every value currently equals its expected value. Read errors count as False."""
    for value in tweak.values:
        try:
            current = store.get(value.root, value.path, value.entry)
        except Exception:
            logger.debug("Failed to read registry value. [root=%s, path=%s, entry=%s]",
                         value.root, value.path, value.entry, exc_info=True)
            return False
        if not values_equal(current, value.value, value.kind):
            return False
    return True


def services_disabled(target: ServiceDisable, services: ServiceController) -> bool:
    """
    True iff every named service is start-mode disabled and stopped or
    stopping. A service that does not exist counts as disabled; a lookup
    error makes the whole answer False.
    """
    for name in normalize_keys(target.services):
        try:
            mode = services.get_start_mode(name)
            if mode is None:
                continue
            if mode != StartMode.DISABLED:
                return False
            state = services.get_run_state(name)
        except Exception:
            logger.debug("Failed to query service state. [service=%s]", name, exc_info=True)
            return False
        if state is not None and not state.is_stopping_or_stopped:
            return False
    return True


class StateInspector:
    """Evaluates the applied state of catalog actions."""

    def __init__(self, catalog: ActionCatalog, store: ConfigStore,
                 services: ServiceController) -> None:
        self._catalog = catalog
        self._store = store
        self._services = services

    def try_is_applied(self, key: str, token: CancellationToken) -> Optional[bool]:
        """
        Return whether the action is applied, or None when it is unknown,
        declares no check, or its check fails unexpectedly.
        """
        action = self._catalog.lookup(key)
        if action is None or not action.has_check:
            return None

        token.raise_if_cancelled()
        try:
            if isinstance(action.target, ConfigTweak):
                return tweak_applied(action.target, self._store)
            if isinstance(action.target, ServiceDisable):
                return services_disabled(action.target, self._services)
        except Exception:
            logger.debug("Failed to evaluate optimization action state. [action=%s]",
                         key, exc_info=True)
        return None

    def snapshot(self, keys: Optional[Iterable[str]],
                 token: CancellationToken) -> Dict[str, Optional[bool]]:
        """
        Applied state for several actions, keyed by canonical action key.

        Used to seed default selections. Cancellation between actions
        raises ``OperationCancelled``.
        """
        if keys is None:
            keys = [a.key for a in self._catalog.actions()]

        states: Dict[str, Optional[bool]] = {}
        for key in normalize_keys(keys):
            if token.cancelled:
                raise OperationCancelled()
            action = self._catalog.lookup(key)
            if action is None:
                continue
            states[action.key] = self.try_is_applied(action.key, token)
        return states
