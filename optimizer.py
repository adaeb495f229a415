"""
SysTune — Optimization service: the surface the CLI (or any other caller) uses.

Wires one catalog into the executor, inspector and estimator. All calls are
synchronous and take a cancellation token; callers that must stay responsive
run them on a worker thread.
"""

from __future__ import annotations

from typing import Callable, Iterable, List, Optional, Tuple

from cancellation import CancellationToken
from catalog import ActionCatalog, build_default_catalog
from estimator import CleanupEstimator, EstimationSession
from executor import ApplyContext, BatchExecutor
from inspector import StateInspector
from models import ActionOutcome, Category, CustomCleanupRule
from registry import ConfigStore
from service_control import ServiceController
from shell import CommandRunner


class OptimizationService:
    """Catalog queries, batch execution, state inspection and cleanup estimation."""

    def __init__(
        self,
        catalog: ActionCatalog,
        store: ConfigStore,
        services: ServiceController,
        runner: CommandRunner,
        rules_provider: Callable[[], List[CustomCleanupRule]] = list,
        packages_provider: Callable[[], List[str]] = list,
        service_stop_timeout_s: float = 10.0,
        estimator: Optional[CleanupEstimator] = None,
    ) -> None:
        self.catalog = catalog
        self._executor = BatchExecutor(catalog, ApplyContext(
            store=store,
            services=services,
            runner=runner,
            rules_provider=rules_provider,
            packages_provider=packages_provider,
            service_stop_timeout_s=service_stop_timeout_s,
        ))
        self._inspector = StateInspector(catalog, store, services)
        self._estimator = estimator or CleanupEstimator(catalog, rules_provider)

    def get_categories(self) -> Tuple[Category, ...]:
        return self.catalog.categories

    def execute_actions(self, keys: Optional[Iterable[str]],
                        token: CancellationToken) -> List[ActionOutcome]:
        return self._executor.execute(keys, token)

    def apply_recommended_performance_actions(self, token: CancellationToken) -> List[ActionOutcome]:
        return self.execute_actions(self.catalog.recommended_keys(cleanup=False), token)

    def run_recommended_cleanup(self, token: CancellationToken) -> List[ActionOutcome]:
        return self.execute_actions(self.catalog.recommended_keys(cleanup=True), token)

    def estimate_cleanup_size(self, keys: Optional[Iterable[str]],
                              token: CancellationToken) -> int:
        return self._estimator.estimate(keys, token)

    def try_is_applied(self, key: str, token: CancellationToken) -> Optional[bool]:
        return self._inspector.try_is_applied(key, token)

    def applied_states(self, token: CancellationToken,
                       keys: Optional[Iterable[str]] = None):
        return self._inspector.snapshot(keys, token)

    def new_estimation_session(self) -> EstimationSession:
        return EstimationSession(self._estimator.estimate)


def create_default_service(settings=None, app_config=None) -> OptimizationService:
    """Build the service against the local machine (registry, SCM, cmd.exe)."""
    from config import AppConfig, SettingsStore
    from registry import WinregConfigStore
    from service_control import WindowsServiceController
    from shell import SubprocessCommandRunner

    settings = settings or SettingsStore()
    app_config = app_config or AppConfig()
    store = WinregConfigStore()

    return OptimizationService(
        catalog=build_default_catalog(),
        store=store,
        services=WindowsServiceController(store),
        runner=SubprocessCommandRunner(),
        rules_provider=settings.load_custom_rules,
        packages_provider=settings.load_appx_packages,
        service_stop_timeout_s=app_config.service_stop_timeout_s,
    )
