"""
SysTune — Batch execution of catalog actions.

Actions run strictly one after another in resolved-key order. Cancellation
is checked before each action starts; a failing action is logged and
recorded, and the batch moves on. Nothing is rolled back.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional

from cancellation import CancellationToken, OperationCancelled
from catalog import ActionCatalog, normalize_keys
from custom_rules import evaluate_rules
from models import (
    Action,
    ActionOutcome,
    ActionStatus,
    ApplyReport,
    CommandSequence,
    ConfigTweak,
    CustomCleanup,
    CustomCleanupRule,
    EvaluationMode,
    PackageRemoval,
    ServiceDisable,
    StartMode,
    _format_duration,
)
from registry import ConfigStore
from service_control import ServiceController
from shell import CommandRunner

logger = logging.getLogger(__name__)


@dataclass
class ApplyContext:
    """Collaborators an action's apply talks to."""
    store: ConfigStore
    services: ServiceController
    runner: CommandRunner
    rules_provider: Callable[[], List[CustomCleanupRule]] = list
    packages_provider: Callable[[], List[str]] = list
    service_stop_timeout_s: float = 10.0


def apply_action(action: Action, ctx: ApplyContext, token: CancellationToken) -> ApplyReport:
    """Run one action's apply, dispatching on its target variant."""
    report = ApplyReport()
    target = action.target

    if isinstance(target, ConfigTweak):
        _apply_tweak(target, ctx, token, report)
    elif isinstance(target, ServiceDisable):
        _disable_services(target, ctx, token, report)
    elif isinstance(target, CommandSequence):
        _run_commands(target.commands, ctx, token, report)
    elif isinstance(target, CustomCleanup):
        freed = evaluate_rules(ctx.rules_provider(), EvaluationMode.DELETE, token)
        logger.info("Custom cleanup finished. [freedBytes=%s]", freed)
    elif isinstance(target, PackageRemoval):
        command = build_appx_removal_command(ctx.packages_provider())
        if command is None:
            logger.debug("AppX cleanup skipped. No packages selected.")
        else:
            _run_commands((command,), ctx, token, report)
    else:
        raise TypeError(f"Unsupported action target: {type(target).__name__}")

    return report


def _apply_tweak(tweak: ConfigTweak, ctx: ApplyContext,
                 token: CancellationToken, report: ApplyReport) -> None:
    for value in tweak.values:
        token.raise_if_cancelled()
        try:
            ctx.store.set(value.root, value.path, value.entry, value.value, value.kind)
            logger.debug("Registry tweak applied. [root=%s, path=%s, entry=%s, kind=%s, data=%s]",
                         value.root, value.path, value.entry, value.kind.name, value.value)
        except Exception as exc:
            logger.debug("Failed to apply registry tweak. [root=%s, path=%s, entry=%s]",
                         value.root, value.path, value.entry, exc_info=True)
            report.fail(f"registry {value.root}\\{value.path}\\{value.entry}: {exc}")

    if tweak.notify_shell:
        try:
            ctx.store.notify_changed()
        except Exception as exc:
            logger.debug("Failed to notify Explorer of settings change.", exc_info=True)
            report.fail(f"notify settings change: {exc}")

    if tweak.followup_commands:
        _run_commands(tweak.followup_commands, ctx, token, report)


def _disable_services(target: ServiceDisable, ctx: ApplyContext,
                      token: CancellationToken, report: ApplyReport) -> None:
    for name in normalize_keys(target.services):
        token.raise_if_cancelled()

        try:
            if ctx.services.get_start_mode(name) is None:
                logger.debug("Service not found, skipped. [service=%s]", name)
                continue
            ctx.services.set_start_mode(name, StartMode.DISABLED)
        except Exception as exc:
            logger.debug("Failed to set service start type. [service=%s]", name, exc_info=True)
            report.fail(f"service {name} start mode: {exc}")

        try:
            state = ctx.services.get_run_state(name)
            if state is None or state.is_stopping_or_stopped:
                continue
            ctx.services.stop(name, ctx.service_stop_timeout_s)
            logger.debug("Service stopped. [service=%s]", name)
        except Exception as exc:
            logger.debug("Failed to stop service. [service=%s]", name, exc_info=True)
            report.fail(f"service {name} stop: {exc}")


def _run_commands(commands: Iterable[str], ctx: ApplyContext,
                  token: CancellationToken, report: ApplyReport) -> None:
    for command in commands:
        token.raise_if_cancelled()
        try:
            result = ctx.runner.run(command, token)
        except OperationCancelled:
            raise
        except Exception as exc:
            logger.debug("Failed to execute command. [command=%s]", command, exc_info=True)
            report.fail(f"command {command}: {exc}")
            continue

        logger.debug("Command executed. [command=%s, exitCode=%s, output=%s, error=%s]",
                     command, result.exit_code, result.stdout.strip(), result.stderr.strip())
        if not result.ok:
            report.fail(f"command {command}: exit code {result.exit_code}")


def build_appx_removal_command(packages: Optional[Iterable[str]]) -> Optional[str]:
    """
    Build the PowerShell command removing the given AppX packages for all
    users, matching either full package names or package names. Returns
    None when nothing is left after trimming and de-duplication.
    """
    sanitized = [p.replace("'", "''")
                 for p in normalize_keys(p.strip() for p in (packages or []) if p)]
    if not sanitized:
        return None

    package_list = "','".join(sanitized)
    script = (
        f"foreach ($pkg in @('{package_list}')) {{ "
        "try { $appx = Get-AppxPackage -AllUsers | "
        "Where-Object { $_.PackageFullName -eq $pkg -or $_.Name -eq $pkg }; "
        "if ($appx) { $appx | Remove-AppxPackage -ErrorAction SilentlyContinue } } catch {} "
        "try { Get-AppxProvisionedPackage -Online | "
        "Where-Object { $_.PackageName -eq $pkg -or $_.DisplayName -eq $pkg } | "
        "Remove-AppxProvisionedPackage -Online -ErrorAction SilentlyContinue } catch {} }"
    )
    return f'powershell -NoProfile -ExecutionPolicy Bypass -Command "{script}"'


class BatchExecutor:
    """Runs catalog actions by key."""

    def __init__(self, catalog: ActionCatalog, ctx: ApplyContext) -> None:
        self._catalog = catalog
        self._ctx = ctx

    def execute(self, keys: Optional[Iterable[str]],
                token: CancellationToken) -> List[ActionOutcome]:
        """
        Execute actions in first-occurrence order.

        Blank and duplicate keys are dropped, unknown keys skipped. Returns
        one outcome per action run. Raises ``OperationCancelled`` (with the
        outcomes so far in ``completed``) if the token is cancelled before
        an action starts or at one of the action's own checkpoints.
        """
        outcomes: List[ActionOutcome] = []

        for key in normalize_keys(keys):
            if token.cancelled:
                raise OperationCancelled(completed=outcomes)

            action = self._catalog.lookup(key)
            if action is None:
                logger.debug("Unknown action skipped. [action=%s]", key)
                continue

            logger.info("Running optimization action. [action=%s]", action.key)
            started = time.perf_counter()
            try:
                report = apply_action(action, self._ctx, token)
            except OperationCancelled:
                raise OperationCancelled(completed=outcomes) from None
            except Exception as exc:
                duration = time.perf_counter() - started
                logger.error("Optimization action failed. [action=%s]", action.key, exc_info=True)
                outcomes.append(ActionOutcome(
                    key=action.key,
                    status=ActionStatus.FAILED,
                    error=str(exc) or type(exc).__name__,
                    duration_s=duration,
                ))
                continue

            duration = time.perf_counter() - started
            status = ActionStatus.APPLIED if report.ok else ActionStatus.PARTIAL
            if report.ok:
                logger.info("Optimization action applied. [action=%s, duration=%s]",
                            action.key, _format_duration(duration))
            else:
                logger.warning("Optimization action finished with errors. [action=%s, failures=%s]",
                               action.key, len(report.failures))
            outcomes.append(ActionOutcome(
                key=action.key,
                status=status,
                failures=list(report.failures),
                duration_s=duration,
            ))

        return outcomes
