r"""
SysTune - Windows tweak & cleanup orchestrator

Entry point: catalog listing, state inspection, estimation and batch execution.

Usage:
    python main.py                          Interactive select -> estimate -> run
    python main.py --list                   List all actions with their current state
    python main.py --apply KEY [KEY ...]    Run the given actions
    python main.py --recommended            Apply recommended performance actions
    python main.py --cleanup                Run recommended cleanup actions
    python main.py --estimate [KEY ...]     Estimate reclaimable space (default: all cleanup)
    python main.py --status KEY             Show whether an action is applied
    python main.py --rules                  List custom cleanup rules
    python main.py --add-rule DIR --ext .log .tmp [--recursive]
    python main.py --remove-rule N
    python main.py --packages               Show the AppX removal list
    python main.py --set-packages [ID ...]  Replace it (no IDs: suggested defaults)
"""

from __future__ import annotations

import argparse
import ctypes
import logging
import os
import sys
import threading
import time
from typing import Callable, Dict, List, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel

from cancellation import CancellationToken, OperationCancelled

console = Console()

BANNER = r"""
   ____         _____
  / ___| _   _ |_   _|   _ _ __   ___
  \___ \| | | |  | || | | | '_ \ / _ \
   ___) | |_| |  | || |_| | | | |  __/
  |____/ \__, |  |_| \__,_|_| |_|\___|
         |___/
  Windows Tweak & Cleanup Orchestrator
"""

EXIT_CANCELLED = 130


def is_admin() -> bool:
    """Check if the script is running with administrator privileges."""
    try:
        return ctypes.windll.shell32.IsUserAnAdmin() != 0
    except (AttributeError, OSError):
        return False


def request_elevation() -> None:
    """Show message about needing admin rights."""
    console.print(Panel(
        "[bold red](!!) Administrator privileges required![/]\n\n"
        "Most actions write to HKEY_LOCAL_MACHINE, change services\n"
        "or clean system folders such as C:\\Windows\\Temp.\n\n"
        "Please right-click your terminal and select\n"
        "[bold]'Run as administrator'[/], then try again.",
        border_style="red",
        title="[bold]Elevation Required[/]",
    ))


def setup_logging(log_dir: str, level: str = "INFO", verbose: bool = False) -> str:
    """Log to the console through Rich and to systune.log in ``log_dir``. Returns the log path."""
    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for handler in list(root.handlers):
        root.removeHandler(handler)

    console_handler = RichHandler(console=console, show_path=False, rich_tracebacks=True)
    console_handler.setLevel(logging.DEBUG if verbose else logging.WARNING)
    root.addHandler(console_handler)

    log_path = os.path.join(log_dir, "systune.log")
    try:
        os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
    except OSError as exc:
        logging.getLogger(__name__).warning("File logging disabled. [path=%s, error=%s]",
                                            log_path, exc)
        return ""
    file_handler.setLevel(getattr(logging, level.upper(), logging.INFO))
    file_handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
    root.addHandler(file_handler)
    return log_path


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="SysTune - Windows tweak & cleanup orchestrator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--list", action="store_true",
                      help="List categories and actions with their applied state")
    mode.add_argument("--apply", nargs="+", metavar="KEY",
                      help="Run the given action keys in order")
    mode.add_argument("--recommended", action="store_true",
                      help="Apply all recommended performance actions")
    mode.add_argument("--cleanup", action="store_true",
                      help="Run all recommended cleanup actions")
    mode.add_argument("--estimate", nargs="*", metavar="KEY",
                      help="Estimate reclaimable space (default: every cleanup action)")
    mode.add_argument("--status", metavar="KEY",
                      help="Show whether one action is currently applied")
    mode.add_argument("--rules", action="store_true",
                      help="List custom cleanup rules")
    mode.add_argument("--add-rule", metavar="DIR",
                      help="Add a custom cleanup rule for DIR (use with --ext)")
    mode.add_argument("--remove-rule", type=int, metavar="N",
                      help="Remove custom cleanup rule number N (see --rules)")
    mode.add_argument("--packages", action="store_true",
                      help="Show the AppX packages selected for removal")
    mode.add_argument("--set-packages", nargs="*", metavar="ID",
                      help="Replace the AppX removal list (no IDs: suggested defaults)")

    parser.add_argument("--ext", nargs="+", default=[], metavar="EXT",
                        help="Extensions for --add-rule (e.g. .log tmp)")
    parser.add_argument("--recursive", action="store_true",
                        help="Make the --add-rule rule include subdirectories")
    parser.add_argument("--log-dir", type=str, default=None,
                        help="Directory for systune.log (default: from config)")
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Show debug logging on the console")
    return parser.parse_args(argv)


def run_cancellable(label: str, fn: Callable[[CancellationToken], object]) -> Dict[str, object]:
    """
    Run ``fn(token)`` on a worker thread. Ctrl-C cancels the token; the
    worker stops at its next checkpoint.

    Returns a dict with "result", or "cancelled" holding the OperationCancelled.
    """
    token = CancellationToken()
    holder: Dict[str, object] = {}

    def _work() -> None:
        try:
            holder["result"] = fn(token)
        except OperationCancelled as exc:
            holder["cancelled"] = exc
        except Exception as exc:
            holder["error"] = exc

    worker = threading.Thread(target=_work, name="SysTuneWorker", daemon=True)
    worker.start()

    with console.status(f"[bold blue]{label}"):
        while worker.is_alive():
            try:
                worker.join(timeout=0.2)
            except KeyboardInterrupt:
                token.cancel()
                console.print("[yellow]Cancelling after the current step...[/]")

    if "error" in holder:
        raise holder["error"]
    return holder


def estimate_selection(session, keys) -> Optional[int]:
    """
    Estimate ``keys`` through an EstimationSession, superseding any estimate
    still running for an earlier selection.

    Returns the byte total, or None if Ctrl-C cancelled the estimate.
    """
    results: List[int] = []
    session.request(keys, results.append)

    with console.status("[bold blue]Estimating reclaimable space..."):
        try:
            while not session.wait(0.2):
                pass
        except KeyboardInterrupt:
            session.cancel()
            return None

    return results[0] if results else None


def _report_batch(label: str, fn) -> int:
    from ui import show_outcomes

    started = time.perf_counter()
    holder = run_cancellable(label, fn)
    duration = time.perf_counter() - started

    if "cancelled" in holder:
        show_outcomes(holder["cancelled"].completed, duration, cancelled=True)
        return EXIT_CANCELLED

    outcomes = holder["result"]
    show_outcomes(outcomes, duration)
    return 0


def _require_admin() -> bool:
    if is_admin():
        return True
    request_elevation()
    proceed = console.input("[yellow]Continue anyway? (y/n): [/]").strip().lower()
    return proceed in ("y", "yes")


def _manage_settings(args, settings) -> int:
    """Custom rule and AppX list commands; these only touch the settings file."""
    from models import CustomCleanupRule
    from custom_rules import normalize_extensions
    from ui import show_rules

    if args.rules:
        show_rules(settings.load_custom_rules())
        return 0

    if args.add_rule:
        extensions = normalize_extensions(args.ext)
        if not extensions:
            console.print("[red]--add-rule needs at least one extension (--ext .log .tmp).[/]")
            return 1
        rules = settings.load_custom_rules()
        rules.append(CustomCleanupRule(
            directory_path=args.add_rule.strip(),
            extensions=extensions,
            recursive=args.recursive,
        ))
        settings.save_custom_rules(rules)
        console.print(f"[green]Added rule #{len(rules)}.[/]")
        show_rules(rules)
        return 0

    if args.remove_rule is not None:
        rules = settings.load_custom_rules()
        if not 1 <= args.remove_rule <= len(rules):
            console.print(f"[red]No rule #{args.remove_rule}. Use --rules to list them.[/]")
            return 1
        removed = rules.pop(args.remove_rule - 1)
        settings.save_custom_rules(rules)
        console.print(f"[green]Removed rule for {removed.directory_path}.[/]")
        return 0

    if args.packages:
        packages = settings.load_appx_packages()
        if not packages:
            console.print("[dim]No AppX packages selected for removal.[/]")
        for package in packages:
            console.print(f"  {package}")
        return 0

    # --set-packages
    from actions.cleanup_system_components import DEFAULT_APPX_PACKAGES

    packages = list(args.set_packages) or list(DEFAULT_APPX_PACKAGES)
    settings.save_appx_packages(packages)
    console.print(f"[green]{len(packages)} AppX package(s) selected for removal.[/]")
    return 0


def main(argv=None) -> int:
    args = parse_args(argv)

    from config import SettingsStore, load_config

    app_config = load_config()
    log_path = setup_logging(args.log_dir or app_config.log_dir, app_config.log_level, args.verbose)
    settings = SettingsStore()

    console.print(f"[bold cyan]{BANNER}[/]")

    if (args.rules or args.add_rule or args.remove_rule is not None
            or args.packages or args.set_packages is not None):
        return _manage_settings(args, settings)

    if sys.platform != "win32":
        console.print("[red]SysTune changes Windows settings and only runs on Windows.[/]")
        return 1

    from optimizer import create_default_service
    from ui import confirm_execution, select_actions, show_categories, show_estimate, STATE_LABELS

    service = create_default_service(settings, app_config)

    # -- LIST --
    if args.list:
        holder = run_cancellable("Reading current state...", service.applied_states)
        show_categories(service.get_categories(), holder.get("result", {}))
        return 0

    # -- STATUS --
    if args.status:
        action = service.catalog.lookup(args.status)
        if action is None:
            console.print(f"[red]Unknown action '{args.status}'. Use --list to see keys.[/]")
            return 1
        state = service.try_is_applied(action.key, CancellationToken())
        console.print(f"{action.key}: {STATE_LABELS[state]}")
        return 0

    # -- ESTIMATE --
    if args.estimate is not None:
        keys = args.estimate or service.catalog.cleanup_keys()
        holder = run_cancellable(
            "Estimating reclaimable space...",
            lambda token: service.estimate_cleanup_size(keys, token),
        )
        if "cancelled" in holder:
            console.print("[yellow]Estimate cancelled.[/]")
            return EXIT_CANCELLED
        show_estimate(holder["result"], keys)
        return 0

    if not _require_admin():
        return 1

    # -- BATCH MODES --
    if args.apply:
        unknown = [k for k in args.apply if k.strip() and k not in service.catalog]
        if unknown:
            console.print(f"[yellow]Skipping unknown action(s): {', '.join(unknown)}[/]")
        return _report_batch("Running actions...",
                             lambda token: service.execute_actions(args.apply, token))

    if args.recommended:
        return _report_batch("Applying recommended optimizations...",
                             service.apply_recommended_performance_actions)

    if args.cleanup:
        return _report_batch("Running recommended cleanup...",
                             service.run_recommended_cleanup)

    # -- INTERACTIVE MODE --
    holder = run_cancellable("Reading current state...", service.applied_states)
    states = holder.get("result", {})
    session = service.new_estimation_session()

    while True:
        selected = select_actions(service.get_categories(), states)
        if not selected:
            console.print("[yellow]Nothing selected.[/]")
            return 0

        cleanup_keys = [k for k in selected if service.catalog.category_of(k).is_cleanup]
        estimate = 0
        if cleanup_keys:
            estimate = estimate_selection(session, cleanup_keys)
            if estimate is None:
                console.print("[yellow]Estimate cancelled. Back to selection.[/]")
                continue
            show_estimate(estimate, cleanup_keys)

        if not confirm_execution(selected, estimate):
            continue

        code = _report_batch("Running actions...",
                             lambda token: service.execute_actions(selected, token))
        if log_path:
            console.print(f"[dim]Log file: {log_path}[/]")
        return code


def run() -> None:
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted.[/]")
        sys.exit(EXIT_CANCELLED)


if __name__ == "__main__":
    run()
