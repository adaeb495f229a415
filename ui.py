"""
SysTune - Terminal presentation using Rich, with InquirerPy prompts.

Resolves catalog resource refs to English text, renders the catalog with
live applied state, and drives the interactive select -> estimate ->
confirm flow.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich import box

from InquirerPy import inquirer
from InquirerPy.separator import Separator

from models import ActionOutcome, ActionStatus, Category, CustomCleanupRule, _format_size, _format_duration

console = Console()

STRINGS: Dict[str, str] = {
    "category.explorer.title": "Explorer",
    "category.explorer.description": "Taskbar, Start menu and File Explorer behaviour",
    "category.performance.title": "Performance",
    "category.performance.description": "Scheduling, memory, notifications, telemetry and power",
    "category.services.title": "Services",
    "category.services.description": "Background services that can be turned off",
    "category.cleanup.cache.title": "Cache Cleanup",
    "category.cleanup.cache.description": "Browser, thumbnail and Remote Desktop caches",
    "category.cleanup.systemFiles.title": "System Files Cleanup",
    "category.cleanup.systemFiles.description": "Temp files, logs, crash dumps, Recycle Bin",
    "category.cleanup.systemComponents.title": "System Components Cleanup",
    "category.cleanup.systemComponents.description": "Update caches, component store, .NET images, AppX",
    "category.cleanup.performance.title": "Performance Cleanup",
    "category.cleanup.performance.description": "Prefetch files",
    "category.cleanup.custom.title": "Custom Cleanup",
    "category.cleanup.custom.description": "Files matched by your own rules",

    "action.explorer.taskbar.title": "Simplify taskbar",
    "action.explorer.taskbar.description": "Hide search box and Task View, always show tray icons, combine when full",
    "action.explorer.startMenu.title": "Trim Start menu",
    "action.explorer.startMenu.description": "Hide pinned, more-programs and most-used lists; restarts Explorer",
    "action.explorer.responsiveness.title": "Snappier Explorer",
    "action.explorer.responsiveness.description": "No menu delay, auto-end hung tasks, open to This PC",
    "action.explorer.visibility.title": "Show extensions and hidden files",
    "action.explorer.visibility.description": "Show file extensions and hidden files",
    "action.explorer.suggestions.title": "Turn off suggestions",
    "action.explorer.suggestions.description": "Stop sync provider ads and Start/Settings suggestions",
    "action.performance.multimedia.title": "Multimedia scheduling",
    "action.performance.multimedia.description": "Disable network throttling, favour foreground responsiveness",
    "action.performance.memory.title": "Memory management",
    "action.performance.memory.description": "Large system cache, keep kernel in RAM",
    "action.performance.notifications.title": "Disable notification center",
    "action.performance.notifications.description": "Turn off the notification center and logon acrylic",
    "action.performance.telemetry.title": "Reduce telemetry",
    "action.performance.telemetry.description": "Advertising ID, Spotlight, tips and telemetry level",
    "action.performance.powerPlan.title": "High performance power plan",
    "action.performance.powerPlan.description": "Activate high performance and turn off hibernation",
    "action.services.diagnostics.title": "Diagnostics services",
    "action.services.diagnostics.description": "DiagTrack, diagnostics hub collector, Delivery Optimization",
    "action.services.sysmain.title": "SysMain",
    "action.services.sysmain.description": "Superfetch memory prefetcher",
    "action.services.search.title": "Windows Search",
    "action.services.search.description": "Search indexer (search gets slower)",
    "action.services.remoteRegistry.title": "Remote Registry",
    "action.services.remoteRegistry.description": "Remote access to the registry",
    "action.services.errorReporting.title": "Error Reporting",
    "action.services.errorReporting.description": "Windows Error Reporting service",
    "action.cleanup.browserCache.title": "Browser cache",
    "action.cleanup.browserCache.description": "INetCache and INetCookies",
    "action.cleanup.thumbnailCache.title": "Thumbnail cache",
    "action.cleanup.thumbnailCache.description": "Explorer thumbnail databases and DirectX shader cache",
    "action.cleanup.remoteDesktopCache.title": "Remote Desktop cache",
    "action.cleanup.remoteDesktopCache.description": "Bitmap cache of the Remote Desktop client",
    "action.cleanup.tempFiles.title": "Temporary files",
    "action.cleanup.tempFiles.description": "User and system temp folders",
    "action.cleanup.logs.title": "System logs",
    "action.cleanup.logs.description": "Windows logs, error report queue, diagnosis data",
    "action.cleanup.crashDumps.title": "Crash dumps",
    "action.cleanup.crashDumps.description": "Minidumps and memory.dmp",
    "action.cleanup.recycleBin.title": "Recycle Bin",
    "action.cleanup.recycleBin.description": "Empty the Recycle Bin on the system drive",
    "action.cleanup.defender.title": "Defender scan history",
    "action.cleanup.defender.description": "Microsoft Defender scan cache",
    "action.cleanup.windowsUpdate.title": "Windows Update cache",
    "action.cleanup.windowsUpdate.description": "Downloaded updates and Delivery Optimization files",
    "action.cleanup.componentStore.title": "Component store",
    "action.cleanup.componentStore.description": "DISM component cleanup (removes update rollback)",
    "action.cleanup.dotnetNative.title": ".NET native images",
    "action.cleanup.dotnetNative.description": "Precompiled .NET Framework 4 images (rebuilt on demand)",
    "action.cleanup.appxBloatware.title": "Preinstalled apps",
    "action.cleanup.appxBloatware.description": "Remove the AppX packages selected with --set-packages",
    "action.cleanup.prefetch.title": "Prefetch",
    "action.cleanup.prefetch.description": "Prefetch traces (next boots are slower)",
    "action.cleanup.custom.title": "Custom rules",
    "action.cleanup.custom.description": "Delete files matched by your custom cleanup rules",
}

STATE_LABELS = {
    True: "[green]applied[/]",
    False: "[yellow]not applied[/]",
    None: "[dim]-[/]",
}

STATUS_COLORS = {
    ActionStatus.APPLIED: "green",
    ActionStatus.PARTIAL: "yellow",
    ActionStatus.FAILED: "red",
}


def text(ref: str) -> str:
    """Resolve a resource ref, falling back to the ref itself."""
    return STRINGS.get(ref, ref)


def show_categories(categories: Sequence[Category],
                    states: Optional[Dict[str, Optional[bool]]] = None) -> None:
    """Render every category and action with its current state."""
    states = states or {}
    for category in categories:
        table = Table(
            box=box.ROUNDED,
            title=f"[bold]{text(category.title_ref)}[/] [dim]({category.key})[/]",
            title_justify="left",
            caption=text(category.description_ref),
            caption_justify="left",
        )
        table.add_column("Key", min_width=28)
        table.add_column("Action", min_width=30)
        table.add_column("Rec.", justify="center", width=5)
        table.add_column("State", justify="center", width=13)
        for action in category.actions:
            table.add_row(
                action.key,
                text(action.title_ref),
                "[green]*[/]" if action.recommended else "",
                STATE_LABELS.get(states.get(action.key)),
            )
        console.print(table)


def select_actions(categories: Sequence[Category],
                   states: Dict[str, Optional[bool]]) -> Optional[List[str]]:
    """
    Arrow-key checkbox prompt over all actions.

    Recommended actions that are not already applied start checked.
    Returns the selected keys, or None to abort.
    """
    choices: List[object] = []
    for category in categories:
        choices.append(Separator(f"── {text(category.title_ref)} ──"))
        for action in category.actions:
            state = states.get(action.key)
            suffix = "  (applied)" if state is True else ""
            choices.append({
                "name": f"{text(action.title_ref):<40s}{suffix}",
                "value": action.key,
                "enabled": action.recommended and state is not True,
            })

    console.print("[bold cyan]Select actions to run[/]")
    console.print("[dim]  ↑/↓ navigate  ·  Space toggle  ·  "
                  "Ctrl+A select all  ·  Enter confirm  ·  Ctrl+C cancel[/]\n")

    try:
        selected = inquirer.checkbox(
            message="Actions:",
            choices=choices,
            cycle=True,
            instruction="",
        ).execute()
    except KeyboardInterrupt:
        return None

    return selected


def show_estimate(total: int, keys: Sequence[str]) -> None:
    console.print(Panel.fit(
        f"Reclaimable space for [bold]{len(keys)}[/] cleanup action(s): "
        f"[bold green]{_format_size(total)}[/]",
        border_style="cyan",
    ))


def confirm_execution(keys: Sequence[str], cleanup_bytes: int) -> bool:
    """Summarize the selection and ask for confirmation."""
    lines = [f"[bold]{len(keys)}[/] action(s) selected."]
    if cleanup_bytes > 0:
        lines.append(f"Cleanup will free about [bold green]{_format_size(cleanup_bytes)}[/].")
    lines.append("[bold red]Changes are applied best-effort and are NOT rolled back.[/]")
    console.print(Panel("\n".join(lines), border_style="red"))

    try:
        return bool(inquirer.confirm(message="Run selected actions?", default=False).execute())
    except KeyboardInterrupt:
        return False


def show_outcomes(outcomes: Sequence[ActionOutcome], duration_s: float = 0.0,
                  cancelled: bool = False) -> None:
    """Display the per-action report of a batch."""
    table = Table(box=box.ROUNDED, title="[bold]SysTune Report[/]", show_lines=False)
    table.add_column("Action", min_width=28)
    table.add_column("Status", justify="center", width=10)
    table.add_column("Time", justify="right", width=10)
    table.add_column("Details", max_width=60)

    for outcome in outcomes:
        color = STATUS_COLORS.get(outcome.status, "white")
        details = outcome.error or "; ".join(outcome.failures)
        table.add_row(
            outcome.key,
            f"[{color}]{outcome.status.value}[/]",
            _format_duration(outcome.duration_s),
            f"[dim]{details}[/]" if details else "",
        )

    console.print()
    console.print(table)

    ok = sum(1 for o in outcomes if o.succeeded)
    summary = f"{ok}/{len(outcomes)} actions applied cleanly"
    if duration_s > 0:
        summary += f" in {_format_duration(duration_s)}"
    if cancelled:
        console.print(f"[yellow]Cancelled. {summary} before cancellation.[/]")
    else:
        console.print(f"[bold]{summary}.[/]")
    console.print()


def show_rules(rules: Sequence[CustomCleanupRule]) -> None:
    if not rules:
        console.print("[dim]No custom cleanup rules defined.[/]")
        return
    table = Table(box=box.SIMPLE, title="[bold]Custom Cleanup Rules[/]")
    table.add_column("#", justify="right", width=4)
    table.add_column("Directory", min_width=30)
    table.add_column("Extensions")
    table.add_column("Recursive", justify="center", width=9)
    for idx, rule in enumerate(rules, 1):
        table.add_row(str(idx), rule.directory_path, ", ".join(rule.extensions),
                      "yes" if rule.recursive else "no")
    console.print(table)
