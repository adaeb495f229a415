"""
SysTune — Data models for the action catalog, tweak targets and outcomes.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union


class ValueKind(enum.Enum):
    """Registry value type of a configuration tweak."""
    INTEGER32 = "dword"
    INTEGER64 = "qword"
    STRING = "string"
    EXPANDABLE_STRING = "expand_string"

    @property
    def is_numeric(self) -> bool:
        return self in (ValueKind.INTEGER32, ValueKind.INTEGER64)


class StartMode(enum.Enum):
    """Service start mode, valued as the registry ``Start`` DWORD."""
    BOOT = 0
    SYSTEM = 1
    AUTOMATIC = 2
    MANUAL = 3
    DISABLED = 4


class RunState(enum.Enum):
    """Service run state."""
    STOPPED = "stopped"
    START_PENDING = "start_pending"
    STOP_PENDING = "stop_pending"
    RUNNING = "running"
    CONTINUE_PENDING = "continue_pending"
    PAUSE_PENDING = "pause_pending"
    PAUSED = "paused"

    @property
    def is_stopping_or_stopped(self) -> bool:
        return self in (RunState.STOPPED, RunState.STOP_PENDING)


class EvaluationMode(enum.Enum):
    """What the custom rule evaluator does with matching files."""
    SIZE_ONLY = "size_only"
    DELETE = "delete"


class ActionStatus(enum.Enum):
    """Batch-level result of running one action."""
    APPLIED = "applied"     # Every step succeeded
    PARTIAL = "partial"     # Ran to completion, some steps failed and were logged
    FAILED = "failed"       # Apply raised


# ── Apply targets (tagged variant) ───────────────────────────────────────────

@dataclass(frozen=True)
class RegistryValue:
    """One registry entry and the value it should hold."""
    root: str                   # "HKCU", "HKEY_LOCAL_MACHINE", ...
    path: str                   # Sub key path below the root
    entry: str                  # Value name
    value: Union[int, str]      # Expected data
    kind: ValueKind = ValueKind.INTEGER32


@dataclass(frozen=True)
class ConfigTweak:
    """Write a set of registry values; applied when all of them match."""
    values: Tuple[RegistryValue, ...]
    notify_shell: bool = False                  # Broadcast a setting change afterwards
    followup_commands: Tuple[str, ...] = ()     # Run after the values are written


@dataclass(frozen=True)
class ServiceDisable:
    """Set services to start mode disabled and stop them."""
    services: Tuple[str, ...]


@dataclass(frozen=True)
class CommandSequence:
    """Shell commands run one at a time; a failing command does not abort the rest."""
    commands: Tuple[str, ...]


@dataclass(frozen=True)
class CustomCleanup:
    """Delete files matched by the user's custom cleanup rules."""


@dataclass(frozen=True)
class PackageRemoval:
    """Remove the AppX packages the user selected for removal."""


ActionTarget = Union[ConfigTweak, ServiceDisable, CommandSequence, CustomCleanup, PackageRemoval]

# Variants with a well-defined "applied" predicate
CHECKABLE_TARGETS = (ConfigTweak, ServiceDisable)


@dataclass(frozen=True)
class Action:
    """The atomic unit of the catalog."""
    key: str
    title_ref: str
    description_ref: str
    target: ActionTarget
    recommended: bool = True

    @property
    def has_check(self) -> bool:
        return isinstance(self.target, CHECKABLE_TARGETS)


@dataclass(frozen=True)
class Category:
    """An ordered group of actions."""
    key: str
    title_ref: str
    description_ref: str
    actions: Tuple[Action, ...] = ()

    @property
    def is_cleanup(self) -> bool:
        return self.key.lower().startswith("cleanup.")


# ── Cleanup inputs ───────────────────────────────────────────────────────────

@dataclass
class CustomCleanupRule:
    """A user-defined cleanup rule, persisted in the settings store."""
    directory_path: str
    extensions: List[str] = field(default_factory=list)
    recursive: bool = False


@dataclass(frozen=True)
class CleanupLocation:
    """A well-known location walked by the cleanup estimator."""
    path: str                       # May contain %VAR% placeholders
    pattern: Optional[str] = None   # File name glob, None means every file
    single_file: bool = False       # Path names one file instead of a directory
    recursive: bool = True          # False walks the top directory only


# ── Results ──────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class CommandResult:
    """Exit code and captured output of one shell command."""
    command: str
    exit_code: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


@dataclass
class ApplyReport:
    """Steps swallowed while applying one action (logged, not raised)."""
    failures: List[str] = field(default_factory=list)

    def fail(self, message: str) -> None:
        self.failures.append(message)

    @property
    def ok(self) -> bool:
        return not self.failures


@dataclass
class ActionOutcome:
    """Result of one action inside a batch."""
    key: str
    status: ActionStatus
    failures: List[str] = field(default_factory=list)
    error: Optional[str] = None
    duration_s: float = 0.0

    @property
    def succeeded(self) -> bool:
        return self.status == ActionStatus.APPLIED


def _format_size(size_bytes: int) -> str:
    """Format bytes into a human-readable string."""
    if size_bytes <= 0:
        return "0 B"
    units = ["B", "KB", "MB", "GB", "TB"]
    size = float(size_bytes)
    idx = 0
    while size >= 1024.0 and idx < len(units) - 1:
        size /= 1024.0
        idx += 1
    return f"{size:.1f} {units[idx]}"


def _format_duration(seconds: float) -> str:
    """Format seconds into a human-readable duration string."""
    if seconds < 0.001:
        return "<1ms"
    if seconds < 1.0:
        return f"{seconds * 1000:.0f}ms"
    if seconds < 60.0:
        return f"{seconds:.1f}s"
    minutes = int(seconds // 60)
    secs = seconds % 60
    if minutes < 60:
        return f"{minutes}m {secs:.0f}s"
    hours = minutes // 60
    mins = minutes % 60
    return f"{hours}h {mins}m {secs:.0f}s"
