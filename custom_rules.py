"""
SysTune — Custom cleanup rules: (directory, extensions, recursive).

The same walk serves two modes: SIZE_ONLY sums matching file sizes for the
estimator, DELETE removes matching files for the executor. A rule whose
extensions normalize to nothing is skipped entirely and never widens to
"every file".
"""

from __future__ import annotations

import logging
import os
import re
import stat
from typing import Iterable, Iterator, List, Optional, Set

from cancellation import CancellationToken
from models import CustomCleanupRule, EvaluationMode

logger = logging.getLogger(__name__)

_PERCENT_VAR = re.compile(r"%([^%]+)%")


def expand_environment(path: str) -> str:
    """
    Expand ``%NAME%`` placeholders (case-insensitive, unknown names kept
    verbatim) and ``$NAME`` / ``~`` forms.
    """
    def _lookup(match: "re.Match[str]") -> str:
        name = match.group(1)
        value = os.environ.get(name)
        if value is None:
            folded = name.casefold()
            for env_name, env_value in os.environ.items():
                if env_name.casefold() == folded:
                    value = env_value
                    break
        return value if value is not None else match.group(0)

    expanded = _PERCENT_VAR.sub(_lookup, path)
    return os.path.expanduser(os.path.expandvars(expanded))


def normalize_extension(value: Optional[str]) -> str:
    """Trim and dot-prefix an extension ("txt" -> ".txt"). Returns "" if nothing usable remains."""
    if value is None:
        return ""
    trimmed = str(value).strip()
    if not trimmed or trimmed == ".":
        return ""
    return trimmed if trimmed.startswith(".") else "." + trimmed


def normalize_extensions(values: Optional[Iterable[str]]) -> List[str]:
    """Normalize, drop empties and de-duplicate case-insensitively, keeping first spellings."""
    result: List[str] = []
    seen: Set[str] = set()
    for value in values or []:
        ext = normalize_extension(value)
        if not ext or ext.casefold() in seen:
            continue
        seen.add(ext.casefold())
        result.append(ext)
    return result


def file_extension(name: str) -> str:
    """Text from the last dot of the file name (".log" -> ".log", "a." -> "")."""
    base = os.path.basename(name)
    dot = base.rfind(".")
    if dot < 0 or dot == len(base) - 1:
        return ""
    return base[dot:]


def _iter_files(directory: str, recursive: bool) -> Iterator[str]:
    """Yield file paths under ``directory``. Top-level enumeration errors propagate."""
    if not recursive:
        with os.scandir(directory) as entries:
            for entry in entries:
                try:
                    if entry.is_file(follow_symlinks=False):
                        yield entry.path
                except OSError:
                    continue
        return

    # Probe the root so an unreadable directory fails the rule instead of yielding nothing
    os.listdir(directory)

    def _on_error(exc: OSError) -> None:
        logger.debug("Custom cleanup skipped unreadable directory. [path=%s, error=%s]",
                     exc.filename, exc)

    for dirpath, _dirnames, filenames in os.walk(directory, onerror=_on_error):
        for name in filenames:
            yield os.path.join(dirpath, name)


def _delete_file(path: str) -> None:
    """Delete one file, clearing the read-only attribute if the first attempt is refused."""
    try:
        os.remove(path)
    except PermissionError:
        os.chmod(path, stat.S_IWRITE)
        os.remove(path)


def evaluate_rules(
    rules: Optional[Iterable[CustomCleanupRule]],
    mode: EvaluationMode,
    token: CancellationToken,
) -> int:
    """
    Apply custom cleanup rules.

    Args:
        rules: Rules as read from the settings store for this call.
        mode: SIZE_ONLY to sum matching file sizes, DELETE to remove the files.
        token: Checked before every rule and every enumerated file.

    Returns:
        Bytes matched (SIZE_ONLY) or bytes freed by successful deletes (DELETE).
    """
    total = 0

    for rule in rules or []:
        token.raise_if_cancelled()

        if not rule.directory_path or not rule.directory_path.strip():
            continue

        directory = expand_environment(rule.directory_path.strip())
        if not os.path.isdir(directory):
            logger.debug("Custom cleanup skipped. Directory not found. [path=%s]", directory)
            continue

        extensions = {ext.casefold() for ext in normalize_extensions(rule.extensions)}
        if not extensions:
            logger.debug("Custom cleanup skipped. No usable extensions. [path=%s]", directory)
            continue

        try:
            total += _evaluate_rule(directory, extensions, rule.recursive, mode, token)
        except OSError as exc:
            logger.error("Custom cleanup failed to enumerate directory. [path=%s, error=%s]",
                         directory, exc)

    return total


def _evaluate_rule(
    directory: str,
    extensions: Set[str],
    recursive: bool,
    mode: EvaluationMode,
    token: CancellationToken,
) -> int:
    total = 0
    for path in _iter_files(directory, recursive):
        token.raise_if_cancelled()

        if file_extension(path).casefold() not in extensions:
            continue

        try:
            size = os.path.getsize(path)
        except OSError:
            # Vanished or unreadable between enumeration and stat
            continue

        if mode == EvaluationMode.SIZE_ONLY:
            total += size
            continue

        try:
            _delete_file(path)
            total += size
            logger.debug("Custom cleanup deleted file. [path=%s]", path)
        except OSError as exc:
            logger.debug("Custom cleanup failed to delete file. [path=%s, error=%s]", path, exc)

    return total
