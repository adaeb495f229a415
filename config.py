"""
SysTune — Configuration and persisted user settings.

Provides:
  - Custom cleanup rules and the AppX removal list (settings.json)
  - Application config: log location, log level, service stop timeout (config.json)

Both files live under %APPDATA%\\SysTune. Loads never raise; saves re-read
the file and replace only their own keys so unrelated settings survive.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, List

from models import CustomCleanupRule

logger = logging.getLogger(__name__)

CONFIG_DIR = os.path.join(os.environ.get("APPDATA", "."), "SysTune")
CONFIG_FILE = os.path.join(CONFIG_DIR, "config.json")
SETTINGS_FILE = os.path.join(CONFIG_DIR, "settings.json")

CUSTOM_RULES_KEY = "custom_cleanup_rules"
APPX_PACKAGES_KEY = "appx_packages_to_remove"


def _read_json(path: str) -> Dict[str, Any]:
    """Read a JSON object from disk, or return an empty dict."""
    try:
        if os.path.isfile(path):
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
            if isinstance(data, dict):
                return data
            logger.warning("Ignoring settings file with unexpected layout. [path=%s]", path)
    except (json.JSONDecodeError, OSError) as exc:
        logger.warning("Failed to read settings file. [path=%s, error=%s]", path, exc)
    return {}


def _write_json(path: str, data: Dict[str, Any]) -> None:
    """Write a JSON object via a temp file so a crash never leaves half a file."""
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    tmp_path = path + ".tmp"
    with open(tmp_path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)
    os.replace(tmp_path, path)


# ── User settings ────────────────────────────────────────────────────────────

def rule_from_dict(data: Any) -> CustomCleanupRule:
    """Build a rule from its persisted record. Raises ValueError if malformed."""
    if not isinstance(data, dict):
        raise ValueError("rule record is not an object")
    directory = data.get("directory_path")
    if not isinstance(directory, str):
        raise ValueError("rule record has no directory_path")
    extensions = data.get("extensions") or []
    if not isinstance(extensions, list):
        raise ValueError("rule record extensions is not a list")
    return CustomCleanupRule(
        directory_path=directory,
        extensions=[str(e) for e in extensions if e is not None],
        recursive=bool(data.get("recursive", False)),
    )


def rule_to_dict(rule: CustomCleanupRule) -> Dict[str, Any]:
    return {
        "directory_path": rule.directory_path,
        "extensions": list(rule.extensions),
        "recursive": rule.recursive,
    }


class SettingsStore:
    """
    File-backed store for the lists the optimization engine reads.

    Every load goes to disk; nothing is cached between calls.
    """

    def __init__(self, path: str = SETTINGS_FILE) -> None:
        self.path = path

    def load_custom_rules(self) -> List[CustomCleanupRule]:
        rules: List[CustomCleanupRule] = []
        for index, record in enumerate(_read_json(self.path).get(CUSTOM_RULES_KEY) or []):
            try:
                rules.append(rule_from_dict(record))
            except ValueError as exc:
                logger.warning("Skipping malformed custom cleanup rule. [index=%s, error=%s]",
                               index, exc)
        return rules

    def save_custom_rules(self, rules: List[CustomCleanupRule]) -> None:
        self._update(CUSTOM_RULES_KEY, [rule_to_dict(r) for r in rules])

    def load_appx_packages(self) -> List[str]:
        packages = _read_json(self.path).get(APPX_PACKAGES_KEY) or []
        if not isinstance(packages, list):
            logger.warning("Ignoring malformed AppX package list. [path=%s]", self.path)
            return []
        return [str(p) for p in packages if isinstance(p, str)]

    def save_appx_packages(self, packages: List[str]) -> None:
        self._update(APPX_PACKAGES_KEY, list(packages))

    def _update(self, key: str, value: Any) -> None:
        data = _read_json(self.path)
        data[key] = value
        _write_json(self.path, data)


# ── General Config ───────────────────────────────────────────────────────────

@dataclass
class AppConfig:
    """Application-wide configuration."""
    log_dir: str = CONFIG_DIR
    log_level: str = "INFO"
    service_stop_timeout_s: float = 10.0


def load_config(path: str = CONFIG_FILE) -> AppConfig:
    """Load app config from disk, or return defaults."""
    config = AppConfig()
    data = _read_json(path)
    config.log_dir = data.get("log_dir", config.log_dir)
    config.log_level = str(data.get("log_level", config.log_level)).upper()
    try:
        config.service_stop_timeout_s = float(
            data.get("service_stop_timeout_s", config.service_stop_timeout_s))
    except (TypeError, ValueError):
        logger.warning("Invalid service_stop_timeout_s in config, using default.")
    return config


def save_config(config: AppConfig, path: str = CONFIG_FILE) -> None:
    """Save app config to disk."""
    data = _read_json(path)
    data.update({
        "log_dir": config.log_dir,
        "log_level": config.log_level,
        "service_stop_timeout_s": config.service_stop_timeout_s,
    })
    try:
        _write_json(path, data)
    except OSError as exc:
        logger.error("Failed to save config. [path=%s, error=%s]", path, exc)
