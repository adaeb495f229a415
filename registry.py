"""
SysTune — Registry access for configuration tweaks.

``ConfigStore`` is the accessor the executor and inspector talk to;
``WinregConfigStore`` is the real implementation on top of ``winreg``.
"""

from __future__ import annotations

import sys
from typing import Optional, Union

from models import ValueKind


# Accepted spellings of each root, normalized to the short form
_ROOT_ALIASES = {
    "HKLM": "HKLM",
    "HKEY_LOCAL_MACHINE": "HKLM",
    "HKCU": "HKCU",
    "HKEY_CURRENT_USER": "HKCU",
    "HKCR": "HKCR",
    "HKEY_CLASSES_ROOT": "HKCR",
    "HKU": "HKU",
    "HKEY_USERS": "HKU",
}

_MASKS = {
    ValueKind.INTEGER32: 0xFFFFFFFF,
    ValueKind.INTEGER64: 0xFFFFFFFFFFFFFFFF,
}


def normalize_root(root: str) -> str:
    """Return the short name of a registry root ("HKEY_CURRENT_USER" -> "HKCU")."""
    short = _ROOT_ALIASES.get(root.strip().upper())
    if short is None:
        raise ValueError(f"Unknown registry root: {root!r}")
    return short


def values_equal(current: object, expected: Union[int, str], kind: ValueKind) -> bool:
    """
    Compare a value read from the registry with the expected one.

    Numeric kinds compare as integers, masked to their width so a DWORD
    written as 0xFFFFFFFF equals one read back as -1. String kinds compare
    ordinally. Anything that cannot be converted is unequal.
    """
    if current is None:
        return False
    try:
        if kind.is_numeric:
            mask = _MASKS[kind]
            return (int(current) & mask) == (int(expected) & mask)
        return str(current) == str(expected)
    except (TypeError, ValueError):
        return False


class ConfigStore:
    """Key-value configuration accessor (registry-shaped)."""

    def get(self, root: str, path: str, entry: str) -> Optional[object]:
        """Return the current data of an entry, or None if the key or entry is absent."""
        raise NotImplementedError

    def set(self, root: str, path: str, entry: str,
            value: Union[int, str], kind: ValueKind) -> None:
        """Write an entry, creating the key if needed."""
        raise NotImplementedError

    def notify_changed(self) -> None:
        """Tell running shells that policy settings changed."""


class WinregConfigStore(ConfigStore):
    """ConfigStore backed by the Windows registry (64-bit view)."""

    def __init__(self) -> None:
        import winreg

        self._winreg = winreg
        self._hives = {
            "HKLM": winreg.HKEY_LOCAL_MACHINE,
            "HKCU": winreg.HKEY_CURRENT_USER,
            "HKCR": winreg.HKEY_CLASSES_ROOT,
            "HKU": winreg.HKEY_USERS,
        }
        self._kinds = {
            ValueKind.INTEGER32: winreg.REG_DWORD,
            ValueKind.INTEGER64: winreg.REG_QWORD,
            ValueKind.STRING: winreg.REG_SZ,
            ValueKind.EXPANDABLE_STRING: winreg.REG_EXPAND_SZ,
        }

    def _hive(self, root: str) -> int:
        return self._hives[normalize_root(root)]

    def get(self, root: str, path: str, entry: str) -> Optional[object]:
        winreg = self._winreg
        try:
            with winreg.OpenKey(self._hive(root), path, 0,
                                winreg.KEY_READ | winreg.KEY_WOW64_64KEY) as key:
                value, _reg_type = winreg.QueryValueEx(key, entry)
                return value
        except FileNotFoundError:
            return None

    def set(self, root: str, path: str, entry: str,
            value: Union[int, str], kind: ValueKind) -> None:
        winreg = self._winreg
        data: Union[int, str] = value
        if kind.is_numeric:
            # winreg expects the unsigned representation
            data = int(value) & _MASKS[kind]
        with winreg.CreateKeyEx(self._hive(root), path, 0,
                                winreg.KEY_SET_VALUE | winreg.KEY_WOW64_64KEY) as key:
            winreg.SetValueEx(key, entry, 0, self._kinds[kind], data)

    def notify_changed(self) -> None:
        """Broadcast WM_SETTINGCHANGE("Policy") so Explorer re-reads policies."""
        if sys.platform != "win32":
            return
        import ctypes

        hwnd_broadcast = 0xFFFF
        wm_settingchange = 0x001A
        smto_abortifhung = 0x0002
        result = ctypes.c_ulong()
        ok = ctypes.windll.user32.SendMessageTimeoutW(
            hwnd_broadcast, wm_settingchange, 0, "Policy",
            smto_abortifhung, 5000, ctypes.byref(result),
        )
        if not ok:
            raise ctypes.WinError()
