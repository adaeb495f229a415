"""
Category: Performance
Multimedia scheduling, memory management, notification and telemetry tweaks,
plus the high-performance power plan.
"""

from __future__ import annotations

from models import Action, CommandSequence, ConfigTweak, RegistryValue as Reg

key = "performance"
title_ref = "category.performance.title"
description_ref = "category.performance.description"

_SYSTEM_PROFILE = r"SOFTWARE\Microsoft\Windows NT\CurrentVersion\Multimedia\SystemProfile"
_MEMORY = r"SYSTEM\CurrentControlSet\Control\Session Manager\Memory Management"

MULTIMEDIA = (
    # 0xFFFFFFFF disables network throttling
    Reg("HKLM", _SYSTEM_PROFILE, "NetworkThrottlingIndex", 0xFFFFFFFF),
    Reg("HKLM", _SYSTEM_PROFILE, "SystemResponsiveness", 0),
)

MEMORY = (
    Reg("HKLM", _MEMORY, "LargeSystemCache", 1),
    Reg("HKLM", _MEMORY, "DisablePagingExecutive", 1),
)

NOTIFICATIONS = (
    Reg("HKLM", r"SOFTWARE\Policies\Microsoft\Windows\System", "DisableAcrylicBackgroundOnLogon", 1),
    Reg("HKLM", r"SOFTWARE\Policies\Microsoft\Windows\Explorer", "DisableNotificationCenter", 1),
)

TELEMETRY = (
    Reg("HKCU", r"Software\Microsoft\Windows\CurrentVersion\AdvertisingInfo", "Enabled", 0),
    Reg("HKCU", r"Software\Policies\Microsoft\Windows\CloudContent", "DisableWindowsSpotlightFeatures", 1),
    Reg("HKCU", r"Software\Policies\Microsoft\Windows\CloudContent", "DisableSuggestionsWindowsTips", 1),
    Reg("HKLM", r"SOFTWARE\Policies\Microsoft\Windows\DataCollection", "AllowTelemetry", 0),
)

POWER_PLAN = (
    "powercfg -setactive SCHEME_MIN",
    "powercfg -h off",
)

actions = (
    Action("performance.multimedia", "action.performance.multimedia.title",
           "action.performance.multimedia.description", ConfigTweak(MULTIMEDIA)),
    Action("performance.memory", "action.performance.memory.title",
           "action.performance.memory.description", ConfigTweak(MEMORY)),
    Action("performance.notifications", "action.performance.notifications.title",
           "action.performance.notifications.description", ConfigTweak(NOTIFICATIONS),
           recommended=False),
    Action("performance.telemetry", "action.performance.telemetry.title",
           "action.performance.telemetry.description", ConfigTweak(TELEMETRY)),
    Action("performance.powerPlan", "action.performance.powerPlan.title",
           "action.performance.powerPlan.description", CommandSequence(POWER_PLAN)),
)
