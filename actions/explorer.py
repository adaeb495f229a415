"""
Category: Explorer
Taskbar, Start menu, responsiveness and visibility tweaks for the shell.
"""

from __future__ import annotations

from models import Action, ConfigTweak, RegistryValue as Reg, ValueKind

key = "explorer"
title_ref = "category.explorer.title"
description_ref = "category.explorer.description"

_ADVANCED = r"Software\Microsoft\Windows\CurrentVersion\Explorer\Advanced"
_SEARCH = r"Software\Microsoft\Windows\CurrentVersion\Search"
_POLICIES_EXPLORER = r"Software\Microsoft\Windows\CurrentVersion\Policies\Explorer"
_CDM = r"Software\Microsoft\Windows\CurrentVersion\ContentDeliveryManager"

TASKBAR = (
    Reg("HKCU", _SEARCH, "SearchboxTaskbarMode", 0),
    Reg("HKCU", _ADVANCED, "ShowTaskViewButton", 0),
    Reg("HKCU", r"Software\Microsoft\Windows\CurrentVersion\Explorer", "EnableAutoTray", 0),
    Reg("HKCU", _ADVANCED, "TaskbarGlomLevel", 2),
)

START_MENU = (
    # 1 = search box instead of icon
    Reg("HKCU", _SEARCH, "SearchboxTaskbarMode", 1),
    Reg("HKCU", _POLICIES_EXPLORER, "NoStartMenuPinnedList", 1),
    Reg("HKCU", _POLICIES_EXPLORER, "NoStartMenuMorePrograms", 1),
    Reg("HKCU", _POLICIES_EXPLORER, "NoStartMenuMFUprogramsList", 1),
    Reg("HKCU", r"Software\Policies\Microsoft\Windows\Explorer", "DisableSearchBoxSuggestions", 1),
)

RESPONSIVENESS = (
    Reg("HKCU", r"Control Panel\Desktop", "MenuShowDelay", "0", ValueKind.STRING),
    Reg("HKCU", r"Control Panel\Desktop", "AutoEndTasks", "1", ValueKind.STRING),
    Reg("HKCU", _ADVANCED, "LaunchTo", 1),
)

VISIBILITY = (
    Reg("HKCU", _ADVANCED, "HideFileExt", 0),
    Reg("HKCU", _ADVANCED, "Hidden", 1),
)

SUGGESTIONS = (
    Reg("HKCU", _ADVANCED, "ShowSyncProviderNotifications", 0),
    Reg("HKCU", _CDM, "SubscribedContent-338387Enabled", 0),
    Reg("HKCU", _CDM, "SubscribedContent-338388Enabled", 0),
    Reg("HKCU", _CDM, "SystemPaneSuggestionsEnabled", 0),
    Reg("HKCU", _CDM, "SubscribedContent-310093Enabled", 0),
)

RESTART_EXPLORER = "taskkill /f /im explorer.exe & start explorer.exe"

actions = (
    Action("explorer.taskbar", "action.explorer.taskbar.title",
           "action.explorer.taskbar.description", ConfigTweak(TASKBAR)),
    Action("explorer.startMenu", "action.explorer.startMenu.title",
           "action.explorer.startMenu.description",
           ConfigTweak(START_MENU, notify_shell=True, followup_commands=(RESTART_EXPLORER,)),
           recommended=False),
    Action("explorer.responsiveness", "action.explorer.responsiveness.title",
           "action.explorer.responsiveness.description", ConfigTweak(RESPONSIVENESS)),
    Action("explorer.visibility", "action.explorer.visibility.title",
           "action.explorer.visibility.description", ConfigTweak(VISIBILITY)),
    Action("explorer.suggestions", "action.explorer.suggestions.title",
           "action.explorer.suggestions.description", ConfigTweak(SUGGESTIONS)),
)
