"""
Category: System Components Cleanup
Windows Update caches, the WinSxS component store, .NET native images and
preinstalled AppX packages.

WinSxS is hard-linked with System32, so it is only ever cleaned through DISM.
"""

from __future__ import annotations

from models import Action, CommandSequence, PackageRemoval

key = "cleanup.systemComponents"
title_ref = "category.cleanup.systemComponents.title"
description_ref = "category.cleanup.systemComponents.description"

WINDOWS_UPDATE = (
    r'del /f /s /q "%SystemRoot%\SoftwareDistribution\Download\*" >nul 2>&1',
    r'del /f /s /q "%SystemRoot%\SoftwareDistribution\DeliveryOptimization\*" >nul 2>&1',
)

COMPONENT_STORE = (
    "dism /Online /Cleanup-Image /StartComponentCleanup /ResetBase",
    r'del /f /s /q "%SystemRoot%\WinSxS\Temp\*" >nul 2>&1',
)

DOTNET_NATIVE_IMAGES = (
    r'rd /s /q "%WinDir%\assembly\NativeImages_v4.0.30319_32" >nul 2>&1 & '
    r'rd /s /q "%WinDir%\assembly\NativeImages_v4.0.30319_64" >nul 2>&1',
)

# Suggested selection for the AppX removal list
DEFAULT_APPX_PACKAGES = (
    "Microsoft.BingNews",
    "Microsoft.BingWeather",
    "Microsoft.BingFinance",
    "Microsoft.BingSports",
    "Microsoft.GetHelp",
    "Microsoft.Getstarted",
    "Microsoft.MixedReality.Portal",
    "Microsoft.Microsoft3DViewer",
    "Microsoft.MicrosoftOfficeHub",
    "Microsoft.MicrosoftSolitaireCollection",
    "Microsoft.MicrosoftStickyNotes",
    "Microsoft.OneConnect",
    "Microsoft.Paint3D",
    "Microsoft.People",
    "Microsoft.PowerAutomateDesktop",
    "Microsoft.RemoteDesktop",
    "Microsoft.SkypeApp",
    "Microsoft.Whiteboard",
    "Microsoft.WindowsFeedbackHub",
    "Microsoft.Xbox.TCUI",
    "Microsoft.XboxApp",
    "Microsoft.XboxGameOverlay",
    "Microsoft.XboxGamingOverlay",
    "Microsoft.XboxIdentityProvider",
    "Microsoft.XboxSpeechToTextOverlay",
    "Microsoft.ZuneMusic",
    "Microsoft.ZuneVideo",
    "Microsoft.YourPhone",
    "Clipchamp.Clipchamp",
    "TikTok.TikTok",
    "SpotifyAB.SpotifyMusic",
    "Disney.37853FC22B2CE",
    "Microsoft.549981C3F5F10",
)

APPX_ACTION_KEY = "cleanup.appxBloatware"

actions = (
    Action("cleanup.windowsUpdate", "action.cleanup.windowsUpdate.title",
           "action.cleanup.windowsUpdate.description", CommandSequence(WINDOWS_UPDATE)),
    Action("cleanup.componentStore", "action.cleanup.componentStore.title",
           "action.cleanup.componentStore.description", CommandSequence(COMPONENT_STORE)),
    Action("cleanup.dotnetNative", "action.cleanup.dotnetNative.title",
           "action.cleanup.dotnetNative.description", CommandSequence(DOTNET_NATIVE_IMAGES),
           recommended=False),
    Action(APPX_ACTION_KEY, "action.cleanup.appxBloatware.title",
           "action.cleanup.appxBloatware.description", PackageRemoval(),
           recommended=False),
)
