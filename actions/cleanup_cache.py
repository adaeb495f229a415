"""
Category: Cache Cleanup
Browser, thumbnail and Remote Desktop caches.
"""

from __future__ import annotations

from models import Action, CommandSequence

key = "cleanup.cache"
title_ref = "category.cleanup.cache.title"
description_ref = "category.cleanup.cache.description"

BROWSER_CACHE = (
    r'del /f /s /q "%LocalAppData%\Microsoft\Windows\INetCache\*" >nul 2>&1',
    r'del /f /s /q "%LocalAppData%\Microsoft\Windows\INetCookies\*" >nul 2>&1',
)

THUMBNAIL_CACHE = (
    r'del /f /s /q "%LocalAppData%\Microsoft\Windows\Explorer\thumbcache_*.db" >nul 2>&1',
    r'del /f /s /q "%LocalAppData%\Local\D3DSCache\*" >nul 2>&1',
)

REMOTE_DESKTOP_CACHE = (
    r'del /f /s /q "%LocalAppData%\Microsoft\Terminal Server Client\Cache\*" >nul 2>&1',
)

actions = (
    Action("cleanup.browserCache", "action.cleanup.browserCache.title",
           "action.cleanup.browserCache.description", CommandSequence(BROWSER_CACHE)),
    Action("cleanup.thumbnailCache", "action.cleanup.thumbnailCache.title",
           "action.cleanup.thumbnailCache.description", CommandSequence(THUMBNAIL_CACHE)),
    Action("cleanup.remoteDesktopCache", "action.cleanup.remoteDesktopCache.title",
           "action.cleanup.remoteDesktopCache.description", CommandSequence(REMOTE_DESKTOP_CACHE)),
)
