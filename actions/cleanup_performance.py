"""
Category: Performance Cleanup
Prefetch files. Windows rebuilds them, so the first boots afterwards are slower.
"""

from __future__ import annotations

from models import Action, CommandSequence

key = "cleanup.performance"
title_ref = "category.cleanup.performance.title"
description_ref = "category.cleanup.performance.description"

PREFETCH = (
    r'del /f /s /q "%SystemRoot%\Prefetch\*" >nul 2>&1',
)

actions = (
    Action("cleanup.prefetch", "action.cleanup.prefetch.title",
           "action.cleanup.prefetch.description", CommandSequence(PREFETCH),
           recommended=False),
)
