"""
Category: Custom Cleanup
Files matched by the user's own (directory, extensions, recursive) rules.
"""

from __future__ import annotations

from models import Action, CustomCleanup

key = "cleanup.custom"
title_ref = "category.cleanup.custom.title"
description_ref = "category.cleanup.custom.description"

CUSTOM_ACTION_KEY = "cleanup.custom"

actions = (
    Action(CUSTOM_ACTION_KEY, "action.cleanup.custom.title",
           "action.cleanup.custom.description", CustomCleanup(),
           recommended=False),
)
