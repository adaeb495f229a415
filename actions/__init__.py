"""
SysTune — Built-in action categories.

Each category module exposes:
    key: str              — stable dot-segmented identifier ("cleanup." marks cleanup)
    title_ref: str        — resource key of the title
    description_ref: str  — resource key of the description
    actions: tuple        — ordered Action definitions
"""

from __future__ import annotations

from typing import Any, List

from actions import (
    explorer,
    performance,
    services,
    cleanup_cache,
    cleanup_system_files,
    cleanup_system_components,
    cleanup_performance,
    cleanup_custom,
)

# Declaration order is the order categories are presented and executed in
ALL_CATEGORIES: List[Any] = [
    # ── Optimization ─────────────────────────────────────────────────────
    explorer,
    performance,
    services,
    # ── Cleanup ──────────────────────────────────────────────────────────
    cleanup_cache,
    cleanup_system_files,
    cleanup_system_components,
    cleanup_performance,
    cleanup_custom,
]


def get_category_keys() -> List[str]:
    """Return the keys of all built-in categories."""
    return [c.key for c in ALL_CATEGORIES]
