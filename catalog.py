"""
SysTune — Action catalog: the ordered, immutable table of categories and actions.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from models import Action, Category, CHECKABLE_TARGETS
from models import CommandSequence, CustomCleanup, PackageRemoval

_KNOWN_TARGETS = CHECKABLE_TARGETS + (CommandSequence, CustomCleanup, PackageRemoval)


class CatalogError(ValueError):
    """The catalog definition is malformed (duplicate or blank key, bad target)."""


def normalize_keys(keys: Optional[Iterable[str]]) -> List[str]:
    """
    Drop blank keys and case-insensitive duplicates, keeping first occurrences in order.
    """
    if keys is None:
        return []
    seen = set()
    result: List[str] = []
    for key in keys:
        if key is None or not str(key).strip():
            continue
        folded = key.casefold()
        if folded in seen:
            continue
        seen.add(folded)
        result.append(key)
    return result


class ActionCatalog:
    """
    Categories in declaration order plus a case-insensitive key index.

    Built once and shared read-only. Construction validates the whole table
    and raises ``CatalogError`` on the first problem found; it never touches
    the registry, services or file system.
    """

    def __init__(self, categories: Sequence[Category]) -> None:
        self._categories: Tuple[Category, ...] = tuple(categories)
        self._by_key: Dict[str, Action] = {}
        self._category_of: Dict[str, Category] = {}

        category_keys = set()
        for category in self._categories:
            if not category.key or not category.key.strip():
                raise CatalogError("Category with blank key")
            folded = category.key.casefold()
            if folded in category_keys:
                raise CatalogError(f"Duplicate category key: {category.key}")
            category_keys.add(folded)

            for action in category.actions:
                self._register(category, action)

    def _register(self, category: Category, action: Action) -> None:
        if not action.key or not action.key.strip():
            raise CatalogError(f"Action with blank key in category {category.key}")
        if not isinstance(action.target, _KNOWN_TARGETS):
            raise CatalogError(
                f"Action {action.key} has unsupported target {type(action.target).__name__}"
            )
        folded = action.key.casefold()
        if folded in self._by_key:
            other = self._category_of[folded]
            raise CatalogError(
                f"Duplicate action key: {action.key} "
                f"(in {category.key}, already registered in {other.key})"
            )
        self._by_key[folded] = action
        self._category_of[folded] = category

    @property
    def categories(self) -> Tuple[Category, ...]:
        return self._categories

    def lookup(self, key: str) -> Optional[Action]:
        """Find an action by key, ignoring case. Returns None for unknown or blank keys."""
        if not key:
            return None
        return self._by_key.get(key.casefold())

    def category_of(self, key: str) -> Optional[Category]:
        if not key:
            return None
        return self._category_of.get(key.casefold())

    def actions(self) -> List[Action]:
        """All actions flattened in declaration order."""
        return [a for c in self._categories for a in c.actions]

    def recommended_keys(self, cleanup: bool) -> List[str]:
        """Keys of recommended actions in cleanup (or non-cleanup) categories."""
        return [
            action.key
            for category in self._categories
            if category.is_cleanup == cleanup
            for action in category.actions
            if action.recommended
        ]

    def cleanup_keys(self) -> List[str]:
        return [a.key for c in self._categories if c.is_cleanup for a in c.actions]

    def __len__(self) -> int:
        return len(self._by_key)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.lookup(key) is not None


def build_category(module) -> Category:
    """Turn a category module from ``actions`` into a Category."""
    return Category(
        key=module.key,
        title_ref=module.title_ref,
        description_ref=module.description_ref,
        actions=tuple(module.actions),
    )


def build_default_catalog() -> ActionCatalog:
    """Assemble the built-in catalog from the ``actions`` package."""
    from actions import ALL_CATEGORIES

    return ActionCatalog([build_category(m) for m in ALL_CATEGORIES])
