"""Tests for the action catalog."""

import pytest

from actions import ALL_CATEGORIES, get_category_keys
from catalog import ActionCatalog, CatalogError, build_default_catalog, normalize_keys
from models import Action, Category, CommandSequence, ConfigTweak, CustomCleanup, RegistryValue


def _cmd(key, recommended=True):
    return Action(key, f"{key}.t", f"{key}.d", CommandSequence(("echo",)), recommended=recommended)


class TestNormalizeKeys:
    def test_none(self):
        assert normalize_keys(None) == []

    def test_drops_blank_and_whitespace(self):
        assert normalize_keys(["", "  ", "a", "\t"]) == ["a"]

    def test_case_insensitive_first_occurrence_wins(self):
        assert normalize_keys(["B", "a", "b", "A", "c"]) == ["B", "a", "c"]


class TestActionCatalog:
    def test_lookup_is_case_insensitive(self):
        catalog = ActionCatalog([Category("perf", "t", "d", (_cmd("perf.x"),))])
        assert catalog.lookup("PERF.X").key == "perf.x"
        assert catalog.lookup("perf.y") is None
        assert catalog.lookup("") is None

    def test_duplicate_key_across_categories_fails_fast(self):
        with pytest.raises(CatalogError, match="Duplicate action key"):
            ActionCatalog([
                Category("a", "t", "d", (_cmd("shared.key"),)),
                Category("b", "t", "d", (_cmd("Shared.Key"),)),
            ])

    def test_duplicate_category_key(self):
        with pytest.raises(CatalogError):
            ActionCatalog([Category("a", "t", "d"), Category("A", "t", "d")])

    def test_blank_action_key(self):
        with pytest.raises(CatalogError):
            ActionCatalog([Category("a", "t", "d", (_cmd(" "),))])

    def test_unsupported_target(self):
        bad = Action("a.bad", "t", "d", target="rm -rf /")
        with pytest.raises(CatalogError, match="unsupported target"):
            ActionCatalog([Category("a", "t", "d", (bad,))])

    def test_recommended_keys_split_on_cleanup_prefix(self):
        catalog = ActionCatalog([
            Category("perf", "t", "d", (_cmd("perf.a"), _cmd("perf.b", recommended=False))),
            Category("cleanup", "t", "d", (_cmd("cleanupish.a"),)),
            Category("cleanup.files", "t", "d", (_cmd("cleanup.a"), _cmd("cleanup.b", False))),
        ])
        # "cleanup" without the dot is not a cleanup category
        assert catalog.recommended_keys(cleanup=False) == ["perf.a", "cleanupish.a"]
        assert catalog.recommended_keys(cleanup=True) == ["cleanup.a"]

    def test_categories_keep_declaration_order(self):
        cats = [Category(k, "t", "d") for k in ("z", "a", "m")]
        catalog = ActionCatalog(cats)
        assert [c.key for c in catalog.categories] == ["z", "a", "m"]
        assert catalog.categories == catalog.categories


class TestDefaultCatalog:
    def test_builds_without_errors(self):
        catalog = build_default_catalog()
        assert len(catalog) == 29

    def test_category_order(self):
        catalog = build_default_catalog()
        assert [c.key for c in catalog.categories] == get_category_keys() == [
            "explorer",
            "performance",
            "services",
            "cleanup.cache",
            "cleanup.systemFiles",
            "cleanup.systemComponents",
            "cleanup.performance",
            "cleanup.custom",
        ]

    def test_keys_unique_case_insensitively(self):
        keys = [a.key.casefold() for m in ALL_CATEGORIES for a in m.actions]
        assert len(keys) == len(set(keys))

    def test_custom_cleanup_has_no_check(self):
        action = build_default_catalog().lookup("cleanup.custom")
        assert isinstance(action.target, CustomCleanup)
        assert not action.has_check
        assert not action.recommended

    def test_tweak_actions_are_checkable(self):
        for action in build_default_catalog().actions():
            if isinstance(action.target, ConfigTweak):
                assert action.has_check
                assert all(isinstance(v, RegistryValue) for v in action.target.values)

    def test_recommended_performance_excludes_cleanup(self):
        catalog = build_default_catalog()
        keys = catalog.recommended_keys(cleanup=False)
        assert "explorer.taskbar" in keys
        assert "explorer.startMenu" not in keys
        assert "services.search" not in keys
        assert not any(k.startswith("cleanup.") for k in keys)

    def test_recommended_cleanup(self):
        keys = build_default_catalog().recommended_keys(cleanup=True)
        assert keys == [
            "cleanup.browserCache",
            "cleanup.thumbnailCache",
            "cleanup.remoteDesktopCache",
            "cleanup.tempFiles",
            "cleanup.logs",
            "cleanup.crashDumps",
            "cleanup.recycleBin",
            "cleanup.windowsUpdate",
            "cleanup.componentStore",
        ]
