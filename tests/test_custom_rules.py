"""Tests for custom cleanup rule evaluation."""

import os

import pytest

from cancellation import CancellationToken, OperationCancelled
from custom_rules import (
    evaluate_rules,
    expand_environment,
    file_extension,
    normalize_extension,
    normalize_extensions,
)
from models import CustomCleanupRule, EvaluationMode


@pytest.fixture
def rule_dir(tmp_path):
    """a.log (100), b.TXT (50), c.dat (70), sub/d.log (30)."""
    (tmp_path / "a.log").write_bytes(b"x" * 100)
    (tmp_path / "b.TXT").write_bytes(b"x" * 50)
    (tmp_path / "c.dat").write_bytes(b"x" * 70)
    (tmp_path / "sub").mkdir()
    (tmp_path / "sub" / "d.log").write_bytes(b"x" * 30)
    return tmp_path


class TestNormalizeExtensions:
    @pytest.mark.parametrize("raw, expected", [
        (" txt", ".txt"),
        (".log", ".log"),
        ("  .Tmp  ", ".Tmp"),
        ("", ""),
        ("   ", ""),
        (".", ""),
        (None, ""),
    ])
    def test_normalize_extension(self, raw, expected):
        assert normalize_extension(raw) == expected

    def test_dedup_keeps_first_spelling(self):
        assert normalize_extensions([".log", " txt", "LOG", "", ".TXT"]) == [".log", ".txt"]


class TestEvaluateRules:
    def test_size_only_top_level(self, rule_dir, token):
        rule = CustomCleanupRule(str(rule_dir), [".log", " txt", "LOG"], recursive=False)
        assert evaluate_rules([rule], EvaluationMode.SIZE_ONLY, token) == 150
        assert (rule_dir / "a.log").exists()

    def test_size_only_recursive(self, rule_dir, token):
        rule = CustomCleanupRule(str(rule_dir), ["log"], recursive=True)
        assert evaluate_rules([rule], EvaluationMode.SIZE_ONLY, token) == 130

    def test_empty_extensions_never_match_everything(self, rule_dir, token):
        rules = [
            CustomCleanupRule(str(rule_dir), [], recursive=True),
            CustomCleanupRule(str(rule_dir), ["", "  ", "."], recursive=True),
        ]
        assert evaluate_rules(rules, EvaluationMode.DELETE, token) == 0
        assert sorted(os.listdir(rule_dir)) == ["a.log", "b.TXT", "c.dat", "sub"]

    def test_delete_removes_matching_files_only(self, rule_dir, token):
        rule = CustomCleanupRule(str(rule_dir), [".log", ".txt"], recursive=False)
        freed = evaluate_rules([rule], EvaluationMode.DELETE, token)

        assert freed == 150
        assert sorted(os.listdir(rule_dir)) == ["c.dat", "sub"]
        assert (rule_dir / "sub" / "d.log").exists()

    def test_delete_clears_read_only(self, tmp_path, token):
        target = tmp_path / "locked.tmp"
        target.write_bytes(b"x" * 8)
        os.chmod(target, 0o444)

        freed = evaluate_rules([CustomCleanupRule(str(tmp_path), [".tmp"])],
                               EvaluationMode.DELETE, token)

        assert freed == 8
        assert not target.exists()

    def test_missing_and_blank_directories_are_skipped(self, tmp_path, token):
        rules = [
            CustomCleanupRule(str(tmp_path / "missing"), [".log"]),
            CustomCleanupRule("   ", [".log"]),
        ]
        assert evaluate_rules(rules, EvaluationMode.SIZE_ONLY, token) == 0

    def test_no_rules(self, token):
        assert evaluate_rules(None, EvaluationMode.SIZE_ONLY, token) == 0
        assert evaluate_rules([], EvaluationMode.DELETE, token) == 0

    def test_environment_placeholder_in_directory(self, rule_dir, monkeypatch, token):
        monkeypatch.setenv("SYSTUNE_TEST_DIR", str(rule_dir))
        rule = CustomCleanupRule("%systune_test_dir%", [".dat"])
        assert evaluate_rules([rule], EvaluationMode.SIZE_ONLY, token) == 70

    def test_cancelled_token_raises(self, rule_dir):
        token = CancellationToken()
        token.cancel()
        with pytest.raises(OperationCancelled):
            evaluate_rules([CustomCleanupRule(str(rule_dir), [".log"])],
                           EvaluationMode.DELETE, token)
        assert (rule_dir / "a.log").exists()


class TestFileExtension:
    @pytest.mark.parametrize("name, expected", [
        ("a.log", ".log"),
        (".log", ".log"),
        ("archive.tar.gz", ".gz"),
        ("README", ""),
        ("trailing.", ""),
    ])
    def test_last_dot_rule(self, name, expected):
        assert file_extension(os.path.join("some", "dir.d", name)) == expected

    def test_dotfile_matches_its_extension(self, tmp_path, token):
        (tmp_path / ".log").write_bytes(b"x" * 9)
        rule = CustomCleanupRule(str(tmp_path), [".log"])
        assert evaluate_rules([rule], EvaluationMode.SIZE_ONLY, token) == 9


class TestExpandEnvironment:
    def test_unknown_placeholder_kept_verbatim(self, monkeypatch):
        monkeypatch.delenv("SYSTUNE_NOT_SET", raising=False)
        assert expand_environment("%SYSTUNE_NOT_SET%\\x") == "%SYSTUNE_NOT_SET%\\x"

    def test_known_placeholder(self, monkeypatch):
        monkeypatch.setenv("SYSTUNE_ROOT", "/data")
        assert expand_environment("%SYSTUNE_ROOT%/cache") == "/data/cache"
