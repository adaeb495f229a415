"""Tests for cleanup size estimation."""

import hashlib
import os
import threading

import pytest

from cancellation import CancellationToken, OperationCancelled
from estimator import CLEANUP_LOCATIONS, CleanupEstimator, EstimationSession, walk_size
from fakes import make_catalog
from models import (
    Action,
    Category,
    CleanupLocation,
    CommandSequence,
    CustomCleanup,
    CustomCleanupRule,
)


def _tree_digest(root):
    digest = hashlib.sha256()
    for dirpath, dirnames, filenames in sorted(os.walk(root)):
        for name in sorted(filenames):
            path = os.path.join(dirpath, name)
            digest.update(path.encode())
            with open(path, "rb") as f:
                digest.update(f.read())
    return digest.hexdigest()


def _cleanup_catalog():
    return make_catalog(Category("cleanup.files", "t", "d", (
        Action("cleanup.temp", "t", "d", CommandSequence(("del temp",))),
        Action("cleanup.dumps", "t", "d", CommandSequence(("del dumps",))),
        Action("cleanup.custom", "t", "d", CustomCleanup()),
    )))


@pytest.fixture
def temp_tree(tmp_path):
    """Files summing to 12345 bytes, two levels deep."""
    root = tmp_path / "temp"
    (root / "nested" / "deeper").mkdir(parents=True)
    (root / "one.tmp").write_bytes(b"a" * 10000)
    (root / "nested" / "two.bin").write_bytes(b"b" * 2000)
    (root / "nested" / "deeper" / "three").write_bytes(b"c" * 345)
    return root


class TestWalkSize:
    def test_sums_recursively(self, temp_tree, token):
        assert walk_size(CleanupLocation(str(temp_tree)), token) == 12345

    def test_missing_directory_is_zero(self, tmp_path, token):
        assert walk_size(CleanupLocation(str(tmp_path / "gone")), token) == 0

    def test_non_recursive_location_skips_subdirectories(self, tmp_path, token):
        (tmp_path / "top.dmp").write_bytes(b"x" * 11)
        (tmp_path / "Windows" / "Minidump").mkdir(parents=True)
        (tmp_path / "Windows" / "Minidump" / "deep.dmp").write_bytes(b"x" * 500)
        location = CleanupLocation(str(tmp_path), pattern="*.dmp", recursive=False)
        assert walk_size(location, token) == 11

    def test_system_drive_dumps_are_top_level_only(self):
        drive = [loc for loc in CLEANUP_LOCATIONS["cleanup.crashDumps"]
                 if loc.path.startswith("%SystemDrive%")]
        assert len(drive) == 1
        assert drive[0].recursive is False
        assert all(loc.recursive for locs in CLEANUP_LOCATIONS.values()
                   for loc in locs if loc not in drive)

    def test_pattern_is_case_insensitive(self, tmp_path, token):
        (tmp_path / "thumbcache_256.db").write_bytes(b"x" * 10)
        (tmp_path / "THUMBCACHE_96.DB").write_bytes(b"x" * 5)
        (tmp_path / "iconcache.db").write_bytes(b"x" * 100)
        location = CleanupLocation(str(tmp_path), pattern="thumbcache_*.db")
        assert walk_size(location, token) == 15

    def test_single_file(self, tmp_path, token):
        (tmp_path / "memory.dmp").write_bytes(b"x" * 42)
        assert walk_size(CleanupLocation(str(tmp_path / "memory.dmp"), single_file=True), token) == 42
        assert walk_size(CleanupLocation(str(tmp_path / "none.dmp"), single_file=True), token) == 0

    def test_cancelled(self, temp_tree):
        token = CancellationToken()
        token.cancel()
        with pytest.raises(OperationCancelled):
            walk_size(CleanupLocation(str(temp_tree)), token)


class TestCleanupEstimator:
    def test_estimate_does_not_modify_files(self, temp_tree, token):
        estimator = CleanupEstimator(_cleanup_catalog(), list,
                                     {"cleanup.temp": (CleanupLocation(str(temp_tree)),)})
        before = _tree_digest(temp_tree)

        assert estimator.estimate(["cleanup.temp"], token) == 12345
        assert _tree_digest(temp_tree) == before

    def test_duplicates_and_unknown_keys_contribute_once_or_zero(self, temp_tree, token):
        estimator = CleanupEstimator(_cleanup_catalog(), list,
                                     {"cleanup.temp": (CleanupLocation(str(temp_tree)),)})
        keys = ["cleanup.temp", "CLEANUP.TEMP", "cleanup.unknown", "", "cleanup.dumps"]
        assert estimator.estimate(keys, token) == 12345

    def test_empty_selection(self, token):
        estimator = CleanupEstimator(_cleanup_catalog(), list, {})
        assert estimator.estimate(None, token) == 0
        assert estimator.estimate([], token) == 0

    def test_custom_rules_read_on_each_call(self, tmp_path, token):
        (tmp_path / "x.log").write_bytes(b"x" * 7)
        rules = []
        estimator = CleanupEstimator(_cleanup_catalog(), lambda: list(rules), {})

        assert estimator.estimate(["cleanup.custom"], token) == 0
        rules.append(CustomCleanupRule(str(tmp_path), [".log"]))
        assert estimator.estimate(["cleanup.custom"], token) == 7
        assert (tmp_path / "x.log").exists()

    def test_failing_action_contributes_zero(self, temp_tree, token):
        def _broken():
            raise RuntimeError("settings unreadable")

        estimator = CleanupEstimator(_cleanup_catalog(), _broken,
                                     {"cleanup.temp": (CleanupLocation(str(temp_tree)),)})
        assert estimator.estimate(["cleanup.custom", "cleanup.temp"], token) == 12345

    def test_cancellation_reports_partial_total(self, temp_tree, tmp_path):
        token = CancellationToken()
        dumps = tmp_path / "dumps"
        dumps.mkdir()
        (dumps / "a.dmp").write_bytes(b"x")

        estimator = CleanupEstimator(_cleanup_catalog(), list, {
            "cleanup.temp": (CleanupLocation(str(temp_tree)),),
            "cleanup.dumps": (CleanupLocation(str(dumps)),),
        })
        # Finish the first action, then cancel on the way into the second
        real_estimate = estimator.estimate_action

        def _estimate_action(action, tok):
            if action.key == "cleanup.dumps":
                token.cancel()
            return real_estimate(action, tok)

        estimator.estimate_action = _estimate_action

        with pytest.raises(OperationCancelled) as excinfo:
            estimator.estimate(["cleanup.temp", "cleanup.dumps"], token)
        assert excinfo.value.partial_total == 12345

    def test_default_table_covers_location_backed_actions(self):
        assert "cleanup.custom" not in CLEANUP_LOCATIONS
        assert "cleanup.appxBloatware" not in CLEANUP_LOCATIONS
        assert len(CLEANUP_LOCATIONS) == 12
        pattern = CLEANUP_LOCATIONS["cleanup.thumbnailCache"][0].pattern
        assert pattern == "thumbcache_*.db"


class TestEstimationSession:
    def test_delivers_result(self):
        session = EstimationSession(lambda keys, token: len(keys))
        results = []

        session.request(["a", "b"], results.append)

        assert session.wait(5)
        assert results == [2]

    def test_new_request_cancels_and_supersedes_previous(self):
        started = threading.Event()
        results = []

        def _estimate(keys, token):
            if keys == ["slow"]:
                started.set()
                while not token.wait(0.01):
                    pass
                token.raise_if_cancelled()
            return 99

        session = EstimationSession(_estimate)
        first = session.request(["slow"], results.append)
        assert started.wait(5)

        second = session.request(["fast"], results.append)

        assert first.cancelled
        assert not second.cancelled
        assert session.wait(5)
        assert results == [99]

    def test_cancel_drops_result(self):
        gate = threading.Event()
        results = []

        def _estimate(keys, token):
            gate.wait(5)
            return 1

        session = EstimationSession(_estimate)
        session.request(["a"], results.append)
        session.cancel()
        gate.set()

        assert session.wait(5)
        assert results == []
