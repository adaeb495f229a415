"""End-to-end tests of the optimization service facade with fake backends."""

import os
import shutil

import pytest

from catalog import build_default_catalog
from estimator import CleanupEstimator
from fakes import FakeCommandRunner, FakeConfigStore, FakeServiceController, make_catalog
from models import (
    Action,
    ActionStatus,
    Category,
    CleanupLocation,
    CommandSequence,
    ConfigTweak,
    RegistryValue,
    RunState,
    ServiceDisable,
    StartMode,
    ValueKind,
)
from optimizer import OptimizationService


def _service(catalog, store=None, services=None, runner=None, **kwargs):
    return OptimizationService(
        catalog=catalog,
        store=store or FakeConfigStore(),
        services=services or FakeServiceController(),
        runner=runner or FakeCommandRunner(),
        **kwargs,
    )


class TestCleanupScenario:
    def test_estimate_then_execute_then_estimate_zero(self, tmp_path, token):
        temp = tmp_path / "temp"
        (temp / "sub").mkdir(parents=True)
        (temp / "a.tmp").write_bytes(b"x" * 12000)
        (temp / "sub" / "b.tmp").write_bytes(b"x" * 345)

        clear_temp = "clear temp"
        catalog = make_catalog(Category("cleanup.files", "t", "d", (
            Action("cleanup.temp", "t", "d", CommandSequence((clear_temp,))),
        )))
        runner = FakeCommandRunner()

        def _clear():
            for entry in os.listdir(temp):
                path = temp / entry
                if path.is_dir():
                    shutil.rmtree(path)
                else:
                    path.unlink()

        runner.side_effects[clear_temp] = _clear
        estimator = CleanupEstimator(catalog, list,
                                     {"cleanup.temp": (CleanupLocation(str(temp)),)})
        service = _service(catalog, runner=runner, estimator=estimator)

        assert service.estimate_cleanup_size(["cleanup.temp"], token) == 12345
        outcomes = service.execute_actions(["cleanup.temp"], token)
        assert [o.status for o in outcomes] == [ActionStatus.APPLIED]
        assert service.estimate_cleanup_size(["cleanup.temp"], token) == 0


class TestRecommended:
    def test_performance_and_cleanup_are_split(self, token):
        runner = FakeCommandRunner()
        catalog = make_catalog(
            Category("perf", "t", "d", (
                Action("perf.on", "t", "d", CommandSequence(("perf on",))),
                Action("perf.off", "t", "d", CommandSequence(("perf off",)), recommended=False),
            )),
            Category("cleanup.files", "t", "d", (
                Action("cleanup.on", "t", "d", CommandSequence(("clean on",))),
                Action("cleanup.off", "t", "d", CommandSequence(("clean off",)), recommended=False),
            )),
        )
        service = _service(catalog, runner=runner)

        service.apply_recommended_performance_actions(token)
        assert runner.commands == ["perf on"]

        service.run_recommended_cleanup(token)
        assert runner.commands == ["perf on", "clean on"]


class TestDefaultCatalogWithFakes:
    def test_apply_then_check_taskbar(self, token):
        store = FakeConfigStore()
        service = _service(build_default_catalog(), store=store)

        assert service.try_is_applied("explorer.taskbar", token) is False
        outcomes = service.execute_actions(["explorer.taskbar"], token)

        assert outcomes[0].status == ActionStatus.APPLIED
        assert service.try_is_applied("explorer.taskbar", token) is True

    def test_start_menu_notifies_and_restarts_explorer(self, token):
        store = FakeConfigStore()
        runner = FakeCommandRunner()
        service = _service(build_default_catalog(), store=store, runner=runner)

        service.execute_actions(["explorer.startMenu"], token)

        assert store.notified == 1
        assert len(runner.commands) == 1
        assert "explorer" in runner.commands[0].lower()

    def test_services_disabled_after_apply(self, token):
        catalog = build_default_catalog()
        target = catalog.lookup("services.sysmain").target
        assert isinstance(target, ServiceDisable)
        services = FakeServiceController({
            name: (StartMode.AUTOMATIC, RunState.RUNNING) for name in target.services
        })
        service = _service(catalog, services=services)

        assert service.try_is_applied("services.sysmain", token) is False
        service.execute_actions(["services.sysmain"], token)
        assert service.try_is_applied("services.sysmain", token) is True

    def test_applied_states_cover_the_catalog(self, token):
        service = _service(build_default_catalog())
        states = service.applied_states(token)
        assert len(states) == 29
        assert states["cleanup.custom"] is None
        assert states["cleanup.tempFiles"] is None

    def test_custom_tweak_round_trip(self, token):
        tweak = ConfigTweak((RegistryValue("HKLM", r"SOFTWARE\T", "V", 0xFFFFFFFF),))
        catalog = make_catalog(Category("perf", "t", "d", (Action("perf.x", "t", "d", tweak),)))
        service = _service(catalog)
        service.execute_actions(["perf.x"], token)
        assert service.try_is_applied("perf.x", token) is True

    def test_apply_is_idempotent(self, token):
        store = FakeConfigStore()
        tweak = ConfigTweak((RegistryValue("HKCU", "Software\\T", "V", 0, ValueKind.INTEGER32),))
        catalog = make_catalog(Category("perf", "t", "d", (Action("perf.x", "t", "d", tweak),)))
        service = _service(catalog, store=store)

        assert service.try_is_applied("perf.x", token) is False

        service.execute_actions(["perf.x"], token)
        assert store.read("HKCU", "Software\\T", "V") == 0
        assert service.try_is_applied("perf.x", token) is True
        after_first = dict(store.values)

        outcomes = service.execute_actions(["perf.x"], token)
        assert outcomes[0].status == ActionStatus.APPLIED
        assert store.values == after_first
        assert service.try_is_applied("perf.x", token) is True

    def test_estimation_session_uses_service_estimator(self, tmp_path):
        (tmp_path / "a.tmp").write_bytes(b"x" * 64)
        catalog = make_catalog(Category("cleanup.files", "t", "d", (
            Action("cleanup.temp", "t", "d", CommandSequence(("clear",))),
        )))
        estimator = CleanupEstimator(catalog, list,
                                     {"cleanup.temp": (CleanupLocation(str(tmp_path)),)})
        session = _service(catalog, estimator=estimator).new_estimation_session()
        results = []

        session.request(["cleanup.temp"], results.append)

        assert session.wait(5)
        assert results == [64]


@pytest.mark.parametrize("keys", [None, [], ["", "  "]])
def test_empty_selections_are_no_ops(keys, token):
    runner = FakeCommandRunner()
    service = _service(build_default_catalog(), runner=runner)
    assert service.execute_actions(keys, token) == []
    assert runner.commands == []
