"""
Unit tests for BaseCollector.

Tests the collection sequence: directory setup, service gating,
precondition skipping and result ordering.
"""

from __future__ import annotations

from typing import Sequence
from unittest.mock import MagicMock

import pytest

from rover.catalog import CommandSpec, PathExists, ProcessResolved
from rover.collectors.base import BaseCollector, CollectionReport, CollectionStatus
from rover.errors import OutputDirectoryError
from rover.layout import OutputLayout
from rover.locator import ServiceProbe
from rover.runner import CollectionResult, CommandRunner, Outcome


class EchoCollector(BaseCollector):
    """Collector with a fixed, test-controlled catalog."""

    name = "echo"
    description = "Test collector"

    def __init__(self, *args, specs=(), **kwargs):
        super().__init__(*args, **kwargs)
        self.specs = specs

    def commands(self, probe: ServiceProbe | None) -> Sequence[CommandSpec]:
        return self.specs


class ServiceEchoCollector(EchoCollector):
    name = "svc"
    service = "svc"


def _spec(name, *args, precondition=None, category="echo"):
    return CommandSpec(category, name, "echo", args or (name,), precondition)


class TestCollectionReport:
    def test_failures_and_counts(self, tmp_path):
        results = [
            CollectionResult("echo", "a", tmp_path / "a.txt", Outcome.SUCCESS, 0),
            CollectionResult("echo", "b", tmp_path / "b.txt", Outcome.NONZERO_EXIT, 2),
            CollectionResult("echo", "c", tmp_path / "c.txt", Outcome.NOT_FOUND),
        ]
        report = CollectionReport(category="echo", hostname="h", results=results)

        assert [r.name for r in report.failures] == ["b", "c"]
        assert report.count(Outcome.SUCCESS) == 1
        assert report.count(Outcome.TIMED_OUT) == 0


class TestBaseCollector:
    """Test BaseCollector.collect()."""

    def test_runs_entries_in_order(self, linux_host, layout, runner):
        specs = [_spec("first"), _spec("second"), _spec("third")]
        collector = EchoCollector(linux_host, layout, runner, specs=specs)

        report = collector.collect()

        assert report.status is CollectionStatus.COMPLETED
        assert [r.name for r in report.results] == ["first", "second", "third"]
        assert layout.path_for("echo", "second").read_text() == "second\n"

    def test_creates_output_directory(self, linux_host, layout, runner):
        collector = EchoCollector(linux_host, layout, runner, specs=[])
        collector.collect()

        assert layout.category_dir("echo").is_dir()

    def test_unmet_preconditions_are_skipped(self, linux_host, layout, runner, tmp_path):
        specs = [
            _spec("kept"),
            _spec("gated", precondition=PathExists(str(tmp_path / "missing"))),
        ]
        collector = EchoCollector(linux_host, layout, runner, specs=specs)

        report = collector.collect()

        assert [r.name for r in report.results] == ["kept"]
        assert report.skipped == ["gated"]
        assert not layout.path_for("echo", "gated").exists()

    def test_failure_does_not_stop_sequence(self, linux_host, layout, runner):
        specs = [
            _spec("before"),
            CommandSpec("echo", "broken", "nonexistent_command_xyz123"),
            CommandSpec("echo", "failing", "sh", ("-c", "exit 4")),
            _spec("after"),
        ]
        collector = EchoCollector(linux_host, layout, runner, specs=specs)

        report = collector.collect()

        assert [r.outcome for r in report.results] == [
            Outcome.SUCCESS,
            Outcome.NOT_FOUND,
            Outcome.NONZERO_EXIT,
            Outcome.SUCCESS,
        ]
        assert layout.path_for("echo", "after").exists()

    def test_worker_pool_keeps_order(self, linux_host, layout, runner):
        specs = [_spec(f"entry_{i}") for i in range(8)]
        collector = EchoCollector(linux_host, layout, runner, specs=specs, workers=4)

        report = collector.collect()

        assert [r.name for r in report.results] == [f"entry_{i}" for i in range(8)]
        assert all(r.ok for r in report.results)

    def test_unwritable_root_is_fatal(self, linux_host, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        layout = OutputLayout(blocker, "test-host")
        runner = MagicMock(spec=CommandRunner)
        collector = EchoCollector(linux_host, layout, runner, specs=[_spec("x")])

        with pytest.raises(OutputDirectoryError):
            collector.collect()
        runner.run.assert_not_called()


class TestServiceGating:
    """Test collectors that depend on a running process."""

    def test_absent_service_skips_everything(self, linux_host, layout, absent_locator):
        runner = MagicMock(spec=CommandRunner)
        collector = ServiceEchoCollector(
            linux_host, layout, runner, locator=absent_locator, specs=[_spec("x", category="svc")]
        )

        report = collector.collect()

        assert report.status is CollectionStatus.SKIPPED
        assert report.results == []
        assert "svc" in report.reason
        runner.run.assert_not_called()

    def test_unknown_probe_reason_reported(self, linux_host, layout):
        locator = MagicMock()
        locator.locate.return_value = ServiceProbe.unknown("svc", "process listing failed: denied")
        runner = MagicMock(spec=CommandRunner)
        collector = ServiceEchoCollector(linux_host, layout, runner, locator=locator)

        report = collector.collect()

        assert report.status is CollectionStatus.SKIPPED
        assert report.reason == "process listing failed: denied"

    def test_pid_bound_into_arguments(self, linux_host, layout, runner):
        locator = MagicMock()
        locator.locate.return_value = ServiceProbe.present("svc", 321)
        specs = [CommandSpec("svc", "pid", "echo", ("/proc/{pid}/status",), ProcessResolved())]
        collector = ServiceEchoCollector(linux_host, layout, runner, locator=locator, specs=specs)

        report = collector.collect()

        assert report.probe.pid == 321
        assert layout.path_for("svc", "pid").read_text() == "/proc/321/status\n"

    def test_token_length_logged_not_value(self, linux_host, layout, runner, caplog, monkeypatch):
        class TokenCollector(EchoCollector):
            token_env = "ECHO_TOKEN"

        monkeypatch.setenv("ECHO_TOKEN", "abcdef")
        collector = TokenCollector(linux_host, layout, runner, specs=[])
        with caplog.at_level("INFO"):
            collector.collect()

        assert "ECHO_TOKEN length: 6" in caplog.text
        assert "abcdef" not in caplog.text
