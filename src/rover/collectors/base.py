"""
Base collector class that all collectors inherit from.

A collector ensures its output directory, optionally gates on a running
service process, then dispatches every applicable catalog entry to the
command runner. Individual command failures never stop the sequence.
"""

from __future__ import annotations

import logging
import os
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from typing import Sequence

from rover.catalog import CommandSpec, DispatchContext
from rover.host import HostContext
from rover.layout import OutputLayout
from rover.locator import ProcessLocator, ServiceProbe
from rover.runner import CollectionResult, CommandRunner, Outcome

logger = logging.getLogger(__name__)


class CollectionStatus(str, Enum):
    COMPLETED = "completed"
    SKIPPED = "skipped"


@dataclass
class CollectionReport:
    """Outcome of one collector run."""

    category: str
    hostname: str
    status: CollectionStatus = CollectionStatus.COMPLETED
    results: list[CollectionResult] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    probe: ServiceProbe | None = None
    reason: str | None = None

    @property
    def failures(self) -> list[CollectionResult]:
        return [r for r in self.results if not r.ok]

    def count(self, outcome: Outcome) -> int:
        return sum(1 for r in self.results if r.outcome is outcome)


class BaseCollector(ABC):
    """
    Abstract base class for all collectors.

    Subclasses set `name` (also the output category), and `service` when
    collection depends on a running process, and implement `commands`.
    """

    name: str = "base"
    description: str = "Base collector"
    service: str | None = None
    token_env: str | None = None

    def __init__(
        self,
        host: HostContext,
        layout: OutputLayout,
        runner: CommandRunner,
        locator: ProcessLocator | None = None,
        logger: logging.Logger | None = None,
        workers: int = 1,
    ):
        self.host = host
        self.layout = layout
        self.runner = runner
        self.locator = locator or ProcessLocator()
        self.logger = logger or logging.getLogger(f"{__name__}.{self.name}")
        self.workers = max(1, workers)

    @abstractmethod
    def commands(self, probe: ServiceProbe | None) -> Sequence[CommandSpec]:
        """
        Return the catalog entries for this host.

        Args:
            probe: Service probe for service collectors, None otherwise.
        """
        pass

    def bindings(self) -> dict[str, str]:
        """Extra placeholder values available to every entry."""
        return {}

    def collect(self) -> CollectionReport:
        """
        Run the collection.

        Returns:
            CollectionReport; status SKIPPED when the service is not running.

        Raises:
            RoverError: On fatal conditions such as an unwritable output tree.
        """
        report = CollectionReport(category=self.name, hostname=self.host.hostname)
        self.logger.info(f"Hello from the {self.name} module at {self.host.hostname}")
        self.logger.info(f"Detected OS: {self.host.os_name}")

        self.layout.ensure_dir(self.name)

        probe = None
        if self.service:
            probe = self.locator.locate(self.service)
            report.probe = probe
            if not probe.is_present:
                report.status = CollectionStatus.SKIPPED
                report.reason = probe.reason or f"No running {self.service} process detected"
                self.logger.warning(report.reason)
                return report

        if self.token_env:
            # zero length means unset
            token = os.environ.get(self.token_env, "")
            self.logger.info(f"{self.token_env} length: {len(token)}")

        ctx = DispatchContext(host=self.host, probe=probe, bindings=self.bindings())
        dispatch = []
        for spec in self.commands(probe):
            resolved = spec.resolve(ctx)
            if resolved is None:
                reason = spec.precondition.describe() if spec.precondition else "unmet"
                self.logger.info(f"Skipping {spec.name}: requires {reason}")
                report.skipped.append(spec.name)
                continue
            dispatch.append((spec, resolved))

        report.results = self._dispatch(dispatch)

        failed = len(report.failures)
        self.logger.info(
            f"Executed {len(report.results)} {self.name} commands "
            f"({failed} failed, {len(report.skipped)} skipped)"
        )
        return report

    def _dispatch(self, dispatch: list) -> list[CollectionResult]:
        def run(item) -> CollectionResult:
            spec, (executable, args) = item
            return self.runner.run(spec.category, spec.name, executable, *args)

        if self.workers == 1 or len(dispatch) < 2:
            return [run(item) for item in dispatch]

        with ThreadPoolExecutor(max_workers=self.workers, thread_name_prefix="rover_") as pool:
            return list(pool.map(run, dispatch))
