"""
Core orchestration module for Rover.

Wires the host context, output layout, process locator and command runner
together for each collector run, and fronts the archive and upload steps.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from rover.archive import archive_bundle, latest_archive
from rover.collectors import CollectionReport, get_collector, list_collectors
from rover.config import Config, token_values
from rover.errors import HostnameError, OutputDirectoryError, UnknownCollectorError
from rover.host import HostContext
from rover.layout import OutputLayout
from rover.locator import ProcessLocator, ServiceProbe
from rover.runner import CommandRunner
from rover.uploader import S3Uploader, UploadError, UploadResult, UploadSettings

logger = logging.getLogger(__name__)

RUN_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
SERVICES = ("consul", "nomad", "vault")


@contextmanager
def run_log(layout: OutputLayout, level: int | str = logging.INFO) -> Iterator[logging.Logger]:
    """
    Attach the per-host run log to the rover logger for the duration of a run.

    Yields:
        The rover logger with the file handler attached.

    Raises:
        OutputDirectoryError: If the log directory or file cannot be created.
    """
    path = layout.log_file
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(path, encoding="utf-8")
    except OSError as e:
        raise OutputDirectoryError(f"Cannot create log file {path}: {e}") from e

    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(RUN_LOG_FORMAT))
    run_logger = logging.getLogger("rover")
    previous_level = run_logger.level
    if run_logger.getEffectiveLevel() > handler.level:
        run_logger.setLevel(handler.level)
    run_logger.addHandler(handler)
    try:
        yield run_logger
    finally:
        run_logger.removeHandler(handler)
        run_logger.setLevel(previous_level)
        handler.close()


class Rover:
    """
    Main orchestrator for diagnostic collection.

    Runs collectors against a per-host output tree, reports running
    services, and archives and uploads the result.
    """

    def __init__(self, config: Config | None = None, host: HostContext | None = None):
        self.config = config or Config()
        self.host = host or HostContext.detect(self.config.hostname)
        try:
            self.layout = OutputLayout(Path(self.config.output_dir), self.host.hostname)
        except ValueError as e:
            raise HostnameError(str(e)) from e
        self.locator = ProcessLocator()

    def collect(self, name: str) -> CollectionReport:
        """
        Run one collector.

        Args:
            name: Collector name, e.g. "system" or "vault".

        Returns:
            The collector's report.

        Raises:
            UnknownCollectorError: If no collector has that name.
            RoverError: On fatal collection errors.
        """
        collector_cls = get_collector(name)
        if collector_cls is None:
            raise UnknownCollectorError(
                f"Unknown collector '{name}'. Available: {', '.join(list_collectors())}"
            )

        with run_log(self.layout, self.config.log_level.upper()):
            collector_logger = logging.getLogger(f"rover.collectors.base.{name}")
            runner = CommandRunner(
                self.layout,
                timeout=self.config.command_timeout or None,
                logger=collector_logger,
                secrets=token_values(),
            )
            collector = collector_cls(
                self.host,
                self.layout,
                runner,
                locator=ProcessLocator(collector_logger),
                logger=collector_logger,
                workers=self.config.workers,
            )
            return collector.collect()

    def service_versions(self) -> dict[str, ServiceProbe]:
        """Probe every known service and return the running ones."""
        probes = {}
        for service in SERVICES:
            probe = self.locator.locate(service)
            if probe.is_present:
                probes[service] = probe
        return probes

    def archive(self, dest_dir: str | Path | None = None, keep_data: bool | None = None) -> Path:
        """Archive this host's bundle directory."""
        return archive_bundle(
            self.layout.host_dir,
            dest_dir if dest_dir is not None else self.config.archive_dir,
            self.host.hostname,
            keep_data=self.config.keep_data if keep_data is None else keep_data,
        )

    def upload(self, path: str | Path | None = None) -> UploadResult:
        """
        Upload an archive, defaulting to the newest one for this host.

        Raises:
            UploadError: If no archive is found, settings are missing, or S3 fails.
        """
        if path is None:
            path = latest_archive(self.config.archive_dir, self.host.hostname)
            if path is None:
                raise UploadError(
                    f"No archive found in {self.config.archive_dir}; run 'rover archive' first."
                )
        settings = UploadSettings.from_env(self.config)
        return S3Uploader(settings).upload(path)
