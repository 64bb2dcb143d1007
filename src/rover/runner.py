"""
Command execution with output capture.

Each invocation writes exactly one capture file holding the combined
stdout and stderr of one command.
"""

from __future__ import annotations

import errno
import logging
import shlex
import shutil
import subprocess
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterable

from rover.errors import LaunchError, OutputFileError
from rover.layout import OutputLayout

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 60

# Errors that mean the process table itself is unusable
FATAL_LAUNCH_ERRNOS = frozenset({errno.EAGAIN, errno.ENOMEM})


class Outcome(str, Enum):
    SUCCESS = "success"
    NONZERO_EXIT = "nonzero-exit"
    NOT_FOUND = "not-found"
    LAUNCH_ERROR = "launch-error"
    TIMED_OUT = "timed-out"


@dataclass
class CollectionResult:
    """Outcome of a single capture."""

    category: str
    name: str
    path: Path
    outcome: Outcome
    exit_status: int | None = None
    command: str = ""

    @property
    def ok(self) -> bool:
        return self.outcome is Outcome.SUCCESS


class CommandRunner:
    """
    Runs commands and stores their output under an OutputLayout.

    Args:
        layout: Output layout for capture paths.
        timeout: Seconds before a command is killed. None waits forever.
        logger: Logger for outcome records.
        secrets: Values masked as *** whenever a command line is logged.
    """

    def __init__(
        self,
        layout: OutputLayout,
        timeout: float | None = DEFAULT_TIMEOUT,
        logger: logging.Logger | None = None,
        secrets: Iterable[str] = (),
    ):
        self.layout = layout
        self.timeout = timeout
        self.logger = logger or logging.getLogger(__name__)
        self.secrets = tuple(s for s in secrets if s)

    def display(self, argv: list[str]) -> str:
        """Render a command line for logs with secrets masked."""
        line = shlex.join(argv)
        for secret in self.secrets:
            line = line.replace(secret, "***")
        return line

    def run(self, category: str, name: str, executable: str, *args: str) -> CollectionResult:
        """
        Run one command and capture its output to the layout path.

        Returns:
            CollectionResult with the classified outcome.

        Raises:
            OutputFileError: If the capture file cannot be created.
            LaunchError: If the system cannot start any more processes.
        """
        path = self.layout.path_for(category, name)
        argv = [executable, *args]
        command = self.display(argv)

        resolved = shutil.which(executable)
        if not resolved:
            self.logger.info(f"[{category}] {name}: {executable} not found in PATH")
            return CollectionResult(category, name, path, Outcome.NOT_FOUND, command=command)

        self.logger.debug(f"[{category}] {name}: running {command}")
        try:
            out = open(path, "wb")
        except OSError as e:
            raise OutputFileError(f"Cannot create {path}: {e}") from e

        with out:
            try:
                proc = subprocess.Popen(
                    [resolved, *args],
                    stdin=subprocess.DEVNULL,
                    stdout=out,
                    stderr=subprocess.STDOUT,
                )
            except OSError as e:
                if e.errno in FATAL_LAUNCH_ERRNOS:
                    raise LaunchError(f"Cannot start {command}: {e}") from e
                self.logger.error(f"[{category}] {name}: cannot execute {command}: {e}")
                return CollectionResult(category, name, path, Outcome.LAUNCH_ERROR, command=command)

            try:
                status = proc.wait(timeout=self.timeout)
            except subprocess.TimeoutExpired:
                proc.kill()
                proc.wait()
                self.logger.warning(
                    f"[{category}] {name}: {command} timed out after {self.timeout}s"
                )
                return CollectionResult(category, name, path, Outcome.TIMED_OUT, command=command)

        if status != 0:
            self.logger.error(
                f"[{category}] {name}: command exited with non-zero status: "
                f"{command} (exit-status {status})"
            )
            return CollectionResult(
                category, name, path, Outcome.NONZERO_EXIT, exit_status=status, command=command
            )

        self.logger.info(f"[{category}] {name}: captured to {path}")
        return CollectionResult(category, name, path, Outcome.SUCCESS, exit_status=0, command=command)
