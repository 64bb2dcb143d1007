"""
Service process detection.

Locates a named process with pgrep when available, falling back to a full
process listing through psutil. The fallback matches on a case-insensitive
substring of the process name and takes the first hit, so searching for
"consul" can also match "consul-template".
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from dataclasses import dataclass
from enum import Enum

import psutil

logger = logging.getLogger(__name__)

VERSION_TIMEOUT = 15


class ProbeState(str, Enum):
    PRESENT = "present"
    ABSENT = "absent"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ServiceProbe:
    """
    Result of looking for a service process.

    ABSENT means the process table was checked and the service is not
    running. UNKNOWN means no lookup strategy could run; reason explains why.
    A present probe may still carry pid=None when the lookup output could
    not be read as a process id. version is None when no version was
    detected.
    """

    name: str
    state: ProbeState
    pid: int | None = None
    version: str | None = None
    reason: str | None = None

    @classmethod
    def present(cls, name: str, pid: int | None, version: str | None = None) -> ServiceProbe:
        return cls(name=name, state=ProbeState.PRESENT, pid=pid, version=version)

    @classmethod
    def absent(cls, name: str) -> ServiceProbe:
        return cls(name=name, state=ProbeState.ABSENT)

    @classmethod
    def unknown(cls, name: str, reason: str) -> ServiceProbe:
        return cls(name=name, state=ProbeState.UNKNOWN, reason=reason)

    @property
    def is_present(self) -> bool:
        return self.state is ProbeState.PRESENT


def parse_pid(output: str) -> int | None:
    """Return the first whitespace-trimmed run of digits in lookup output."""
    for token in output.split():
        token = token.strip()
        if token.isdigit():
            return int(token)
    return None


def parse_version_output(output: str) -> str | None:
    """
    Extract the version field from `<tool> version` output.

    The first line looks like "Vault v1.15.2 (abc123), built ..." or
    "Consul v1.16.1"; the second field is the version.
    """
    lines = output.strip().splitlines()
    if not lines:
        return None
    fields = lines[0].split()
    if len(fields) < 2:
        return None
    return fields[1].rstrip(",")


class ProcessLocator:
    """Finds running service processes and their versions."""

    def __init__(self, logger: logging.Logger | None = None):
        self.logger = logger or logging.getLogger(__name__)

    def locate(self, name: str, detect_version: bool = True) -> ServiceProbe:
        """
        Determine whether a process called name is running.

        Args:
            name: Process name to look for.
            detect_version: Also run `<name> version` when the process is found.

        Returns:
            ServiceProbe describing the outcome.
        """
        probe = self._pgrep(name)
        if probe is None:
            probe = self._scan(name)

        if probe.is_present:
            self.logger.info(f"Process detected: {name} (pid {probe.pid})")
            if detect_version:
                probe = ServiceProbe.present(name, probe.pid, self.detect_version(name))
        elif probe.state is ProbeState.ABSENT:
            self.logger.info(f"No {name} process detected")
        else:
            self.logger.warning(f"Cannot determine whether {name} is running: {probe.reason}")
        return probe

    def _pgrep(self, name: str) -> ServiceProbe | None:
        """Look up name with pgrep. Returns None when pgrep cannot answer."""
        path = shutil.which("pgrep")
        if not path:
            self.logger.debug("pgrep not found in PATH, falling back to process listing")
            return None

        try:
            result = subprocess.run(
                [path, name],
                capture_output=True,
                text=True,
                timeout=VERSION_TIMEOUT,
            )
        except (OSError, subprocess.SubprocessError) as e:
            self.logger.debug(f"pgrep failed for {name}: {e}")
            return None

        # pgrep exits 1 when nothing matched and >1 on real errors
        if result.returncode == 1:
            return ServiceProbe.absent(name)
        if result.returncode != 0:
            self.logger.debug(f"pgrep exited {result.returncode} for {name}: {result.stderr.strip()}")
            return None

        output = result.stdout.strip()
        if not output:
            return ServiceProbe.absent(name)
        return ServiceProbe.present(name, parse_pid(output))

    def _scan(self, name: str) -> ServiceProbe:
        """Scan the full process list for a name containing the target."""
        target = name.lower()
        try:
            for proc in psutil.process_iter(["pid", "name"]):
                proc_name = (proc.info.get("name") or "").lower()
                if target in proc_name:
                    return ServiceProbe.present(name, proc.info["pid"])
        except (psutil.Error, OSError) as e:
            return ServiceProbe.unknown(name, f"process listing failed: {e}")
        return ServiceProbe.absent(name)

    def detect_version(self, name: str) -> str | None:
        """Return the version reported by the named binary, or None."""
        path = shutil.which(name)
        if not path:
            self.logger.info(f"Cannot find {name} binary in PATH")
            return None

        try:
            result = subprocess.run(
                [path, "version"],
                capture_output=True,
                text=True,
                timeout=VERSION_TIMEOUT,
            )
        except (OSError, subprocess.SubprocessError) as e:
            self.logger.error(f"Cannot execute {name} version: {e}")
            return None

        if result.returncode != 0:
            self.logger.warning(f"{name} version exited with status {result.returncode}")
            return None
        version = parse_version_output(result.stdout)
        self.logger.debug(f"Detected {name} version: {version}")
        return version
