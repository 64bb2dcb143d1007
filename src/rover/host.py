"""
Host identification for Rover.

Resolves the host name, operating system family and CPU architecture once
per run. The resulting HostContext is read-only for the rest of the run.
"""

from __future__ import annotations

import logging
import platform
import socket
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum

import distro
import psutil

from rover.errors import HostnameError

logger = logging.getLogger(__name__)


class OSFamily(str, Enum):
    """Operating systems Rover has command catalogs for."""

    DARWIN = "darwin"
    FREEBSD = "freebsd"
    LINUX = "linux"
    NETBSD = "netbsd"
    OPENBSD = "openbsd"
    SOLARIS = "solaris"
    WINDOWS = "windows"

    @classmethod
    def detect(cls, system: str | None = None) -> OSFamily | None:
        """
        Map a platform.system() value onto an OS family.

        Returns None for platforms without a catalog so callers fail closed.
        """
        system = (system if system is not None else platform.system()).lower()
        if system == "sunos":
            return cls.SOLARIS
        try:
            return cls(system)
        except ValueError:
            return None


def resolve_hostname() -> str:
    """Return the network host name or raise HostnameError."""
    try:
        name = socket.gethostname()
    except OSError as e:
        raise HostnameError(f"Cannot determine hostname: {e}") from e
    name = name.strip()
    if not name:
        raise HostnameError("Cannot determine hostname: empty value")
    return name


@dataclass(frozen=True)
class HostContext:
    """Immutable facts about the host being collected."""

    hostname: str
    os: OSFamily | None
    arch: str

    @classmethod
    def detect(cls, hostname: str | None = None) -> HostContext:
        """
        Resolve the context for the running host.

        Args:
            hostname: Explicit host name override. Resolved from the
                     system when not given.
        """
        ctx = cls(
            hostname=hostname or resolve_hostname(),
            os=OSFamily.detect(),
            arch=platform.machine() or "unknown",
        )
        logger.debug(f"Host context: {ctx}")
        return ctx

    @property
    def os_name(self) -> str:
        return self.os.value if self.os else platform.system().lower() or "unknown"

    def describe(self) -> dict[str, str]:
        """Basic factoids about this system for display."""
        facts = {
            "Hostname": self.hostname,
            "OS": self.os_name,
            "Architecture": self.arch,
        }
        if self.os is OSFamily.LINUX:
            facts["Distribution"] = distro.name(pretty=True) or "unknown"
        facts["Date/Time"] = datetime.now().strftime("%a %b %d %H:%M:%S %Y")
        try:
            uptime = datetime.now() - datetime.fromtimestamp(psutil.boot_time())
            facts["Uptime"] = str(timedelta(seconds=int(uptime.total_seconds())))
        except (psutil.Error, OSError) as e:
            logger.debug(f"Could not determine uptime: {e}")
        return facts
