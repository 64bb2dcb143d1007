"""
Operating system collector.

Captures release files, disk, network, process and kernel state using the
command catalog for the detected OS family.
"""

from __future__ import annotations

from typing import Sequence

from rover.catalog import CommandSpec, system_commands
from rover.collectors.base import BaseCollector
from rover.locator import ServiceProbe


class SystemCollector(BaseCollector):
    """Collects operating system diagnostics."""

    name = "system"
    description = "Operating system, disk, network and process information"

    def commands(self, probe: ServiceProbe | None) -> Sequence[CommandSpec]:
        specs = system_commands(self.host.os)
        if not specs:
            self.logger.warning(f"No system commands known for platform {self.host.os_name}")
        return specs
