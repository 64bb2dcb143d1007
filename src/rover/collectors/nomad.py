"""
Nomad collector.
"""

from __future__ import annotations

from typing import Sequence

from rover.catalog import CommandSpec, nomad_commands
from rover.collectors.base import BaseCollector
from rover.locator import ServiceProbe


class NomadCollector(BaseCollector):
    """Collects Nomad agent diagnostics."""

    name = "nomad"
    description = "Nomad status, version, process limits and logs"
    service = "nomad"
    token_env = "NOMAD_TOKEN"

    def commands(self, probe: ServiceProbe | None) -> Sequence[CommandSpec]:
        return nomad_commands(self.host.os)
