"""
Consul collector.

Runs consul CLI introspection, process table and syslog extraction, and
pulls goroutine and heap dumps from the local agent's pprof endpoints.
"""

from __future__ import annotations

import os
from typing import Sequence

from rover.catalog import CommandSpec, consul_commands
from rover.collectors.base import BaseCollector
from rover.locator import ServiceProbe


class ConsulCollector(BaseCollector):
    """Collects Consul agent diagnostics."""

    name = "consul"
    description = "Consul version, members, raft peers, logs and pprof dumps"
    service = "consul"
    token_env = "CONSUL_HTTP_TOKEN"

    def commands(self, probe: ServiceProbe | None) -> Sequence[CommandSpec]:
        return consul_commands(self.host.os)

    def bindings(self) -> dict[str, str]:
        return {"consul_token": os.environ.get(self.token_env, "")}
