"""
Diagnostic collectors for Rover.

Each collector owns one output category and knows which catalog entries
apply to it.
"""

from __future__ import annotations

from rover.collectors.base import BaseCollector, CollectionReport, CollectionStatus
from rover.collectors.consul import ConsulCollector
from rover.collectors.nomad import NomadCollector
from rover.collectors.system import SystemCollector
from rover.collectors.vault import VaultCollector

# Registry of all available collectors
COLLECTORS: dict[str, type[BaseCollector]] = {
    "system": SystemCollector,
    "consul": ConsulCollector,
    "nomad": NomadCollector,
    "vault": VaultCollector,
}


def get_collector(name: str) -> type[BaseCollector] | None:
    """Get a specific collector by name."""
    return COLLECTORS.get(name)


def list_collectors() -> list[str]:
    """List all available collector names."""
    return list(COLLECTORS.keys())


__all__ = [
    "BaseCollector",
    "CollectionReport",
    "CollectionStatus",
    "SystemCollector",
    "ConsulCollector",
    "NomadCollector",
    "VaultCollector",
    "get_collector",
    "list_collectors",
    "COLLECTORS",
]
