"""
Vault collector.

Vault renamed several CLI commands after 0.9.2 (audit-list became audit
list, mounts became secrets list, and so on). The detected server version
picks which set of command names to run.
"""

from __future__ import annotations

from typing import Sequence

from rover.catalog import CliSyntax, CommandSpec, vault_commands
from rover.collectors.base import BaseCollector
from rover.locator import ServiceProbe
from rover.versions import is_newer

SYNTAX_BREAKPOINT = "0.9.2"


def select_syntax(version: str | None, breakpoint: str = SYNTAX_BREAKPOINT) -> CliSyntax:
    """
    Choose the Vault CLI syntax for a detected version.

    Versions above the breakpoint use the current syntax. Anything else,
    including an undetected version, uses the legacy syntax.

    Raises:
        VersionError: If version is set but cannot be parsed.
    """
    if version is None:
        return CliSyntax.LEGACY
    return CliSyntax.CURRENT if is_newer(version, breakpoint) else CliSyntax.LEGACY


class VaultCollector(BaseCollector):
    """Collects Vault server diagnostics."""

    name = "vault"
    description = "Vault status, audit devices, auth methods, mounts and logs"
    service = "vault"
    token_env = "VAULT_TOKEN"

    def commands(self, probe: ServiceProbe | None) -> Sequence[CommandSpec]:
        version = probe.version if probe else None
        syntax = select_syntax(version)
        self.logger.info(f"Vault version {version or 'unknown'}, using {syntax.value} CLI syntax")
        return vault_commands(self.host.os, syntax)
