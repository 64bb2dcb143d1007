"""
Exception hierarchy for Rover.

Every exception here is fatal for the current invocation. Per-command misses
are reported as results by the command runner, never raised.
"""

from __future__ import annotations


class RoverError(Exception):
    """Base class for fatal Rover errors."""

    pass


class HostnameError(RoverError):
    """Raised when the system host name cannot be resolved."""

    pass


class OutputDirectoryError(RoverError):
    """Raised when an output directory cannot be created."""

    pass


class OutputFileError(RoverError):
    """Raised when a capture file cannot be created."""

    pass


class LaunchError(RoverError):
    """Raised when the process table refuses to start a located command."""

    pass


class VersionError(RoverError):
    """Raised when a version string cannot be parsed."""

    pass


class ArchiveError(RoverError):
    """Raised when the bundle cannot be archived."""

    pass


class UnknownCollectorError(RoverError):
    """Raised when a collector name is not registered."""

    pass
