"""
Rover - diagnostic bundle collection for hosts running Consul, Nomad and Vault.

Runs a curated battery of read-only operating system and service commands,
stores their output in a per-host directory tree, and archives the result
for upload.
"""

__version__ = "0.1.0"
__author__ = "Rover contributors"

__all__ = ["__version__"]
