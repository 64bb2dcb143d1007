"""
Configuration management for Rover.

Supports configuration via YAML files, environment variables, and programmatic access.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

DEFAULT_CONFIG_PATHS = [
    Path("/etc/rover/config.yaml"),
    Path.home() / ".config" / "rover" / "config.yaml",
    Path("rover-config.yaml"),
]

# Service tokens are only ever read from the environment
TOKEN_ENV_VARS = ("CONSUL_HTTP_TOKEN", "NOMAD_TOKEN", "VAULT_TOKEN")


def token_values() -> list[str]:
    """Return the non-empty service tokens present in the environment."""
    return [os.environ[name] for name in TOKEN_ENV_VARS if os.environ.get(name)]


@dataclass
class Config:
    """
    Configuration container for Rover.

    Priority (highest to lowest):
    1. Programmatic values passed to __init__
    2. Environment variables (prefixed with ROVER_, plus AWS_BUCKET,
       AWS_REGION and AWS_PREFIX)
    3. Config file values
    4. Default values
    """

    # Collection settings
    output_dir: str = "."
    hostname: str | None = None
    command_timeout: int = 60
    workers: int = 1

    # Archive settings
    archive_dir: str = "."
    keep_data: bool = False

    # Upload settings
    aws_bucket: str | None = None
    aws_region: str | None = None
    aws_prefix: str = ""

    # Logging
    log_level: str = "INFO"

    @classmethod
    def from_file(cls, path: str | Path) -> Config:
        """Load configuration from a YAML file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Config:
        """Create config from a dictionary."""
        # Nested sections are flattened as <section>_<key> and <key>
        flat = {}
        for key, value in data.items():
            if isinstance(value, dict):
                for subkey, subvalue in value.items():
                    flat[subkey] = subvalue
                    flat[f"{key}_{subkey}"] = subvalue
            else:
                flat[key] = value

        known_fields = {f.name for f in cls.__dataclass_fields__.values()}
        filtered = {k: v for k, v in flat.items() if k in known_fields}

        return cls(**filtered)

    @classmethod
    def load(cls, config_path: str | Path | None = None) -> Config:
        """
        Load configuration with full resolution order.

        Args:
            config_path: Explicit path to config file. If None, searches
                        default locations.

        Returns:
            Fully resolved Config instance.
        """
        base_config: dict[str, Any] = {}

        if config_path:
            path = Path(config_path)
            if path.exists():
                with open(path) as f:
                    base_config = yaml.safe_load(f) or {}
        else:
            for path in DEFAULT_CONFIG_PATHS:
                if path.exists():
                    with open(path) as f:
                        base_config = yaml.safe_load(f) or {}
                    break

        config = cls.from_dict(base_config) if base_config else cls()
        config._apply_env_overrides()

        return config

    def _apply_env_overrides(self) -> None:
        """Apply environment variable overrides."""
        env_mappings = {
            "ROVER_OUTPUT_DIR": "output_dir",
            "ROVER_HOSTNAME": "hostname",
            "ROVER_COMMAND_TIMEOUT": "command_timeout",
            "ROVER_WORKERS": "workers",
            "ROVER_ARCHIVE_DIR": "archive_dir",
            "ROVER_KEEP_DATA": "keep_data",
            "ROVER_LOG_LEVEL": "log_level",
            "AWS_BUCKET": "aws_bucket",
            "AWS_REGION": "aws_region",
            "AWS_PREFIX": "aws_prefix",
        }

        for env_var, attr in env_mappings.items():
            value = os.environ.get(env_var)
            if value is not None:
                current = getattr(self, attr)
                if isinstance(current, bool):
                    setattr(self, attr, value.lower() in ("true", "1", "yes"))
                elif isinstance(current, int):
                    setattr(self, attr, int(value))
                else:
                    setattr(self, attr, value)

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary."""
        return {
            "collection": {
                "output_dir": self.output_dir,
                "hostname": self.hostname,
                "command_timeout": self.command_timeout,
                "workers": self.workers,
            },
            "archive": {
                "dir": self.archive_dir,
                "keep_data": self.keep_data,
            },
            "aws": {
                "bucket": self.aws_bucket,
                "region": self.aws_region,
                "prefix": self.aws_prefix,
            },
            "log": {
                "level": self.log_level,
            },
        }

    def save(self, path: str | Path) -> None:
        """Save configuration to a YAML file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)
