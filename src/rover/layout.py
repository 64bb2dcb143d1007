"""
Output layout for diagnostic bundles.

Captures are written to <root>/<hostname>/<category>/<name>.txt and the run
log to <root>/<hostname>/log/rover.log.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from rover.errors import OutputDirectoryError

LOG_CATEGORY = "log"
LOG_FILE_NAME = "rover.log"
CAPTURE_SUFFIX = ".txt"


def _check_component(kind: str, value: str) -> str:
    if not value or value in (".", "..") or "/" in value or "\\" in value:
        raise ValueError(f"Invalid {kind} for output path: {value!r}")
    return value


@dataclass(frozen=True)
class OutputLayout:
    """Per-host directory and file naming scheme."""

    root: Path
    hostname: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "root", Path(self.root))
        _check_component("hostname", self.hostname)

    @property
    def host_dir(self) -> Path:
        return self.root / self.hostname

    @property
    def log_file(self) -> Path:
        return self.host_dir / LOG_CATEGORY / LOG_FILE_NAME

    def category_dir(self, category: str) -> Path:
        return self.host_dir / _check_component("category", category)

    def path_for(self, category: str, name: str) -> Path:
        """Return the capture file path for a category and output name."""
        return self.category_dir(category) / (_check_component("name", name) + CAPTURE_SUFFIX)

    def ensure_dir(self, category: str) -> Path:
        """
        Create the category directory if needed.

        Raises:
            OutputDirectoryError: If the directory cannot be created.
        """
        path = self.category_dir(category)
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise OutputDirectoryError(f"Cannot create directory {path}: {e}") from e
        return path
