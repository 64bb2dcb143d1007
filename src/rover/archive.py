"""
Bundle archiving.

Compresses a host's capture directory into
rover-<hostname>-<YYYYMMDDhhmmss>.zip and optionally removes the source.
"""

from __future__ import annotations

import logging
import shutil
import zipfile
from datetime import datetime
from pathlib import Path

from rover.errors import ArchiveError

logger = logging.getLogger(__name__)

ARCHIVE_TEMPLATE = "rover-{hostname}-{timestamp}.zip"
TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"


def archive_name(hostname: str, now: datetime | None = None) -> str:
    timestamp = (now or datetime.now()).strftime(TIMESTAMP_FORMAT)
    return ARCHIVE_TEMPLATE.format(hostname=hostname, timestamp=timestamp)


def archive_bundle(
    source_dir: str | Path,
    dest_dir: str | Path,
    hostname: str,
    keep_data: bool = False,
    now: datetime | None = None,
) -> Path:
    """
    Zip a bundle directory.

    Args:
        source_dir: The <hostname> directory holding the captures.
        dest_dir: Directory where the archive is written.
        hostname: Host name used in the archive file name.
        keep_data: Keep source_dir after archiving.
        now: Timestamp for the file name (defaults to the current time).

    Returns:
        Path to the archive.

    Raises:
        ArchiveError: If the source is missing or the archive cannot be written.
    """
    source = Path(source_dir)
    if not source.is_dir():
        raise ArchiveError(
            f"Cannot archive nonexistent directory '{source}'; "
            "please use rover commands to generate data first."
        )

    dest = Path(dest_dir)
    target = dest / archive_name(hostname, now)

    try:
        dest.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ArchiveError(f"Cannot create archive directory {dest}: {e}") from e

    try:
        with zipfile.ZipFile(
            target, "w", compression=zipfile.ZIP_DEFLATED, strict_timestamps=False
        ) as zf:
            for path in sorted(source.rglob("*")):
                if path.is_file():
                    # Entries are rooted at the hostname directory
                    zf.write(path, arcname=path.relative_to(source.parent).as_posix())
    except OSError as e:
        target.unlink(missing_ok=True)
        raise ArchiveError(f"Cannot archive data: {e}") from e

    logger.info(f"Data archived in {target}")

    if keep_data:
        logger.info(f"Preserved source directory {source}")
    else:
        try:
            shutil.rmtree(source)
        except OSError as e:
            raise ArchiveError(f"Archived to {target} but cannot remove {source}: {e}") from e
        logger.debug(f"Removed source directory {source}")

    return target


def latest_archive(dest_dir: str | Path, hostname: str) -> Path | None:
    """Return the newest archive for hostname in dest_dir, if any."""
    candidates = sorted(Path(dest_dir).glob(f"rover-{hostname}-*.zip"))
    return candidates[-1] if candidates else None
