"""
Error handling tests for file system failures.

Tests layout validation, unwritable locations, archive failures and
config file problems.
"""

from __future__ import annotations

from unittest.mock import patch

import pytest
import yaml

from rover.archive import archive_bundle
from rover.config import Config
from rover.errors import ArchiveError, OutputDirectoryError, RoverError
from rover.layout import OutputLayout


class TestLayoutErrors:
    @pytest.mark.parametrize("hostname", ["", ".", "..", "a/b", "a\\b"])
    def test_invalid_hostname(self, tmp_path, hostname):
        with pytest.raises(ValueError):
            OutputLayout(tmp_path, hostname)

    def test_ensure_dir_permission_error(self, layout):
        with patch("rover.layout.Path.mkdir", side_effect=PermissionError("denied")):
            with pytest.raises(OutputDirectoryError, match="Cannot create directory"):
                layout.ensure_dir("system")

    def test_errors_share_base(self):
        assert issubclass(OutputDirectoryError, RoverError)
        assert issubclass(ArchiveError, RoverError)


class TestArchiveErrors:
    def test_destination_is_a_file(self, layout, tmp_path):
        layout.ensure_dir("system")
        dest = tmp_path / "dest"
        dest.write_text("file")

        with pytest.raises(ArchiveError):
            archive_bundle(layout.host_dir, dest, "test-host")

        assert layout.host_dir.exists()

    def test_cleanup_failure_reported(self, layout, tmp_path):
        layout.ensure_dir("system")

        with patch("rover.archive.shutil.rmtree", side_effect=PermissionError("busy")):
            with pytest.raises(ArchiveError, match="cannot remove"):
                archive_bundle(layout.host_dir, tmp_path / "archives", "test-host")

        assert len(list((tmp_path / "archives").glob("*.zip"))) == 1


class TestConfigFileErrors:
    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("collection: [unclosed")

        with pytest.raises(yaml.YAMLError):
            Config.from_file(path)

    def test_load_with_missing_explicit_path_uses_defaults(self, tmp_path, monkeypatch):
        monkeypatch.delenv("ROVER_OUTPUT_DIR", raising=False)
        monkeypatch.delenv("ROVER_WORKERS", raising=False)
        config = Config.load(tmp_path / "missing.yaml")

        assert config.output_dir == "."
        assert config.workers == 1
