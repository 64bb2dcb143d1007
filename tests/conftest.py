"""
Pytest fixtures and configuration for Rover tests.

Provides reusable host contexts, output layouts, command outputs and a
fake process locator across the test suite.
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from rover.config import Config
from rover.host import HostContext, OSFamily
from rover.layout import OutputLayout
from rover.locator import ProcessLocator, ServiceProbe
from rover.runner import CommandRunner


# Host and layout fixtures
@pytest.fixture
def linux_host():
    """Host context for a Linux machine."""
    return HostContext(hostname="test-host", os=OSFamily.LINUX, arch="x86_64")


@pytest.fixture
def darwin_host():
    """Host context for a macOS machine."""
    return HostContext(hostname="test-host", os=OSFamily.DARWIN, arch="arm64")


@pytest.fixture
def layout(tmp_path):
    """Output layout rooted in a temporary directory."""
    return OutputLayout(tmp_path, "test-host")


@pytest.fixture
def runner(layout):
    """Command runner with a short timeout."""
    return CommandRunner(layout, timeout=10)


# Process locator fixtures
def _locator_returning(probe: ServiceProbe) -> MagicMock:
    locator = MagicMock(spec=ProcessLocator)
    locator.locate.return_value = probe
    return locator


@pytest.fixture
def vault_running_locator():
    """Locator reporting a running Vault 1.15.2 process."""
    return _locator_returning(ServiceProbe.present("vault", 4242, "v1.15.2"))


@pytest.fixture
def absent_locator():
    """Locator reporting that no process is running."""
    locator = MagicMock(spec=ProcessLocator)
    locator.locate.side_effect = lambda name, **kwargs: ServiceProbe.absent(name)
    return locator


# Test data fixtures - command outputs
@pytest.fixture
def sample_vault_version_output():
    """Sample output from vault version."""
    return "Vault v1.15.2 (cf1b5cafa047bc8e4a3f93444fcb4011593b92cb), built 2023-11-06T11:33:28Z\n"


@pytest.fixture
def sample_consul_version_output():
    """Sample output from consul version."""
    return """Consul v1.16.1
Revision e0ab4d29
Build Date 2023-08-05T21:56:29Z
Protocol 2 spoken by default, understands 2 to 3 (agent will automatically use protocol >2 when speaking to compatible agents)
"""


@pytest.fixture
def sample_pgrep_output():
    """Sample output from pgrep matching two processes."""
    return "1234\n5678\n"


# Utility fixtures
@pytest.fixture
def temp_config_file(tmp_path):
    """Create a temporary config file."""
    config_file = tmp_path / "test_config.yaml"
    config_content = """
collection:
  output_dir: /tmp/rover-test
  command_timeout: 15
archive:
  dir: /tmp/rover-archives
  keep_data: true
aws:
  bucket: test-bucket
  region: us-east-1
log:
  level: DEBUG
"""

    config_file.write_text(config_content)
    return config_file


@pytest.fixture
def sample_config(tmp_path):
    """Configuration writing everything below tmp_path."""
    return Config(
        output_dir=str(tmp_path / "out"),
        archive_dir=str(tmp_path / "archives"),
        hostname="test-host",
        command_timeout=10,
    )


# Pytest Configuration
def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "cli: marks tests as command-line interface tests")
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
