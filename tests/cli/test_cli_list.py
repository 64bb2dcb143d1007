"""
CLI tests for the 'rover list' and 'rover info' commands.
"""

from __future__ import annotations

import unittest
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from rover.cli import main
from rover.collectors import COLLECTORS
from rover.errors import HostnameError
from rover.locator import ServiceProbe


@pytest.mark.cli
class TestCliList(unittest.TestCase):
    """Test the 'rover list' command."""

    def setUp(self):
        self.runner = CliRunner()

    def test_list_command_shows_all_collectors(self):
        result = self.runner.invoke(main, ["list"])

        self.assertEqual(result.exit_code, 0)
        self.assertIn("Available Collectors", result.output)
        for name in COLLECTORS:
            self.assertIn(name, result.output)


@pytest.mark.cli
class TestCliInfo(unittest.TestCase):
    """Test the 'rover info' command."""

    def setUp(self):
        self.runner = CliRunner()

    @patch("rover.cli.Rover")
    def test_info_shows_facts_and_versions(self, mock_rover_cls):
        rover = mock_rover_cls.return_value
        rover.host.describe.return_value = {"Hostname": "node-7", "OS": "linux"}
        rover.service_versions.return_value = {
            "vault": ServiceProbe.present("vault", 1, "v1.15.2"),
        }

        result = self.runner.invoke(main, ["info"])

        self.assertEqual(result.exit_code, 0)
        self.assertIn("Basic factoids", result.output)
        self.assertIn("node-7", result.output)
        self.assertIn("Active running versions", result.output)
        self.assertIn("v1.15.2", result.output)

    @patch("rover.cli.Rover")
    def test_info_without_services(self, mock_rover_cls):
        rover = mock_rover_cls.return_value
        rover.host.describe.return_value = {"Hostname": "node-7"}
        rover.service_versions.return_value = {}

        result = self.runner.invoke(main, ["info"])

        self.assertEqual(result.exit_code, 0)
        self.assertNotIn("Active running versions", result.output)

    @patch("rover.cli.Rover")
    def test_info_hostname_failure(self, mock_rover_cls):
        mock_rover_cls.side_effect = HostnameError("Cannot determine hostname: empty value")

        result = self.runner.invoke(main, ["info"])

        self.assertEqual(result.exit_code, 1)
        self.assertIn("Cannot determine hostname", result.output)
