"""Unit tests for the Click-based CLI structure.

These tests verify the CLI command structure, help text, and argument parsing
without requiring a running API server.
"""

import pytest

from kubemon.client.cli.main import cli


class TestCLIStructure:
    """Test the main CLI structure and command groups."""

    def test_cli_help(self, runner):
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "Kubemon pod management CLI" in result.output
        for group in ("pod", "node", "config", "version"):
            assert group in result.output

    def test_cli_debug_flag(self, runner, no_logging_setup):
        result = runner.invoke(cli, ["--debug", "version"])
        assert result.exit_code == 0
        no_logging_setup.assert_called_once_with(debug=True)

    def test_cli_version_command(self, runner):
        result = runner.invoke(cli, ["version"])
        assert result.exit_code == 0
        assert result.output.startswith("kubemon ")


class TestCommandGroups:
    @pytest.mark.parametrize(
        "group, commands",
        [
            ("pod", ["run", "status", "list", "logs", "delete", "watch"]),
            ("node", ["list"]),
            ("config", ["show", "set"]),
        ],
    )
    def test_group_help(self, runner, group, commands):
        result = runner.invoke(cli, [group, "--help"])
        assert result.exit_code == 0
        for command in commands:
            assert command in result.output

    def test_pod_run_requires_file(self, runner):
        result = runner.invoke(cli, ["pod", "run"])
        assert result.exit_code == 2
        assert "--filename" in result.output

    def test_pod_status_requires_name(self, runner):
        result = runner.invoke(cli, ["pod", "status"])
        assert result.exit_code == 2

    def test_invalid_output_format(self, runner):
        result = runner.invoke(cli, ["pod", "list", "-o", "xml"])
        assert result.exit_code == 2

    def test_config_show_key_requires_section(self, runner):
        result = runner.invoke(cli, ["config", "show", "--key", "namespace"])
        assert result.exit_code == 2
        assert "--key requires --section" in result.output
