"""Tests for CLI main module."""

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

import typer
from typer.testing import CliRunner

from rootfetch.cli.main import _run_cli_command, app
from rootfetch.errors import ResolutionError


runner = CliRunner()

DEFINITION = """
image:
  distribution: fedora
  release: "39"
  architecture: x86_64
source:
  downloader: fedora-http
  url: https://kojipkgs.fedoraproject.org
"""


@patch("rootfetch.cli.main.console")
def test_run_cli_command_success(mock_console):
    """Test the command runner returns the handler result."""
    handler = AsyncMock(return_value="done")

    assert _run_cli_command(handler, arg1="value1") == "done"

    handler.assert_awaited_once_with(arg1="value1")
    mock_console.print.assert_not_called()


@patch("rootfetch.cli.main.console")
def test_run_cli_command_error(mock_console):
    """Test acquisition errors print one message and exit 1."""
    handler = AsyncMock(side_effect=ResolutionError("Unable to find latest build"))

    with pytest.raises(typer.Exit) as exc_info:
        _run_cli_command(handler)

    mock_console.print.assert_called_once_with("[red]Error:[/red] Unable to find latest build")
    assert exc_info.value.exit_code == 1


def test_sources_command():
    """Test backends are listed."""
    result = runner.invoke(app, ["sources"])

    assert result.exit_code == 0
    assert "gentoo-http" in result.stdout


def test_validate_command(tmp_path):
    """Test a valid definition is reported as such."""
    path = tmp_path / "fedora.yaml"
    path.write_text(DEFINITION)

    result = runner.invoke(app, ["validate", str(path)])

    assert result.exit_code == 0
    assert "Definition is valid" in result.stdout


def test_validate_unknown_downloader(tmp_path):
    """Test an unknown downloader fails validation."""
    path = tmp_path / "bad.yaml"
    path.write_text(DEFINITION.replace("fedora-http", "nope-http"))

    result = runner.invoke(app, ["validate", str(path)])

    assert result.exit_code == 1
    assert "nope-http" in result.stdout


def test_pull_command(tmp_path):
    """Test pull passes definition, target and overrides to the pipeline."""
    path = tmp_path / "fedora.yaml"
    path.write_text(DEFINITION)
    target = tmp_path / "rootfs"

    with patch("rootfetch.cli.main.acquire", new_callable=AsyncMock) as mock_acquire, \
            patch("rootfetch.cli.main.setup_logging") as mock_logging:
        result = runner.invoke(app, [
            "pull", str(path), str(target),
            "--cache-dir", str(tmp_path / "cache"),
            "--log-level", "debug",
            "--skip-verification",
        ])

    assert result.exit_code == 0, result.stdout
    definition, rootfs, settings = mock_acquire.await_args.args
    assert rootfs == target
    assert definition.source.skip_verification is True
    assert settings.cache_dir == str(tmp_path / "cache")
    mock_logging.assert_called_once_with("DEBUG")
