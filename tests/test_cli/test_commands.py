"""Tests for CLI command implementations."""

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from pvelxc.cli import commands
from pvelxc.models.report import RunSummary, StepOutcome


@pytest.fixture
def summary():
    summary = RunSummary(vmid=104, hostname="web01", report="REPORT TEXT [not markup]")
    summary.add(StepOutcome.ok("template"))
    return summary


@pytest.fixture
def provisioner(summary):
    with patch("pvelxc.cli.commands.Provisioner") as mock_provisioner:
        instance = mock_provisioner.return_value
        instance.run = AsyncMock(return_value=summary)
        instance.config = MagicMock(attended=False)
        yield instance


@patch("pvelxc.cli.commands.console")
def test_create_success(mock_console, provisioner, tmp_path):
    commands.create_container(tmp_path / "create-lxc.conf")

    mock_console.print.assert_any_call("REPORT TEXT [not markup]", markup=False, highlight=False)
    printed = " ".join(str(c.args[0]) for c in mock_console.print.call_args_list if c.args)
    assert "created successfully" in printed
    provisioner.executor.enter.assert_not_called()


@patch("pvelxc.cli.commands.console")
def test_create_with_warnings(mock_console, provisioner, summary, tmp_path):
    summary.add(StepOutcome.warning("docker service", "Docker service failed to start"))

    commands.create_container(tmp_path / "create-lxc.conf")

    printed = " ".join(str(c.args[0]) for c in mock_console.print.call_args_list if c.args)
    assert "created with 1 warning(s)" in printed


@patch("pvelxc.cli.commands.console")
@patch("pvelxc.cli.commands.typer.confirm", return_value=True)
def test_attended_enters_container(mock_confirm, mock_console, provisioner, tmp_path):
    provisioner.config.attended = True

    commands.create_container(tmp_path / "create-lxc.conf")

    mock_confirm.assert_called_once_with("Would you like to enter the container now?", default=False)
    provisioner.executor.enter.assert_called_once_with(104)


@patch("pvelxc.cli.commands.console")
@patch("pvelxc.cli.commands.typer.confirm", return_value=False)
def test_attended_declines(mock_confirm, mock_console, provisioner, tmp_path):
    provisioner.config.attended = True

    commands.create_container(tmp_path / "create-lxc.conf")

    provisioner.executor.enter.assert_not_called()


@patch("pvelxc.cli.commands.console")
def test_show_summary(mock_console, summary):
    summary.add(StepOutcome.skipped("ssh key", "no ssh_public_key configured"))

    commands.show_summary(summary)

    table = mock_console.print.call_args.args[0]
    assert table.row_count == 2
