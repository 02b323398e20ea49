"""Tests for pct-backed guest execution."""

import subprocess
from pathlib import Path

import pytest
from unittest.mock import AsyncMock, patch

from pvelxc.guest.executor import PctExecutor
from pvelxc.utils.commands import CommandResult


@pytest.mark.asyncio
class TestPctExecutor:
    """Test PctExecutor."""

    async def test_execute(self):
        with patch("pvelxc.guest.executor.run_command", new_callable=AsyncMock) as mock_run:
            mock_run.return_value = CommandResult(returncode=0, stdout="ok")
            result = await PctExecutor(timeout=30).execute(105, ["apk", "add", "docker"])

        assert result.ok
        mock_run.assert_called_once_with(
            ["pct", "exec", "105", "--", "apk", "add", "docker"], check=False, timeout=30
        )

    async def test_execute_timeout(self):
        with patch("pvelxc.guest.executor.run_command", new_callable=AsyncMock) as mock_run:
            mock_run.side_effect = subprocess.TimeoutExpired(["pct"], 30)
            result = await PctExecutor(timeout=30).execute(105, ["apk", "upgrade"])

        assert result.returncode == 124

    async def test_shell(self):
        with patch("pvelxc.guest.executor.run_command", new_callable=AsyncMock) as mock_run:
            mock_run.return_value = CommandResult(returncode=0)
            await PctExecutor().shell(105, "echo hi > /tmp/x")

        assert mock_run.call_args.args[0] == ["pct", "exec", "105", "--", "sh", "-c", "echo hi > /tmp/x"]

    async def test_push_uses_temporary_file(self):
        seen = {}

        async def fake_run(cmd, **kwargs):
            seen["cmd"] = cmd
            seen["content"] = Path(cmd[3]).read_text()
            return CommandResult(returncode=0)

        with patch("pvelxc.guest.executor.run_command", side_effect=fake_run):
            result = await PctExecutor().push(105, "UTC\n", "/etc/timezone", "0644")

        assert result.ok
        assert seen["cmd"][:3] == ["pct", "push", "105"]
        assert seen["cmd"][4:] == ["/etc/timezone", "--perms", "0644"]
        assert seen["content"] == "UTC\n"
        assert not Path(seen["cmd"][3]).exists()


def test_enter():
    with patch("pvelxc.guest.executor.subprocess.call", return_value=0) as mock_call:
        assert PctExecutor().enter(105) == 0

    mock_call.assert_called_once_with(["pct", "enter", "105"])
