"""Tests for host dependency checks."""

import pytest
from unittest.mock import AsyncMock, patch

from pvelxc.errors import DependencyError
from pvelxc.models.report import StepStatus
from pvelxc.provision.dependencies import DependencyChecker
from pvelxc.utils.commands import CommandResult


def _which(available):
    return lambda tool: f"/usr/bin/{tool}" if tool in available else None


@pytest.mark.asyncio
class TestDependencyChecker:
    """Test DependencyChecker."""

    async def test_all_present(self):
        with patch("pvelxc.provision.dependencies.shutil.which", side_effect=_which({"pct", "pvesh", "pveam", "jq"})), \
             patch("pvelxc.provision.dependencies.run_command", new_callable=AsyncMock) as mock_run:
            outcomes = await DependencyChecker().check()

        mock_run.assert_not_called()
        assert [o.name for o in outcomes] == ["dependencies"]

    async def test_not_a_proxmox_host(self):
        with patch("pvelxc.provision.dependencies.shutil.which", side_effect=_which({"jq"})):
            with pytest.raises(DependencyError) as exc_info:
                await DependencyChecker().check()

        assert "Proxmox VE host" in str(exc_info.value)

    async def test_installs_json_tool(self):
        installed = {"pct", "pvesh", "pveam"}

        async def fake_run(cmd, **kwargs):
            if cmd[:2] == ["apt-get", "install"]:
                installed.add("jq")
            return CommandResult(returncode=0)

        with patch("pvelxc.provision.dependencies.shutil.which", side_effect=lambda t: t if t in installed else None), \
             patch("pvelxc.provision.dependencies.run_command", side_effect=fake_run) as mock_run:
            outcomes = await DependencyChecker().check()

        commands = [c.args[0] for c in mock_run.call_args_list]
        assert commands == [["apt-get", "update"], ["apt-get", "install", "-y", "jq"]]
        assert outcomes[0].name == "install jq"

    async def test_install_failure_is_fatal(self):
        with patch("pvelxc.provision.dependencies.shutil.which", side_effect=_which({"pct", "pvesh", "pveam"})), \
             patch("pvelxc.provision.dependencies.run_command", new_callable=AsyncMock) as mock_run:
            mock_run.side_effect = [
                CommandResult(returncode=0),
                CommandResult(returncode=100, stderr="E: Unable to locate package jq"),
            ]
            with pytest.raises(DependencyError):
                await DependencyChecker().check()

    async def test_tun_already_loaded(self):
        lsmod = "Module                  Size  Used by\ntun                    61440  2\n"
        with patch("pvelxc.provision.dependencies.run_command", new_callable=AsyncMock) as mock_run:
            mock_run.return_value = CommandResult(returncode=0, stdout=lsmod)
            outcome = await DependencyChecker().load_tun_module()

        assert outcome.status == StepStatus.OK
        mock_run.assert_called_once()

    async def test_tun_load_failure_is_warning(self):
        with patch("pvelxc.provision.dependencies.run_command", new_callable=AsyncMock) as mock_run:
            mock_run.side_effect = [
                CommandResult(returncode=0, stdout="Module Size Used by\n"),
                CommandResult(returncode=1, stderr="modprobe: FATAL: Module tun not found"),
            ]
            outcome = await DependencyChecker().load_tun_module()

        assert outcome.status == StepStatus.WARNING
        assert "Module tun not found" in outcome.reason
