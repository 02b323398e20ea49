"""Tests for template provider."""

import subprocess

import pytest
from unittest.mock import AsyncMock, patch

from pvelxc.errors import ConfigError, TemplateDownloadError, TemplateNotFoundError
from pvelxc.models.config import LxcConfig
from pvelxc.models.report import StepStatus
from pvelxc.models.template import TemplateRef
from pvelxc.providers.base import ProviderStatus
from pvelxc.providers.template import TemplateProvider
from pvelxc.utils.commands import CommandResult


AVAILABLE = """\
mail            proxmox-mail-gateway-8.1-standard_8.1-1_amd64.tar.zst
system          alpine-3.18-default_20230607_amd64.tar.xz
system          alpine-3.20-default_20240908_amd64.tar.xz
system          alpine-3.19-default_20240207_amd64.tar.xz
system          debian-12-standard_12.7-1_amd64.tar.zst
"""

LOCAL_LIST = """\
NAME                                                         SIZE
local:vztmpl/alpine-3.20-default_20240908_amd64.tar.xz      3.06MB
"""


@pytest.fixture
def template_provider():
    return TemplateProvider()


@pytest.fixture
def alpine():
    return TemplateRef(storage="local", name="alpine-3.20-default_20240908_amd64.tar.xz")


@pytest.mark.asyncio
class TestTemplateProvider:
    """Test template provider."""

    async def test_initialize(self, template_provider):
        config = LxcConfig(template_storage="nfs-templates", template_pattern="debian-12")

        await template_provider.initialize(config)

        assert template_provider.storage == "nfs-templates"
        assert template_provider.pattern == "debian-12"

    async def test_latest_picks_highest_version(self, template_provider):
        with patch("pvelxc.providers.template.run_command", new_callable=AsyncMock) as mock_run:
            mock_run.return_value = CommandResult(returncode=0, stdout=AVAILABLE)
            name = await template_provider.latest()

        assert name == "alpine-3.20-default_20240908_amd64.tar.xz"
        mock_run.assert_called_once_with(["pveam", "available"], check=False)

    async def test_latest_without_match(self, template_provider):
        with patch("pvelxc.providers.template.run_command", new_callable=AsyncMock) as mock_run:
            mock_run.return_value = CommandResult(returncode=0, stdout="system debian-12-standard_12.7-1_amd64.tar.zst\n")
            with pytest.raises(TemplateNotFoundError) as exc_info:
                await template_provider.latest()

        assert str(exc_info.value) == "No Alpine templates found in repository"

    async def test_resolve_uses_template_url(self, template_provider):
        template_provider.template_url = "https://mirror.example.com/images/alpine-3.21-custom_amd64.tar.xz"

        with patch("pvelxc.providers.template.run_command", new_callable=AsyncMock) as mock_run:
            ref = await template_provider.resolve()

        mock_run.assert_not_called()
        assert ref == TemplateRef(storage="local", name="alpine-3.21-custom_amd64.tar.xz")

    async def test_refresh_failure_is_warning(self, template_provider):
        with patch("pvelxc.providers.template.run_command", new_callable=AsyncMock) as mock_run:
            mock_run.return_value = CommandResult(returncode=1, stderr="download failed")
            outcome = await template_provider.refresh()

        assert outcome.status == StepStatus.WARNING

    async def test_status(self, template_provider, alpine):
        other = TemplateRef(storage="local", name="alpine-3.19-default_20240207_amd64.tar.xz")

        with patch("pvelxc.providers.template.run_command", new_callable=AsyncMock) as mock_run:
            mock_run.return_value = CommandResult(returncode=0, stdout=LOCAL_LIST)
            assert await template_provider.status(alpine) == ProviderStatus.PRESENT
            assert await template_provider.status(other) == ProviderStatus.ABSENT

            mock_run.return_value = CommandResult(returncode=2, stderr="storage 'local' does not exist")
            assert await template_provider.status(alpine) == ProviderStatus.ERROR

    async def test_present_skips_cached_template(self, template_provider, alpine):
        with patch("pvelxc.providers.template.run_command", new_callable=AsyncMock) as mock_run:
            mock_run.return_value = CommandResult(returncode=0, stdout=LOCAL_LIST)
            await template_provider.present(alpine)

        mock_run.assert_called_once_with(["pveam", "list", "local"], check=False)

    async def test_present_downloads_from_catalog(self, template_provider, alpine):
        with patch("pvelxc.providers.template.run_command", new_callable=AsyncMock) as mock_run:
            mock_run.side_effect = [
                CommandResult(returncode=0, stdout="NAME SIZE\n"),
                CommandResult(returncode=0),
            ]
            await template_provider.present(alpine)

        assert mock_run.call_args.args[0] == ["pveam", "download", "local", alpine.name]

    async def test_present_downloads_from_url(self, template_provider):
        template_provider.template_url = "https://mirror.example.com/alpine-3.21-custom_amd64.tar.xz"
        ref = TemplateRef(storage="local", name="alpine-3.21-custom_amd64.tar.xz")

        with patch("pvelxc.providers.template.run_command", new_callable=AsyncMock) as mock_run, \
             patch.object(TemplateProvider, "node_name", return_value="pve1"):
            mock_run.side_effect = [
                CommandResult(returncode=0, stdout="NAME SIZE\n"),
                CommandResult(returncode=0),
            ]
            await template_provider.present(ref)

        assert mock_run.call_args.args[0] == [
            "pvesh", "create", "/nodes/pve1/storage/local/download-url",
            "--content", "vztmpl",
            "--filename", "alpine-3.21-custom_amd64.tar.xz",
            "--url", "https://mirror.example.com/alpine-3.21-custom_amd64.tar.xz",
        ]

    async def test_download_failure_cleans_up(self, template_provider, alpine):
        with patch("pvelxc.providers.template.run_command", new_callable=AsyncMock) as mock_run:
            mock_run.side_effect = [
                CommandResult(returncode=0, stdout="NAME SIZE\n"),
                CommandResult(returncode=1, stderr="500 Can't connect"),
                CommandResult(returncode=0),
            ]
            with pytest.raises(TemplateDownloadError):
                await template_provider.present(alpine)

        assert mock_run.call_args.args[0] == ["pveam", "remove", alpine.volid]

    async def test_download_timeout_cleans_up(self, template_provider, alpine):
        with patch("pvelxc.providers.template.run_command", new_callable=AsyncMock) as mock_run:
            mock_run.side_effect = [
                CommandResult(returncode=0, stdout="NAME SIZE\n"),
                subprocess.TimeoutExpired(["pveam", "download", "local", alpine.name], 900),
                CommandResult(returncode=0),
            ]
            with pytest.raises(TemplateDownloadError):
                await template_provider.present(alpine)

        assert mock_run.call_args.args[0] == ["pveam", "remove", alpine.volid]

    async def test_validate_spec(self, template_provider, alpine):
        assert await template_provider.validate_spec(alpine) is True
        assert await template_provider.validate_spec(TemplateRef(storage="local", name="alpine.iso")) is False


def test_name_from_url():
    assert TemplateProvider.name_from_url(
        "https://mirror.example.com/images/alpine-3.21-custom_amd64.tar.zst?token=1"
    ) == "alpine-3.21-custom_amd64.tar.zst"

    with pytest.raises(ConfigError):
        TemplateProvider.name_from_url("https://example.com/index.html")
