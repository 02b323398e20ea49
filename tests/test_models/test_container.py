"""Tests for container and template models."""

import pytest
from pydantic import ValidationError

from pvelxc.models.config import LxcConfig
from pvelxc.models.container import ContainerSpec
from pvelxc.models.template import TemplateRef


@pytest.fixture
def template():
    return TemplateRef(storage="local", name="alpine-3.20-default_20240908_amd64.tar.xz")


def test_template_volid(template):
    assert template.volid == "local:vztmpl/alpine-3.20-default_20240908_amd64.tar.xz"


class TestContainerSpec:
    """Test ContainerSpec model."""

    def test_from_config(self, template):
        config = LxcConfig(hostname="web01", cpu=4, ram=1024, swap=256, disk=8, storage="local-zfs", bridge="vmbr1")

        spec = ContainerSpec.from_config(105, template, config)

        assert spec.vmid == 105
        assert spec.hostname == "web01"
        assert spec.password == "changeme123"
        assert spec.cores == 4
        assert spec.memory == 1024
        assert spec.swap == 256
        assert spec.tags == "alpine;docker"
        assert spec.rootfs == "local-zfs:8"
        assert spec.net0 == "name=eth0,bridge=vmbr1,firewall=1,ip=dhcp,ip6=dhcp"
        assert spec.unprivileged is True
        assert spec.features == "keyctl=1,nesting=1"
        assert spec.ostype == "alpine"

    def test_with_vmid(self, template):
        spec = ContainerSpec.from_config(100, template, LxcConfig())

        moved = spec.with_vmid(101)

        assert moved.vmid == 101
        assert spec.vmid == 100
        assert moved.hostname == spec.hostname

    def test_vmid_floor(self, template):
        with pytest.raises(ValidationError):
            ContainerSpec(vmid=42, hostname="x", password="p", template=template)
