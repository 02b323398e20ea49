"""Container specification models."""

from pydantic import BaseModel, ConfigDict, Field

from pvelxc.models.config import LxcConfig
from pvelxc.models.template import TemplateRef


class ContainerSpec(BaseModel):
    """Parameters of the single pct create call."""
    model_config = ConfigDict(frozen=True)

    vmid: int = Field(..., ge=100)
    hostname: str
    password: str
    template: TemplateRef
    tags: str = ""
    bridge: str = "vmbr0"
    storage: str = "local-lvm"
    disk: int = Field(default=32, ge=1)
    cores: int = Field(default=2, ge=1)
    memory: int = Field(default=2048, ge=16)
    swap: int = Field(default=512, ge=0)
    ostype: str = "alpine"
    features: str = "keyctl=1,nesting=1"
    unprivileged: bool = True

    @classmethod
    def from_config(cls, vmid: int, template: TemplateRef, config: LxcConfig) -> "ContainerSpec":
        return cls(
            vmid=vmid,
            hostname=config.hostname,
            password=config.root_password,
            template=template,
            tags=config.tags,
            bridge=config.bridge,
            storage=config.storage,
            disk=config.disk,
            cores=config.cpu,
            memory=config.ram,
            swap=config.swap,
        )

    def with_vmid(self, vmid: int) -> "ContainerSpec":
        return self.model_copy(update={"vmid": vmid})

    @property
    def net0(self) -> str:
        return f"name=eth0,bridge={self.bridge},firewall=1,ip=dhcp,ip6=dhcp"

    @property
    def rootfs(self) -> str:
        return f"{self.storage}:{self.disk}"
