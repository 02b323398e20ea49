"""Configuration models."""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


DEFAULT_TEMPLATE_PATTERN = r"alpine-3\.[0-9]+-default.*amd64"


class LxcConfig(BaseModel):
    """Flat provisioning configuration, read once at startup."""
    model_config = ConfigDict(extra="ignore", frozen=True)

    # General
    attended: bool = Field(default=True)
    hostname: str = Field(default="alpine-docker")
    vmid: Optional[int] = Field(default=None, ge=100)
    root_password: str = Field(default="changeme123")
    tags: str = Field(default="alpine;docker")

    # Email
    smtp_enabled: bool = Field(default=False)
    smtp_server: str = Field(default="smtp.gmail.com")
    smtp_port: int = Field(default=587, ge=1, le=65535)
    smtp_user: str = Field(default="your-email@gmail.com")
    smtp_password: str = Field(default="your-app-password")
    smtp_from: str = Field(default="your-email@gmail.com")
    smtp_to: str = Field(default="recipient@example.com")

    # Resources
    cpu: int = Field(default=2, ge=1)
    ram: int = Field(default=2048, ge=16)
    swap: int = Field(default=512, ge=0)
    disk: int = Field(default=32, ge=1)
    storage: str = Field(default="local-lvm")

    # Network
    bridge: str = Field(default="vmbr0")

    # SSH
    ssh_public_key: str = Field(default="")

    # Template
    template_storage: str = Field(default="local")
    template_url: str = Field(default="")
    template_pattern: str = Field(default=DEFAULT_TEMPLATE_PATTERN)

    # Tuning
    vmid_floor: int = Field(default=100, ge=100)
    ready_timeout: int = Field(default=60, ge=0)
    settle_delay: int = Field(default=5, ge=0)
    create_attempts: int = Field(default=3, ge=1)
    report_dir: str = Field(default="")
    lxc_config_dir: str = Field(default="/etc/pve/lxc")
    log_level: str = Field(default="INFO")

    @field_validator("hostname")
    @classmethod
    def validate_hostname(cls, v):
        """Hostname is the only setting without a usable default."""
        v = v.strip()
        if not v:
            raise ValueError("hostname is required in configuration")
        return v

    @field_validator("vmid", mode="before")
    @classmethod
    def empty_vmid_is_auto(cls, v):
        """An empty vmid selects the next free ID."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}")
        return v.upper()

    @property
    def ssh_key_installed(self) -> bool:
        return bool(self.ssh_public_key.strip())

    @property
    def unattended(self) -> bool:
        return not self.attended
