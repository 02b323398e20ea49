"""Configuration file management."""

import asyncio
import logging
import shlex
from pathlib import Path
from typing import Dict, Any, List, Optional

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError
from pydantic import ValidationError

from pvelxc.errors import ConfigError
from pvelxc.models.config import LxcConfig


logger = logging.getLogger(__name__)

DEFAULT_CONFIG_NAME = "create-lxc.conf"

DEFAULT_CONFIG = """\
# Proxmox Alpine LXC Configuration

# General Settings
attended=1                      # 1 for attended, 0 for unattended
hostname="alpine-docker"        # LXC hostname
vmid=""                        # Leave empty for auto-select
root_password="changeme123"    # Root password
tags="alpine;docker"           # Proxmox tags

# Email Settings
smtp_enabled=0                 # 1 to enable email notifications
smtp_server="smtp.gmail.com"
smtp_port=587
smtp_user="your-email@gmail.com"
smtp_password="your-app-password"
smtp_from="your-email@gmail.com"
smtp_to="recipient@example.com"

# Resource Settings
cpu=2                          # Number of CPU cores
ram=2048                       # RAM in MB
swap=512                       # Swap in MB
disk=32                        # Disk size in GB
storage="local-lvm"            # Storage pool (local-lvm, local-zfs, etc.)

# Network Settings
bridge="vmbr0"                 # Network bridge
# nameserver="1.1.1.1"         # DNS server (not applied automatically)
# searchdomain="lan"           # DNS search domain (not applied automatically)

# SSH Settings
ssh_public_key=""              # SSH public key for root

# Template Settings
template_storage="local"       # Storage for template
template_url=""                # Leave empty to download latest
# template_pattern="alpine-3\\.[0-9]+-default.*amd64"

# Startup / HA (informational, configure through Proxmox)
# startup="order=1,up=30"
# ha_group=""

# Advanced Settings
# vmid_floor=100               # Lowest auto-selected VMID
# ready_timeout=60             # Seconds to wait for the container to answer
# settle_delay=5               # Seconds to wait before reading the IP address
# create_attempts=3            # Retries when an auto-selected VMID collides
# report_dir=""                # Local report directory (default: next to this file)
# lxc_config_dir="/etc/pve/lxc"
# log_level="INFO"
"""


class ConfigManager:
    """Loads the provisioning configuration file."""

    def __init__(self, config_path: Path):
        """Initialize configuration manager."""
        self.config_path = Path(config_path)
        self.yaml = YAML(typ="safe")
        self.config: Optional[LxcConfig] = None

    def exists(self) -> bool:
        return self.config_path.is_file()

    def write_default(self) -> Path:
        """Write the default configuration document."""
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        self.config_path.write_text(DEFAULT_CONFIG)
        logger.info(f"Default configuration created at: {self.config_path}")
        return self.config_path

    def ensure_exists(self) -> bool:
        """Write the default file when missing. Returns True on first run."""
        if self.exists():
            return False
        logger.warning(f"Configuration file not found: {self.config_path}")
        self.write_default()
        return True

    async def load(self) -> LxcConfig:
        """Load and validate the configuration file."""
        if not self.exists():
            raise ConfigError(f"Configuration file not found: {self.config_path}")

        logger.info(f"Loading configuration from {self.config_path}")
        content = await asyncio.to_thread(self.config_path.read_text)

        if self.config_path.suffix in (".yaml", ".yml"):
            data = self._parse_yaml(content)
        else:
            data = self.parse_key_values(content)

        try:
            self.config = LxcConfig(**data)
        except ValidationError as e:
            raise ConfigError(self._format_validation_error(e)) from e

        logger.debug(f"Loaded configuration for {self.config.hostname}")
        return self.config

    def parse_key_values(self, content: str) -> Dict[str, Any]:
        """Parse shell-style key=value lines."""
        data: Dict[str, Any] = {}
        for lineno, line in enumerate(content.splitlines(), start=1):
            try:
                tokens = self._split_line(line)
            except ValueError as e:
                raise ConfigError(f"{self.config_path}:{lineno}: {e}") from e

            if tokens and tokens[0] == "export":
                tokens = tokens[1:]
            if not tokens:
                continue

            if len(tokens) != 1 or "=" not in tokens[0]:
                raise ConfigError(
                    f"{self.config_path}:{lineno}: expected key=value, got {line.strip()!r}"
                )

            key, value = tokens[0].split("=", 1)
            if not key.isidentifier():
                raise ConfigError(f"{self.config_path}:{lineno}: invalid key {key!r}")
            data[key] = value

        return data

    @staticmethod
    def _split_line(line: str) -> List[str]:
        """Split one line like the shell: `#` starts a comment only at the start of a word."""
        lexer = shlex.shlex(line, posix=True)
        lexer.whitespace_split = True
        lexer.commenters = ""

        tokens = []
        for token in lexer:
            if token.startswith("#"):
                break
            tokens.append(token)
        return tokens

    def _parse_yaml(self, content: str) -> Dict[str, Any]:
        """Parse a YAML mapping of the same keys."""
        try:
            data = self.yaml.load(content)
        except YAMLError as e:
            raise ConfigError(f"{self.config_path}: {e}") from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError(f"{self.config_path}: expected a mapping of settings")
        # Null values fall back to defaults; a null hostname stays empty so it is rejected
        settings = {key: value for key, value in data.items() if value is not None}
        if "hostname" in data and data["hostname"] is None:
            settings["hostname"] = ""
        return settings

    def _format_validation_error(self, error: ValidationError) -> str:
        problems = []
        for item in error.errors():
            location = ".".join(str(part) for part in item["loc"]) or "config"
            message = item["msg"].removeprefix("Value error, ")
            problems.append(f"{location}: {message}")
        return f"Invalid configuration {self.config_path}: " + "; ".join(problems)
