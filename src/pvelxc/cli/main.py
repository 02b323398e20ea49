"""Main CLI implementation using Typer."""

from pathlib import Path
from typing import Optional, Callable, Any

import typer
from rich.console import Console

from pvelxc.cli.commands import (
    create_container,
    init_config,
    validate_config,
    next_vmid,
    latest_template,
)
from pvelxc.errors import ProvisionError
from pvelxc.provision.main import default_config_path
from pvelxc.provision.vmid import DEFAULT_FLOOR
from pvelxc.utils.logging import setup_logging


# Create Typer app
app = typer.Typer(
    name="pvelxc",
    help="Provision Alpine Linux LXC containers with Docker and Tailscale on Proxmox VE",
    add_completion=False,
)

# Console for rich output
console = Console()


def _run_cli_command(handler: Callable[..., Any], **kwargs: Any):
    """Helper to run a CLI command with error handling."""
    try:
        handler(**kwargs)
    except ProvisionError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e


def _config_option():
    return typer.Option(
        None, "--config", "-c", help="Configuration file (default: ./create-lxc.conf or $PVELXC_CONFIG)"
    )


@app.callback()
def main_callback(
    ctx: typer.Context,
    log_level: Optional[str] = typer.Option(
        None, "--log-level", "-l", help="Logging level (default: config log_level or INFO)"
    ),
):
    """Alpine LXC provisioning for Proxmox VE."""
    ctx.obj = {"log_level": log_level}
    setup_logging(log_level or "INFO")


@app.command("create")
def create_command(
    ctx: typer.Context,
    config: Optional[Path] = _config_option(),
    attended: Optional[bool] = typer.Option(
        None, "--attended/--unattended", help="Override the attended setting"
    ),
):
    """Create and configure a container."""
    _run_cli_command(
        create_container,
        config_path=config or default_config_path(),
        attended=attended,
        log_level=(ctx.obj or {}).get("log_level"),
    )


# Config subcommands
config_app = typer.Typer(help="Configuration commands")
app.add_typer(config_app, name="config")


@config_app.command("init")
def config_init_command(
    config: Optional[Path] = _config_option(),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing file"),
):
    """Write the default configuration file."""
    _run_cli_command(init_config, config_path=config or default_config_path(), force=force)


@config_app.command("validate")
def config_validate_command(
    config: Optional[Path] = _config_option(),
):
    """Validate the configuration file."""
    _run_cli_command(validate_config, config_path=config or default_config_path())


# VMID subcommands
vmid_app = typer.Typer(help="VMID commands")
app.add_typer(vmid_app, name="vmid")


@vmid_app.command("next")
def vmid_next_command(
    floor: int = typer.Option(DEFAULT_FLOOR, "--floor", help="Lowest VMID to consider"),
):
    """Show the next unused VMID."""
    _run_cli_command(next_vmid, floor=floor)


# Template subcommands
template_app = typer.Typer(help="Template commands")
app.add_typer(template_app, name="template")


@template_app.command("latest")
def template_latest_command(
    pattern: Optional[str] = typer.Option(None, "--pattern", "-p", help="Template name regex"),
):
    """Show the newest matching template in the catalog."""
    _run_cli_command(latest_template, pattern=pattern)


def main():
    """Main entry point for CLI."""
    app()
