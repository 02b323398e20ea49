"""Command implementations for CLI."""

import asyncio
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table
from rich.progress import Progress, SpinnerColumn, TextColumn

from pvelxc.models.report import RunSummary, StepStatus
from pvelxc.providers.template import TemplateProvider
from pvelxc.provision.config import ConfigManager
from pvelxc.provision.main import Provisioner
from pvelxc.provision.vmid import VmidAllocator


console = Console()

SECRET_FIELDS = {"root_password", "smtp_password"}


def _with_spinner(description: str, coro):
    """Run a coroutine behind a progress spinner."""
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task(description, total=None)
        result = asyncio.run(coro)
        progress.update(task, completed=True)
    return result


def show_summary(summary: RunSummary):
    """Render step outcomes, warnings first."""
    table = Table(title=f"Provisioning steps for {summary.hostname} ({summary.vmid})")
    table.add_column("Step", style="cyan")
    table.add_column("Result")
    table.add_column("Detail", style="dim", max_width=60)

    styles = {
        StepStatus.OK: "[green]✓ ok[/green]",
        StepStatus.WARNING: "[yellow]! warning[/yellow]",
        StepStatus.SKIPPED: "[dim]- skipped[/dim]",
    }
    for outcome in summary.outcomes:
        table.add_row(outcome.name, styles[outcome.status], outcome.reason or "")

    console.print(table)


def create_container(
    config_path: Path,
    attended: Optional[bool] = None,
    log_level: Optional[str] = None,
):
    """Provision a container from the configuration file."""
    provisioner = Provisioner(config_path=config_path, attended=attended, log_level=log_level)
    summary = asyncio.run(provisioner.run())

    if summary is None:
        console.print(f"[green]✓[/green] Default configuration created at: {provisioner.config_manager.config_path}")
        console.print("Please edit the configuration and run the command again.")
        return

    console.print(summary.report, markup=False, highlight=False)
    show_summary(summary)

    if summary.succeeded_with_warnings:
        console.print(
            f"[yellow]![/yellow] Container '{summary.hostname}' (VMID: {summary.vmid}) "
            f"created with {len(summary.warnings)} warning(s)"
        )
    else:
        console.print(
            f"[green]✓[/green] Alpine LXC container '{summary.hostname}' (VMID: {summary.vmid}) created successfully!"
        )

    if provisioner.config.attended:
        console.print()
        if typer.confirm("Would you like to enter the container now?", default=False):
            console.print("Entering container...")
            provisioner.executor.enter(summary.vmid)


def init_config(config_path: Path, force: bool = False):
    """Write the default configuration file."""
    manager = ConfigManager(config_path)
    if manager.exists() and not force:
        console.print(f"[yellow]![/yellow] {config_path} already exists (use --force to overwrite)")
        raise typer.Exit(1)

    manager.write_default()
    console.print(f"[green]✓[/green] Default configuration created at: {config_path}")


def validate_config(config_path: Path):
    """Load the configuration and show the effective settings."""
    manager = ConfigManager(config_path)
    config = _with_spinner("Validating configuration...", manager.load())

    table = Table(title=f"Configuration {config_path}")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")

    for name, value in config.model_dump().items():
        if name in SECRET_FIELDS and value:
            value = "********"
        elif value is None:
            value = "(auto)"
        table.add_row(name, str(value))

    console.print(table)
    console.print("[green]✓[/green] Configuration is valid")


def next_vmid(floor: int):
    """Print the next unused VMID."""
    vmid = _with_spinner("Scanning cluster resources...", VmidAllocator(floor).allocate())
    console.print(vmid)


def latest_template(pattern: Optional[str] = None):
    """Print the newest matching template in the catalog."""
    provider = TemplateProvider()
    name = _with_spinner("Searching template catalog...", provider.latest(pattern))
    console.print(name)
