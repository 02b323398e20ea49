"""In-container configuration sequence."""

import logging
from typing import List, Optional

from pvelxc.guest import assets
from pvelxc.guest.executor import GuestExecutor
from pvelxc.models.config import LxcConfig
from pvelxc.models.report import StepOutcome
from pvelxc.utils.templates import render_template


logger = logging.getLogger(__name__)


class GuestConfigurator:
    """Installs and configures software inside a running Alpine container.

    Every step is best-effort: a failing command is logged and recorded as a
    warning outcome, and the sequence carries on with the next step.
    """

    def __init__(self, executor: GuestExecutor, config: LxcConfig, vmid: int):
        """Initialize configurator."""
        self.executor = executor
        self.config = config
        self.vmid = vmid

    async def configure(self) -> List[StepOutcome]:
        """Run every configuration step in order."""
        outcomes: List[StepOutcome] = []
        outcomes += await self.update_system()
        outcomes.append(await self.install_base_packages())
        outcomes.append(await self.configure_timezone())
        outcomes += await self.install_docker()
        outcomes += await self.install_tailscale()
        outcomes.append(await self.configure_sshd())
        outcomes.append(await self.install_ssh_key())
        outcomes += await self.configure_dropbear()
        outcomes.append(await self.set_terminal())
        outcomes.append(await self.relocate_root_home())
        outcomes.append(await self.set_root_shell())
        outcomes.append(await self.install_oh_my_posh())
        outcomes += await self.install_fonts()
        outcomes.append(await self.install_shell_profile())
        outcomes.append(await self.install_motd())
        return outcomes

    async def _run(self, name: str, *commands: List[str], failure_hint: Optional[str] = None) -> StepOutcome:
        """Run commands in order, stopping at the first failure."""
        for command in commands:
            result = await self.executor.execute(self.vmid, command)
            if not result.ok:
                reason = failure_hint or result.output or f"{' '.join(command)} exited {result.returncode}"
                logger.warning(f"{name} failed: {reason}")
                return StepOutcome.warning(name, reason)
        return StepOutcome.ok(name)

    async def _push(self, name: str, content: str, destination: str, perms: str = "0644") -> StepOutcome:
        result = await self.executor.push(self.vmid, content, destination, perms)
        if not result.ok:
            logger.warning(f"{name}: failed to write {destination}: {result.output}")
            return StepOutcome.warning(name, result.output or f"failed to write {destination}")
        return StepOutcome.ok(name)

    async def update_system(self) -> List[StepOutcome]:
        logger.info("Updating Alpine Linux...")
        return [
            await self._run("apk update", ["apk", "update"]),
            await self._run("apk upgrade", ["apk", "upgrade"]),
        ]

    async def install_base_packages(self) -> StepOutcome:
        logger.info("Installing base packages...")
        return await self._run(
            "base packages", ["apk", "add", "--no-cache", *assets.BASE_PACKAGES]
        )

    async def configure_timezone(self) -> StepOutcome:
        logger.info("Configuring timezone...")
        outcome = await self._run("timezone", ["cp", "/usr/share/zoneinfo/UTC", "/etc/localtime"])
        if not outcome.succeeded:
            return outcome
        return await self._push("timezone", "UTC\n", "/etc/timezone")

    async def install_docker(self) -> List[StepOutcome]:
        logger.info("Installing Docker...")
        installed = await self._run(
            "docker",
            ["apk", "add", "--no-cache", *assets.DOCKER_PACKAGES],
            ["rc-update", "add", "docker", "boot"],
        )
        started = await self._run(
            "docker service",
            ["service", "docker", "start"],
            failure_hint="Docker service failed to start",
        )
        return [installed, started]

    async def install_tailscale(self) -> List[StepOutcome]:
        logger.info("Installing Tailscale...")
        installed = await self._run(
            "tailscale",
            ["apk", "add", "--no-cache", "tailscale"],
            ["rc-update", "add", "tailscale"],
        )
        # Expected to fail until the operator runs `tailscale up`
        logger.info("Starting Tailscale service...")
        started = await self._run(
            "tailscale service",
            ["service", "tailscale", "start"],
            failure_hint="Tailscale service failed to start - this is normal, will need manual configuration",
        )
        return [installed, started]

    async def configure_sshd(self) -> StepOutcome:
        logger.info("Configuring SSH...")
        probe = await self.executor.execute(self.vmid, ["test", "-f", assets.SSHD_CONFIG])
        if not probe.ok:
            logger.warning("SSH config not found - skipping SSH configuration")
            return StepOutcome.skipped("sshd config", "SSH config not found")

        return await self._run(
            "sshd config",
            ["sed", "-i", r"s/^#\?PermitRootLogin.*/PermitRootLogin yes/", assets.SSHD_CONFIG],
            ["sed", "-i", r"s/^#\?PasswordAuthentication.*/PasswordAuthentication yes/", assets.SSHD_CONFIG],
        )

    async def install_ssh_key(self) -> StepOutcome:
        if not self.config.ssh_key_installed:
            return StepOutcome.skipped("ssh key", "no ssh_public_key configured")

        logger.info("Adding SSH public key...")
        outcome = await self._run(
            "ssh key",
            ["mkdir", "-p", "/root/.ssh"],
            ["chmod", "700", "/root/.ssh"],
        )
        if not outcome.succeeded:
            return outcome
        return await self._push(
            "ssh key", self.config.ssh_public_key.strip() + "\n", "/root/.ssh/authorized_keys", "0600"
        )

    async def configure_dropbear(self) -> List[StepOutcome]:
        logger.info("Configuring Dropbear...")
        return [
            await self._run("dropbear", ["rc-update", "add", "dropbear"]),
            await self._run("dropbear service", ["service", "dropbear", "start"]),
        ]

    async def set_terminal(self) -> StepOutcome:
        line = assets.TERM_EXPORT
        return await self._run(
            "terminal type",
            ["sh", "-c", f"grep -qxF '{line}' /etc/profile || echo '{line}' >> /etc/profile"],
        )

    async def relocate_root_home(self) -> StepOutcome:
        logger.info("Setting root default directory...")
        return await self._run(
            "root home",
            ["mkdir", "-p", assets.ROOT_HOME],
            ["usermod", "-d", assets.ROOT_HOME, "root"],
        )

    async def set_root_shell(self) -> StepOutcome:
        logger.info("Configuring bash shell...")
        return await self._run("root shell", ["chsh", "-s", "/bin/bash", "root"])

    async def install_oh_my_posh(self) -> StepOutcome:
        logger.info("Installing Oh My Posh...")
        return await self._run(
            "oh-my-posh",
            ["wget", "-q", assets.OH_MY_POSH_URL, "-O", assets.OH_MY_POSH_PATH],
            ["chmod", "+x", assets.OH_MY_POSH_PATH],
            failure_hint="Failed to download Oh My Posh",
        )

    async def install_fonts(self) -> List[StepOutcome]:
        logger.info("Installing Nerd Fonts...")
        await self.executor.execute(self.vmid, ["mkdir", "-p", assets.FONT_DIR])

        outcomes = []
        archives = []
        for label, url in assets.NERD_FONTS.items():
            archive = f"/tmp/{url.rsplit('/', 1)[-1]}"
            archives.append(archive)
            outcomes.append(await self._run(
                f"font {label}",
                ["wget", "-q", url, "-O", archive],
                ["tar", "-xf", archive, "-C", assets.FONT_DIR],
                failure_hint=f"Failed to download {label} font",
            ))

        await self.executor.execute(self.vmid, ["fc-cache", "-f"])
        await self.executor.execute(self.vmid, ["rm", "-f", *archives])
        return outcomes

    async def install_shell_profile(self) -> StepOutcome:
        logger.info("Configuring custom shell prompt...")
        for destination, content, perms in (
            (assets.PROMPT_PATH, render_template(assets.PROMPT_SCRIPT), "0755"),
            (assets.BASHRC_PATH, render_template(assets.BASHRC, editor="vim"), "0644"),
            (assets.THEME_PATH, assets.OH_MY_POSH_THEME, "0644"),
        ):
            outcome = await self._push("shell profile", content, destination, perms)
            if not outcome.succeeded:
                return outcome
        return StepOutcome.ok("shell profile")

    async def install_motd(self) -> StepOutcome:
        logger.info("Creating custom MOTD...")
        script = render_template(assets.MOTD_SCRIPT, interface="eth0")
        outcome = await self._push("motd", script, assets.MOTD_PATH, "0755")
        if not outcome.succeeded:
            return outcome
        return await self._run("motd", ["sh", "-c", ": > /etc/motd"])
