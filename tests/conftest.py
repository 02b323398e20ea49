"""Shared fixtures."""

from typing import Dict, List, Optional, Tuple

import pytest

from pvelxc.guest.executor import GuestExecutor
from pvelxc.models.config import LxcConfig
from pvelxc.utils.commands import CommandResult


class FakeExecutor(GuestExecutor):
    """In-memory guest that records commands and pushed files."""

    def __init__(self):
        self.commands: List[List[str]] = []
        self.files: Dict[str, Tuple[str, Optional[str]]] = {}
        self.entered: List[int] = []
        self._results: Dict[Tuple[str, ...], CommandResult] = {}

    def respond(self, *prefix: str, returncode: int = 0, stdout: str = "", stderr: str = ""):
        """Return a canned result for commands starting with prefix."""
        self._results[prefix] = CommandResult(returncode=returncode, stdout=stdout, stderr=stderr)

    def fail(self, *prefix: str, stderr: str = "failed"):
        self.respond(*prefix, returncode=1, stderr=stderr)

    def ran(self, *prefix: str) -> bool:
        return any(tuple(cmd[:len(prefix)]) == prefix for cmd in self.commands)

    async def execute(self, vmid, command):
        self.commands.append(list(command))
        # Longest matching prefix wins
        for prefix in sorted(self._results, key=len, reverse=True):
            if tuple(command[:len(prefix)]) == prefix:
                return self._results[prefix]
        return CommandResult(returncode=0)

    async def push(self, vmid, content, destination, perms=None):
        self.files[destination] = (content, perms)
        return CommandResult(returncode=0)

    def enter(self, vmid):
        self.entered.append(vmid)
        return 0


@pytest.fixture
def fake_executor():
    """Guest executor that never touches a real container."""
    return FakeExecutor()


@pytest.fixture
def config(tmp_path):
    """Configuration with no waiting and a temporary lxc config dir."""
    return LxcConfig(
        hostname="test-alpine",
        root_password="secret-pw",
        ready_timeout=0,
        settle_delay=0,
        lxc_config_dir=str(tmp_path / "lxc"),
        report_dir=str(tmp_path / "reports"),
    )


@pytest.fixture
def executor_factory():
    """For tests that need more than one independent guest."""
    return FakeExecutor
