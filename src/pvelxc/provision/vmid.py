"""Container ID allocation."""

import json
import logging
from typing import Iterable, Optional, Set

from pvelxc.models.config import LxcConfig
from pvelxc.utils.commands import run_command


logger = logging.getLogger(__name__)

DEFAULT_FLOOR = 100


class VmidAllocator:
    """Finds an unused VMID by scanning the IDs the cluster knows about.

    There is no reservation: another actor may claim the returned ID before
    the container is created, so the container provider retries creation with
    a fresh ID when that happens.
    """

    def __init__(self, floor: int = DEFAULT_FLOOR):
        self.floor = floor

    async def allocate(self, config: Optional[LxcConfig] = None, exclude: Iterable[int] = ()) -> int:
        """Return the configured VMID, or the first free one at or above the floor."""
        if config is not None and config.vmid is not None:
            logger.info(f"Using configured VMID: {config.vmid}")
            return config.vmid

        floor = config.vmid_floor if config is not None else self.floor
        used = await self.existing_ids()
        used.update(exclude)

        vmid = floor
        while vmid in used:
            vmid += 1

        logger.info(f"Auto-selected VMID: {vmid}")
        return vmid

    async def existing_ids(self) -> Set[int]:
        """IDs of all guests known to the cluster."""
        ids = await self._ids_from_cluster_resources()
        if ids is not None:
            return ids
        logger.debug("Cluster resource query unavailable, falling back to pct/qm listings")
        return await self._ids_from_listings()

    async def _ids_from_cluster_resources(self) -> Optional[Set[int]]:
        result = await run_command(
            ["pvesh", "get", "/cluster/resources", "--type", "vm", "--output-format", "json"],
            check=False,
        )
        if not result.ok:
            return None

        try:
            resources = json.loads(result.stdout or "[]")
        except json.JSONDecodeError as e:
            logger.warning(f"Unparseable cluster resource listing: {e}")
            return None

        ids = set()
        for resource in resources:
            vmid = resource.get("vmid") if isinstance(resource, dict) else None
            if vmid is not None:
                ids.add(int(vmid))
        return ids

    async def _ids_from_listings(self) -> Set[int]:
        ids: Set[int] = set()
        for cmd in (["pct", "list"], ["qm", "list"]):
            result = await run_command(cmd, check=False)
            if not result.ok:
                continue
            for line in result.stdout.splitlines():
                fields = line.split()
                if fields and fields[0].isdigit():
                    ids.add(int(fields[0]))
        return ids
