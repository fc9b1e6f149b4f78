"""
Dashboard View

Joins devices with their latest stat sample and keeps a live copy of the
topology up to date from the store's change feed.
"""

from __future__ import annotations

import logging

from pydantic import ValidationError

from .models.device import DeviceView, StatSample
from .models.link import Link
from .models.topology import ChangeEvent, ChangeOp, ChangeTable, Topology, TopologySummary
from .store import TopologyStore

logger = logging.getLogger(__name__)


async def load_topology(store: TopologyStore) -> Topology:
    """Fetch all devices (joined with their latest sample) and all links."""
    devices = await store.list_devices()
    latest = await store.latest_stats([device.id for device in devices])
    links = await store.list_links()

    return Topology(
        devices=[DeviceView.from_rows(device, latest.get(device.id)) for device in devices],
        links=links,
    )


def summarize(devices: list[DeviceView], links: list[Link]) -> TopologySummary:
    """Header stats: device counts by status, total bandwidth, mean utilization."""
    counts = {"up": 0, "warning": 0, "down": 0}
    for device in devices:
        counts[device.status.value] += 1

    avg_utilization = (
        sum(link.utilization for link in links) / len(links) if links else 0.0
    )

    return TopologySummary(
        total_devices=len(devices),
        devices_up=counts["up"],
        devices_warning=counts["warning"],
        devices_down=counts["down"],
        total_bandwidth=sum(link.bandwidth for link in links),
        avg_utilization=avg_utilization,
    )


class TopologyView:
    """Live, in-memory copy of the topology shown to dashboard clients."""

    def __init__(self):
        self.devices: list[DeviceView] = []
        self.links: list[Link] = []

    async def refresh(self, store: TopologyStore) -> None:
        """Re-fetch everything. On failure the previous state is kept."""
        topology = await load_topology(store)
        self.devices = topology.devices
        self.links = topology.links

    async def apply(self, change: ChangeEvent, store: TopologyStore) -> None:
        """
        Apply one change event.

        New stat samples are merged into the matching device; any other
        change to devices or links triggers a full re-fetch.
        """
        if change.table == ChangeTable.DEVICE_STATS:
            if change.op != ChangeOp.INSERT:
                return
            try:
                sample = StatSample.model_validate(change.row)
            except ValidationError as e:
                logger.warning("Ignoring malformed stats row: %s", e)
                return
            self.merge_sample(sample)
            return

        await self.refresh(store)

    def merge_sample(self, sample: StatSample) -> bool:
        """Merge a sample into its device. Returns False for unknown devices."""
        for device in self.devices:
            if device.id == sample.device_id:
                device.apply_sample(sample)
                return True
        logger.debug("Sample for unknown device %s ignored", sample.device_id)
        return False

    def snapshot(self) -> Topology:
        return Topology(devices=list(self.devices), links=list(self.links))

    def summary(self) -> TopologySummary:
        return summarize(self.devices, self.links)


# Singleton instance
topology_view = TopologyView()
