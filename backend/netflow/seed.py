"""Seed the store with the demo topology from topology.yaml."""

import logging
import uuid
from typing import Any, Optional

from .config import get_topology_config
from .models.device import Device, DeviceType
from .models.link import Link
from .store import TopologyStore

logger = logging.getLogger(__name__)


async def seed_topology(store: TopologyStore, topo_config: Optional[dict[str, Any]] = None) -> int:
    """
    Insert the seed devices and links if the store has no devices yet.

    Returns the number of devices inserted.
    """
    if topo_config is None:
        topo_config = get_topology_config()

    if await store.list_devices():
        return 0

    device_ids: dict[str, str] = {}
    for key, device_config in topo_config.get("devices", {}).items():
        device = Device(
            id=str(uuid.uuid4()),
            name=device_config.get("name", key),
            ip=device_config["ip"],
            type=DeviceType(device_config.get("type", "router")),
            snmp_community=device_config.get("snmp_community", "public"),
            x=device_config["x"],
            y=device_config["y"],
        )
        await store.insert_device(device)
        device_ids[key] = device.id

    link_count = 0
    for link_config in topo_config.get("links", []):
        source = device_ids.get(link_config["source"])
        target = device_ids.get(link_config["target"])
        if not source or not target:
            logger.warning(
                "Skipping seed link %s -> %s: unknown device",
                link_config["source"],
                link_config["target"],
            )
            continue

        await store.insert_link(
            Link(
                id=str(uuid.uuid4()),
                source_device_id=source,
                target_device_id=target,
                max_bandwidth=link_config.get("max_bandwidth", 1000),
            )
        )
        link_count += 1

    logger.info("Seeded topology with %d devices and %d links", len(device_ids), link_count)
    return len(device_ids)
