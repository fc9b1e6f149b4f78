"""
Poll Cycle

Fabricates a stat sample for every device, appends it to the store and
recomputes bandwidth and health for each link touching the device.
"""

from __future__ import annotations

import logging
import random

from ..config import LinkThresholds, config
from ..models.device import Device, StatSample
from ..models.topology import PollResult
from ..store import StoreError, TopologyStore
from .simulator import SimulatedSample, link_health, simulate_sample

logger = logging.getLogger(__name__)


async def run_poll_cycle(
    store: TopologyStore,
    rng: random.Random | None = None,
    thresholds: LinkThresholds | None = None,
) -> PollResult:
    """
    Poll every device in the store once.

    Devices are processed sequentially. A failure to list devices aborts
    the cycle with ``StoreError``; a failed write for one device is logged
    and the remaining devices are still polled.
    """
    thresholds = thresholds or config.link_thresholds
    rng = rng or random.Random()

    devices = await store.list_devices()
    logger.info("Polling %d devices...", len(devices))

    failures: list[str] = []
    for device in devices:
        sample = simulate_sample(device.ip, device.snmp_community, rng)
        saved = await _save_sample(store, device, sample)
        if saved is None:
            logger.debug("Device %s was removed during the poll, skipping", device.id)
            continue
        if not saved:
            failures.append(device.id)
        if not await _update_links(store, device, sample, thresholds):
            if device.id not in failures:
                failures.append(device.id)

    if failures:
        logger.warning("Poll cycle finished with %d failed devices", len(failures))
    return PollResult(polled=len(devices), failures=failures)


async def _save_sample(store: TopologyStore, device: Device, sample: SimulatedSample) -> bool | None:
    """Returns None when the device no longer exists."""
    try:
        saved = await store.insert_stat(
            StatSample(
                device_id=device.id,
                status=sample.status,
                uptime=sample.uptime,
                cpu=sample.cpu,
                memory=sample.memory,
            )
        )
    except StoreError as e:
        logger.error("Error saving stats for device %s: %s", device.id, e)
        return False
    return None if saved is None else True


async def _update_links(
    store: TopologyStore,
    device: Device,
    sample: SimulatedSample,
    thresholds: LinkThresholds,
) -> bool:
    try:
        links = await store.links_for_device(device.id)
    except StoreError as e:
        logger.error("Error fetching links for device %s: %s", device.id, e)
        return False

    ok = True
    bandwidth = sample.throughput
    for link in links:
        status = link_health(bandwidth, link.max_bandwidth, thresholds)
        try:
            await store.update_link(link.id, bandwidth=bandwidth, status=status)
        except StoreError as e:
            logger.error("Error updating link %s for device %s: %s", link.id, device.id, e)
            ok = False
    return ok
