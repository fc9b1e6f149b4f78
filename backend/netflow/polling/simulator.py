"""Simulated SNMP responses for NetFlow Monitor.

No packets are sent. Each device gets a baseline load derived from the
last octet of its address, with random jitter on top.
"""

from __future__ import annotations

import random
from dataclasses import dataclass

from ..config import LinkThresholds
from ..models.device import DeviceStatus
from ..models.link import LinkStatus


@dataclass
class SimulatedSample:
    """Values a single simulated SNMP poll produces for a device."""

    status: DeviceStatus
    uptime: str
    cpu: float
    memory: float
    traffic_in: float  # Mbps
    traffic_out: float  # Mbps

    @property
    def throughput(self) -> float:
        """Mean of inbound and outbound traffic."""
        return (self.traffic_in + self.traffic_out) / 2


def address_seed(ip: str) -> int:
    """Seed taken from the trailing segment of an address, 1 if not numeric."""
    try:
        return int(ip.rsplit(".", 1)[-1])
    except ValueError:
        return 1


def baseline_load(seed: int) -> int:
    """Deterministic baseline load percentage for a seed."""
    return (seed * 7) % 60


def random_status(rng: random.Random) -> DeviceStatus:
    """Weighted draw: roughly 90% up, the rest split between warning and down."""
    if rng.randint(1, 100) > 10:
        return DeviceStatus.UP
    return DeviceStatus.WARNING if rng.randint(1, 100) > 50 else DeviceStatus.DOWN


def _percent(value: float) -> float:
    return float(min(100, max(0, value)))


def simulate_sample(
    ip: str,
    community: str = "public",
    rng: random.Random | None = None,
) -> SimulatedSample:
    """Fabricate one poll result for the device at ``ip``.

    ``community`` is accepted for parity with a real SNMP client and is not
    used by the simulation.
    """
    rng = rng or random.Random()
    base = baseline_load(address_seed(ip))

    return SimulatedSample(
        status=random_status(rng),
        uptime=f"{rng.randint(1, 90)}d {rng.randint(0, 23)}h",
        cpu=_percent(base + rng.randint(-5, 15)),
        memory=_percent(base + rng.randint(0, 20)),
        traffic_in=rng.randint(100, 900),
        traffic_out=rng.randint(100, 900),
    )


def link_health(
    bandwidth: float,
    max_bandwidth: float,
    thresholds: LinkThresholds | None = None,
) -> LinkStatus:
    """Health tier for a link given its current throughput and capacity."""
    thresholds = thresholds or LinkThresholds()
    utilization = bandwidth / max_bandwidth * 100 if max_bandwidth > 0 else 0.0

    if utilization > thresholds.critical:
        return LinkStatus.CRITICAL
    elif utilization > thresholds.warning:
        return LinkStatus.WARNING
    return LinkStatus.HEALTHY
