"""Canvas scene building and pointer hit-testing for the topology view."""

from __future__ import annotations

import math
from typing import Iterable, Optional

from .config import CanvasConfig, LinkThresholds
from .models.device import DeviceStatus, DeviceView
from .models.link import Link, LinkStatus
from .models.topology import Point, Scene, SceneEdge, SceneNode
from .polling.simulator import link_health

STATUS_COLORS = {
    DeviceStatus.UP: "#10b981",
    DeviceStatus.WARNING: "#f59e0b",
    DeviceStatus.DOWN: "#ef4444",
}

LINK_COLORS = {
    LinkStatus.HEALTHY: "#10b981",
    LinkStatus.WARNING: "#f59e0b",
    LinkStatus.CRITICAL: "#ef4444",
}


def flow_dots(source: Point, target: Point, frame: int, count: int = 3, steps: int = 10) -> list[Point]:
    """Positions of the dots travelling from source to target at a frame."""
    dx = target.x - source.x
    dy = target.y - source.y
    offset = (frame % steps) / steps

    dots = []
    for i in range(count):
        t = (i / count + offset) % 1
        dots.append(Point(x=source.x + dx * t, y=source.y + dy * t))
    return dots


def bandwidth_label(link: Link) -> str:
    return f"{link.bandwidth:.1f}/{link.max_bandwidth:g} Mbps"


def hit_test(devices: Iterable[DeviceView], x: float, y: float, radius: float = 30) -> Optional[DeviceView]:
    """First device whose circle contains the pointer, if any."""
    for device in devices:
        if math.hypot(device.x - x, device.y - y) <= radius:
            return device
    return None


def build_scene(
    devices: list[DeviceView],
    links: list[Link],
    frame: int = 0,
    canvas: CanvasConfig | None = None,
    thresholds: LinkThresholds | None = None,
) -> Scene:
    """
    Build the drawable scene for one animation frame.

    Link colour uses the same health thresholds as the poll cycle, so a
    link's colour always matches its persisted tier. Links whose endpoints
    are not in ``devices`` are skipped.
    """
    canvas = canvas or CanvasConfig()
    frame = frame % canvas.frame_period
    by_id = {device.id: device for device in devices}

    edges: list[SceneEdge] = []
    for link in links:
        source = by_id.get(link.source_device_id)
        target = by_id.get(link.target_device_id)
        if not source or not target:
            continue

        start = Point(x=source.x, y=source.y)
        end = Point(x=target.x, y=target.y)
        status = link_health(link.bandwidth, link.max_bandwidth, thresholds)
        edges.append(
            SceneEdge(
                id=link.id,
                source=start,
                target=end,
                status=status,
                color=LINK_COLORS[status],
                label=bandwidth_label(link),
                label_position=Point(
                    x=(start.x + end.x) / 2 + 5,
                    y=(start.y + end.y) / 2 - 5,
                ),
                flow_dots=flow_dots(start, end, frame, canvas.flow_dots, canvas.flow_steps),
            )
        )

    nodes = [
        SceneNode(
            id=device.id,
            name=device.name,
            type=device.type,
            status=device.status,
            x=device.x,
            y=device.y,
            radius=canvas.device_radius,
            color=STATUS_COLORS[device.status],
        )
        for device in devices
    ]

    return Scene(width=canvas.width, height=canvas.height, frame=frame, edges=edges, nodes=nodes)
