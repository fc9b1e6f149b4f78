"""Topology, change-feed and canvas scene models for NetFlow Monitor."""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel

from .device import DeviceStatus, DeviceType, DeviceView
from .link import Link, LinkStatus


class Topology(BaseModel):
    """Complete network topology as shown on the dashboard."""

    devices: list[DeviceView] = []
    links: list[Link] = []


class TopologySummary(BaseModel):
    """Quick topology stats for the header panel."""

    total_devices: int = 0
    devices_up: int = 0
    devices_warning: int = 0
    devices_down: int = 0
    total_bandwidth: float = 0.0  # Mbps
    avg_utilization: float = 0.0  # percent


class ChangeTable(str, Enum):
    DEVICES = "devices"
    DEVICE_STATS = "device_stats"
    LINKS = "links"


class ChangeOp(str, Enum):
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"


class ChangeEvent(BaseModel):
    """A single store mutation, as published on the change channel."""

    table: ChangeTable
    op: ChangeOp
    row: dict[str, Any] = {}


class PollResult(BaseModel):
    """Outcome of one poll cycle."""

    polled: int = 0
    failures: list[str] = []  # Device IDs whose writes failed


# Canvas scene


class Point(BaseModel):
    x: float
    y: float


class SceneNode(BaseModel):
    """A device circle on the canvas."""

    id: str
    name: str
    type: DeviceType
    status: DeviceStatus
    x: float
    y: float
    radius: float
    color: str


class SceneEdge(BaseModel):
    """A link segment with its animated flow dots."""

    id: str
    source: Point
    target: Point
    status: LinkStatus
    color: str
    label: str
    label_position: Point
    flow_dots: list[Point] = []


class Scene(BaseModel):
    """Everything the canvas needs to draw one animation frame."""

    width: int
    height: int
    frame: int
    edges: list[SceneEdge] = []
    nodes: list[SceneNode] = []


class HitResult(BaseModel):
    """Result of hit-testing a pointer position against the canvas."""

    x: float
    y: float
    device: Optional[DeviceView] = None
