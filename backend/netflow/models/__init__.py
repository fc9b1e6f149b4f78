# Pydantic models
from .device import Device, DeviceCreate, DeviceStatus, DeviceType, DeviceView, StatSample
from .link import Link, LinkCreate, LinkStatus
from .topology import (
    ChangeEvent,
    ChangeOp,
    ChangeTable,
    HitResult,
    PollResult,
    Scene,
    Topology,
    TopologySummary,
)

__all__ = [
    "Device",
    "DeviceCreate",
    "DeviceStatus",
    "DeviceType",
    "DeviceView",
    "StatSample",
    "Link",
    "LinkCreate",
    "LinkStatus",
    "ChangeEvent",
    "ChangeOp",
    "ChangeTable",
    "HitResult",
    "PollResult",
    "Scene",
    "Topology",
    "TopologySummary",
]
