"""Device models for NetFlow Monitor."""

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field


class DeviceStatus(str, Enum):
    UP = "up"
    WARNING = "warning"
    DOWN = "down"


class DeviceType(str, Enum):
    ROUTER = "router"
    SWITCH = "switch"
    SERVER = "server"


class Device(BaseModel):
    """Network device row as persisted in the topology store."""

    id: str
    name: str
    ip: str
    type: DeviceType = DeviceType.ROUTER
    snmp_community: str = "public"

    # Canvas placement, fixed at creation
    x: float
    y: float


class DeviceCreate(BaseModel):
    """Schema for adding a device from the dashboard form."""

    name: str = Field(min_length=1)
    ip: str = Field(min_length=1)
    type: DeviceType = DeviceType.ROUTER
    snmp_community: str = "public"


class StatSample(BaseModel):
    """One simulated SNMP poll result for a device."""

    device_id: str
    status: DeviceStatus
    uptime: str  # "45d 12h"
    cpu: float = 0.0
    memory: float = 0.0
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class DeviceView(Device):
    """Device joined with its most recent stat sample."""

    status: DeviceStatus = DeviceStatus.DOWN
    uptime: str = "0d 0h"
    cpu: float = 0.0
    memory: float = 0.0
    last_polled: datetime | None = None

    @classmethod
    def from_rows(cls, device: Device, sample: StatSample | None) -> "DeviceView":
        """Join a device with its latest sample; no sample means "down"."""
        view = cls(**device.model_dump())
        if sample is not None:
            view.apply_sample(sample)
        return view

    def apply_sample(self, sample: StatSample) -> None:
        self.status = sample.status
        self.uptime = sample.uptime
        self.cpu = sample.cpu
        self.memory = sample.memory
        self.last_polled = sample.timestamp
