"""Link models for NetFlow Monitor."""

from enum import Enum

from pydantic import BaseModel, Field


class LinkStatus(str, Enum):
    HEALTHY = "healthy"
    WARNING = "warning"
    CRITICAL = "critical"


class Link(BaseModel):
    """Undirected link between two devices."""

    id: str
    source_device_id: str
    target_device_id: str

    bandwidth: float = 0.0  # Mbps
    max_bandwidth: float = 1000.0  # Mbps
    status: LinkStatus = LinkStatus.HEALTHY

    @property
    def utilization(self) -> float:
        """Bandwidth over capacity, as a percentage."""
        if self.max_bandwidth <= 0:
            return 0.0
        return self.bandwidth / self.max_bandwidth * 100

    def touches(self, device_id: str) -> bool:
        return device_id in (self.source_device_id, self.target_device_id)


class LinkCreate(BaseModel):
    """Schema for creating a link."""

    source_device_id: str
    target_device_id: str
    max_bandwidth: float = Field(default=1000.0, gt=0)
