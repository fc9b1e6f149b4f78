"""Root conftest: shared fixtures for all tests."""
from __future__ import annotations

import os
import uuid

import fakeredis
import pytest
from fastapi import APIRouter, FastAPI

# Never point tests at a real store
os.environ.setdefault("STORE_URL", "redis://localhost:6379/15")
os.environ.setdefault("STORE_SERVICE_KEY", "")

from netflow.models.device import Device, DeviceType, StatSample, DeviceStatus  # noqa: E402
from netflow.models.link import Link  # noqa: E402
from netflow.store import TopologyStore, get_store  # noqa: E402


@pytest.fixture
def store() -> TopologyStore:
    """A TopologyStore backed by an isolated in-process fake Redis."""
    server = fakeredis.FakeServer()
    return TopologyStore(client=fakeredis.FakeAsyncRedis(server=server, decode_responses=True))


def make_device(**overrides) -> Device:
    """Build a Device with sensible defaults."""
    defaults = {
        "id": str(uuid.uuid4()),
        "name": "Core Router",
        "ip": "192.168.1.1",
        "type": DeviceType.ROUTER,
        "snmp_community": "public",
        "x": 200.0,
        "y": 350.0,
    }
    defaults.update(overrides)
    return Device(**defaults)


def make_link(source: Device, target: Device, **overrides) -> Link:
    """Build a Link between two devices."""
    defaults = {
        "id": str(uuid.uuid4()),
        "source_device_id": source.id,
        "target_device_id": target.id,
        "bandwidth": 0.0,
        "max_bandwidth": 1000.0,
    }
    defaults.update(overrides)
    return Link(**defaults)


def make_sample(device: Device, status: DeviceStatus = DeviceStatus.UP, **overrides) -> StatSample:
    defaults = {
        "device_id": device.id,
        "status": status,
        "uptime": "45d 12h",
        "cpu": 23.0,
        "memory": 45.0,
    }
    defaults.update(overrides)
    return StatSample(**defaults)


def create_app(store: TopologyStore, *routers: APIRouter) -> FastAPI:
    """Build a minimal FastAPI app with the given routers and the store
    dependency overridden."""
    app = FastAPI()
    for router in routers:
        app.include_router(router, prefix="/api")
    app.dependency_overrides[get_store] = lambda: store
    return app
