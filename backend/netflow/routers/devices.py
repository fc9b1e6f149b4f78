"""Device API routes."""

import logging
import random
import uuid
from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query

from ..config import config
from ..models.device import Device, DeviceCreate, DeviceView, StatSample
from ..polling import poll_topology, run_poll_cycle
from ..store import StoreError, TopologyStore, get_store

logger = logging.getLogger(__name__)

router = APIRouter()

StoreDep = Annotated[TopologyStore, Depends(get_store)]


async def _get_device_or_404(store: TopologyStore, device_id: str) -> Device:
    try:
        device = await store.get_device(device_id)
    except StoreError as e:
        raise HTTPException(status_code=500, detail=str(e))

    if not device:
        raise HTTPException(status_code=404, detail=f"Device '{device_id}' not found")
    return device


@router.get("/devices", response_model=list[DeviceView])
async def list_devices(store: StoreDep):
    """List all devices, each joined with its latest stat sample."""
    try:
        devices = await store.list_devices()
        latest = await store.latest_stats([device.id for device in devices])
    except StoreError as e:
        logger.error("Failed to list devices: %s", e)
        raise HTTPException(status_code=500, detail=str(e))

    return [DeviceView.from_rows(device, latest.get(device.id)) for device in devices]


@router.get("/devices/{device_id}", response_model=DeviceView)
async def get_device(device_id: str, store: StoreDep):
    """Get a device with its latest stat sample."""
    device = await _get_device_or_404(store, device_id)
    try:
        sample = await store.latest_stat(device_id)
    except StoreError as e:
        raise HTTPException(status_code=500, detail=str(e))

    return DeviceView.from_rows(device, sample)


@router.get("/devices/{device_id}/stats", response_model=list[StatSample])
async def get_device_stats(
    device_id: str,
    store: StoreDep,
    limit: Annotated[int, Query(ge=1, le=1000)] = 50,
):
    """Stat history for a device, newest first."""
    await _get_device_or_404(store, device_id)
    try:
        return await store.list_stats(device_id, limit=limit)
    except StoreError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/devices", response_model=Device, status_code=201)
async def add_device(body: DeviceCreate, store: StoreDep, background_tasks: BackgroundTasks):
    """
    Add a device at a random spot on the canvas.

    One poll cycle runs in the background afterwards so the new device
    gets a first stat sample.
    """
    placement = config.placement
    device = Device(
        id=str(uuid.uuid4()),
        name=body.name,
        ip=body.ip,
        type=body.type,
        snmp_community=body.snmp_community,
        x=placement.x_min + random.random() * placement.x_span,
        y=placement.y_min + random.random() * placement.y_span,
    )

    try:
        await store.insert_device(device)
    except StoreError as e:
        logger.error("Failed to add device %s: %s", body.name, e)
        raise HTTPException(status_code=500, detail=str(e))

    logger.info("Added device %s (%s)", device.name, device.ip)
    background_tasks.add_task(poll_topology, store)
    return device


@router.delete("/devices/{device_id}")
async def remove_device(device_id: str, store: StoreDep):
    """Remove a device together with its stats and any link touching it."""
    try:
        removed = await store.delete_device(device_id)
    except StoreError as e:
        logger.error("Failed to remove device %s: %s", device_id, e)
        raise HTTPException(status_code=500, detail=str(e))

    if not removed:
        raise HTTPException(status_code=404, detail=f"Device '{device_id}' not found")

    logger.info("Removed device %s", device_id)
    return {"success": True, "id": device_id}


@router.post("/devices/{device_id}/test")
async def test_snmp(device_id: str, store: StoreDep):
    """
    Test SNMP for a device.

    Runs a full poll cycle: every device is polled, not only the
    selected one.
    """
    device = await _get_device_or_404(store, device_id)
    try:
        result = await run_poll_cycle(store)
    except StoreError as e:
        raise HTTPException(status_code=500, detail=str(e))

    return {
        "success": True,
        "device_id": device_id,
        "message": f"SNMP test completed for {device.name}",
        "polled": result.polled,
    }
