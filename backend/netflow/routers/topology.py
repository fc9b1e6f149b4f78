"""Topology API routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query

from ..canvas import build_scene, hit_test
from ..config import config
from ..dashboard import load_topology, summarize
from ..models.topology import HitResult, Scene, Topology, TopologySummary
from ..store import StoreError, TopologyStore, get_store

router = APIRouter()


async def _load(store: TopologyStore) -> Topology:
    try:
        return await load_topology(store)
    except StoreError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/topology", response_model=Topology)
async def get_topology(store: TopologyStore = Depends(get_store)):
    """Get every device (with its latest stats) and every link."""
    return await _load(store)


@router.get("/topology/summary", response_model=TopologySummary)
async def get_topology_summary(store: TopologyStore = Depends(get_store)):
    """Get a quick summary of topology stats."""
    topology = await _load(store)
    return summarize(topology.devices, topology.links)


@router.get("/topology/scene", response_model=Scene)
async def get_scene(
    store: TopologyStore = Depends(get_store),
    frame: Annotated[int, Query(ge=0)] = 0,
):
    """
    Get the canvas scene for an animation frame.

    Device circles are coloured by status, link segments by health tier,
    with flow dots advanced according to ``frame``.
    """
    topology = await _load(store)
    return build_scene(
        topology.devices,
        topology.links,
        frame=frame,
        canvas=config.canvas,
        thresholds=config.link_thresholds,
    )


@router.get("/topology/hit", response_model=HitResult)
async def get_hit(
    x: float,
    y: float,
    store: TopologyStore = Depends(get_store),
):
    """Find the device under a canvas pointer position, if any."""
    topology = await _load(store)
    device = hit_test(topology.devices, x, y, radius=config.canvas.device_radius)
    return HitResult(x=x, y=y, device=device)
