"""Link API routes."""

import uuid

from fastapi import APIRouter, Depends, HTTPException

from ..models.link import Link, LinkCreate
from ..store import StoreError, TopologyStore, get_store

router = APIRouter()


@router.get("/links", response_model=list[Link])
async def list_links(store: TopologyStore = Depends(get_store)):
    """List all links."""
    try:
        return await store.list_links()
    except StoreError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/links", response_model=Link, status_code=201)
async def create_link(body: LinkCreate, store: TopologyStore = Depends(get_store)):
    """Connect two existing devices."""
    if body.source_device_id == body.target_device_id:
        raise HTTPException(status_code=400, detail="A link needs two different devices")

    try:
        for device_id in (body.source_device_id, body.target_device_id):
            if not await store.get_device(device_id):
                raise HTTPException(status_code=404, detail=f"Device '{device_id}' not found")

        link = Link(id=str(uuid.uuid4()), **body.model_dump())
        return await store.insert_link(link)
    except StoreError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.delete("/links/{link_id}")
async def delete_link(link_id: str, store: TopologyStore = Depends(get_store)):
    """Delete a link."""
    try:
        removed = await store.delete_link(link_id)
    except StoreError as e:
        raise HTTPException(status_code=500, detail=str(e))

    if not removed:
        raise HTTPException(status_code=404, detail=f"Link '{link_id}' not found")
    return {"success": True, "id": link_id}
