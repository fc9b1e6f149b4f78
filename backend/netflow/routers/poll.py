"""Poll function route."""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ..polling import run_poll_cycle
from ..store import TopologyStore, get_store

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/snmp-poll")
async def snmp_poll(store: TopologyStore = Depends(get_store)):
    """Run one poll cycle over every device in the store."""
    try:
        result = await run_poll_cycle(store)
    except Exception as e:
        logger.error("Error in snmp-poll function: %s", e)
        return JSONResponse(status_code=500, content={"error": str(e) or "Unknown error"})

    return {"success": True, "polled": result.polled}
