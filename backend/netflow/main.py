"""NetFlow Monitor - FastAPI Application."""

import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import get_config
from .dashboard import topology_view
from .polling import scheduler
from .routers import devices_router, links_router, poll_router, topology_router
from .seed import seed_topology
from .store import StoreError, topology_store
from .websocket import forward_changes, websocket_endpoint, ws_manager

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - startup and shutdown events."""
    # Startup
    await topology_store.connect()

    config = get_config()
    try:
        if config.seed_on_empty:
            await seed_topology(topology_store)
        await topology_view.refresh(topology_store)
    except StoreError as e:
        logger.error("Initial topology load failed: %s", e)

    forwarder = asyncio.create_task(forward_changes(topology_store))

    if config.polling.enabled:
        scheduler.start()

    yield

    # Shutdown
    await scheduler.stop()
    forwarder.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await forwarder
    await topology_store.disconnect()


app = FastAPI(
    title="NetFlow Monitor",
    description="SNMP Network Topology & Bandwidth Monitoring API",
    version="1.0.0",
    lifespan=lifespan,
)

# Permissive CORS so the poll function can be invoked from any origin
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
)

# Include routers
app.include_router(topology_router, prefix="/api", tags=["topology"])
app.include_router(devices_router, prefix="/api", tags=["devices"])
app.include_router(links_router, prefix="/api", tags=["links"])
app.include_router(poll_router, prefix="/api", tags=["polling"])


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": "netflow-monitor",
        "scheduler_running": scheduler.running,
        "websocket_clients": ws_manager.connection_count,
    }


# WebSocket endpoint
app.websocket("/ws/updates")(websocket_endpoint)
