# API routers
from .devices import router as devices_router
from .links import router as links_router
from .poll import router as poll_router
from .topology import router as topology_router

__all__ = ["devices_router", "links_router", "poll_router", "topology_router"]
