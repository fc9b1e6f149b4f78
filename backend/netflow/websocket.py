"""WebSocket fan-out of live topology changes to dashboard clients."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

from fastapi import WebSocket, WebSocketDisconnect

from .dashboard import TopologyView, topology_view
from .store import StoreError, TopologyStore

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Tracks dashboard clients and pushes topology messages to them."""

    def __init__(self):
        self.clients: set[WebSocket] = set()
        self._lock = asyncio.Lock()

    async def connect(self, websocket: WebSocket) -> None:
        await websocket.accept()
        async with self._lock:
            self.clients.add(websocket)

    async def disconnect(self, websocket: WebSocket) -> None:
        async with self._lock:
            self.clients.discard(websocket)

    async def send(self, websocket: WebSocket, message: dict[str, Any]) -> None:
        """Send to one client, dropping it if the socket is gone."""
        try:
            await websocket.send_json(message)
        except Exception as e:
            logger.debug("Dropping dashboard client: %s", e)
            await self.disconnect(websocket)

    async def send_snapshot(self, websocket: WebSocket, view: TopologyView) -> None:
        """Send the full current topology so the client can render immediately."""
        await self.send(websocket, snapshot_message(view))

    async def broadcast(self, message: dict[str, Any]) -> None:
        """Send to every client concurrently."""
        async with self._lock:
            clients = list(self.clients)
        if clients:
            await asyncio.gather(*(self.send(ws, message) for ws in clients))

    @property
    def connection_count(self) -> int:
        return len(self.clients)


# Singleton instance
ws_manager = ConnectionManager()


def snapshot_message(view: TopologyView) -> dict[str, Any]:
    return {
        "type": "snapshot",
        "topology": view.snapshot().model_dump(mode="json"),
        "summary": view.summary().model_dump(mode="json"),
    }


async def forward_changes(
    store: TopologyStore,
    view: TopologyView = topology_view,
    manager: ConnectionManager = ws_manager,
    retry_delay: float = 5.0,
) -> None:
    """
    Apply store change events to the live view and relay them to clients.

    Runs until cancelled. A failed re-fetch leaves the previous view in
    place; the event is still relayed so clients can re-fetch themselves.
    A lost subscription is re-established after ``retry_delay`` seconds.
    """
    while True:
        try:
            async for change in store.changes():
                try:
                    await view.apply(change, store)
                except StoreError as e:
                    logger.error(
                        "Failed to refresh topology after %s %s: %s",
                        change.op.value,
                        change.table.value,
                        e,
                    )

                await manager.broadcast({"type": "change", **change.model_dump(mode="json")})
            return
        except StoreError as e:
            logger.error("Change feed lost: %s; resubscribing in %ss", e, retry_delay)
        await asyncio.sleep(retry_delay)


async def websocket_endpoint(websocket: WebSocket) -> None:
    """WebSocket endpoint handler."""
    await ws_manager.connect(websocket)
    try:
        await ws_manager.send_snapshot(websocket, topology_view)

        while True:
            data = await websocket.receive_text()
            try:
                message = json.loads(data)
            except json.JSONDecodeError:
                continue
            if not isinstance(message, dict):
                continue
            if message.get("type") == "ping":
                await ws_manager.send(websocket, {"type": "pong"})
            elif message.get("type") == "snapshot":
                await ws_manager.send_snapshot(websocket, topology_view)
    except WebSocketDisconnect:
        pass
    finally:
        await ws_manager.disconnect(websocket)
