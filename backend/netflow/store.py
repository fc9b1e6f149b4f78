"""Redis-backed topology store for NetFlow Monitor.

Rows are kept as JSON in Redis hashes (one hash per table), insertion
order in sorted sets, and stat samples in one append-only list per device.
Every mutation publishes a change event on a pub/sub channel.
"""

from __future__ import annotations

import contextlib
import logging
from contextlib import contextmanager
from typing import Any, AsyncIterator, Iterator

import redis.asyncio as redis
from pydantic import ValidationError
from redis.exceptions import RedisError, WatchError

from .config import settings
from .models.device import Device, StatSample
from .models.link import Link
from .models.topology import ChangeEvent, ChangeOp, ChangeTable

logger = logging.getLogger(__name__)

# Redis keys
KEY_DEVICES = "netflow:devices"
KEY_DEVICE_ORDER = "netflow:devices:order"
KEY_LINKS = "netflow:links"
KEY_LINK_ORDER = "netflow:links:order"
KEY_SEQUENCE = "netflow:seq"
KEY_STATS = "netflow:device_stats:{device_id}"
CHANNEL_CHANGES = "netflow:changes"


class StoreError(Exception):
    """Raised when the topology store cannot be read or written."""


@contextmanager
def _store_errors(action: str) -> Iterator[None]:
    try:
        yield
    except (RedisError, ValidationError) as e:
        raise StoreError(f"{action}: {e}") from e


class TopologyStore:
    """Async Redis client wrapper exposing devices, stats and links."""

    def __init__(self, client: redis.Redis | None = None):
        self._client = client

    async def connect(self) -> None:
        """Connect to Redis."""
        self._client = redis.from_url(
            settings.store_url,
            password=settings.store_service_key or None,
            encoding="utf-8",
            decode_responses=True,
        )

    async def disconnect(self) -> None:
        """Disconnect from Redis."""
        if self._client:
            await self._client.aclose()

    @property
    def client(self) -> redis.Redis:
        if not self._client:
            raise RuntimeError("Topology store not connected")
        return self._client

    # ─────────────────────────────────────────────────────────────────────
    # Devices
    # ─────────────────────────────────────────────────────────────────────

    async def list_devices(self) -> list[Device]:
        """All devices, in insertion order."""
        with _store_errors("list devices"):
            rows = await self._ordered_rows(KEY_DEVICES, KEY_DEVICE_ORDER)
            return [Device.model_validate_json(row) for row in rows]

    async def get_device(self, device_id: str) -> Device | None:
        with _store_errors(f"get device {device_id}"):
            row = await self.client.hget(KEY_DEVICES, device_id)
            return Device.model_validate_json(row) if row else None

    async def insert_device(self, device: Device) -> Device:
        with _store_errors(f"insert device {device.id}"):
            await self._insert_row(KEY_DEVICES, KEY_DEVICE_ORDER, device.id, device.model_dump_json())
            await self._notify(ChangeTable.DEVICES, ChangeOp.INSERT, device.model_dump(mode="json"))
        return device

    async def delete_device(self, device_id: str) -> bool:
        """Delete a device along with its stat history and incident links."""
        device = await self.get_device(device_id)
        if device is None:
            return False

        for link in await self.links_for_device(device_id):
            await self.delete_link(link.id)

        with _store_errors(f"delete device {device_id}"):
            async with self.client.pipeline(transaction=True) as pipe:
                pipe.hdel(KEY_DEVICES, device_id)
                pipe.zrem(KEY_DEVICE_ORDER, device_id)
                pipe.delete(KEY_STATS.format(device_id=device_id))
                await pipe.execute()
            await self._notify(ChangeTable.DEVICES, ChangeOp.DELETE, {"id": device_id})
        return True

    # ─────────────────────────────────────────────────────────────────────
    # Stat samples
    # ─────────────────────────────────────────────────────────────────────

    async def insert_stat(self, sample: StatSample) -> StatSample | None:
        """
        Append a sample to the device's history.

        Returns None without writing when the device no longer exists, so a
        poll racing a delete cannot leave an orphaned history behind.
        """
        with _store_errors(f"insert stats for device {sample.device_id}"):
            async with self.client.pipeline(transaction=True) as pipe:
                while True:
                    try:
                        await pipe.watch(KEY_DEVICE_ORDER)
                        if await pipe.zscore(KEY_DEVICE_ORDER, sample.device_id) is None:
                            return None
                        pipe.multi()
                        pipe.rpush(KEY_STATS.format(device_id=sample.device_id), sample.model_dump_json())
                        await pipe.execute()
                        break
                    except WatchError:
                        continue
            await self._notify(ChangeTable.DEVICE_STATS, ChangeOp.INSERT, sample.model_dump(mode="json"))
        return sample

    async def latest_stat(self, device_id: str) -> StatSample | None:
        with _store_errors(f"get latest stats for device {device_id}"):
            row = await self.client.lindex(KEY_STATS.format(device_id=device_id), -1)
            return StatSample.model_validate_json(row) if row else None

    async def latest_stats(self, device_ids: list[str]) -> dict[str, StatSample]:
        """Latest sample for each device that has one."""
        if not device_ids:
            return {}
        with _store_errors("get latest stats"):
            async with self.client.pipeline(transaction=False) as pipe:
                for device_id in device_ids:
                    pipe.lindex(KEY_STATS.format(device_id=device_id), -1)
                rows = await pipe.execute()
            return {
                device_id: StatSample.model_validate_json(row)
                for device_id, row in zip(device_ids, rows)
                if row
            }

    async def list_stats(self, device_id: str, limit: int = 50) -> list[StatSample]:
        """Most recent samples for a device, newest first."""
        with _store_errors(f"list stats for device {device_id}"):
            rows = await self.client.lrange(KEY_STATS.format(device_id=device_id), -limit, -1)
            return [StatSample.model_validate_json(row) for row in reversed(rows)]

    # ─────────────────────────────────────────────────────────────────────
    # Links
    # ─────────────────────────────────────────────────────────────────────

    async def list_links(self) -> list[Link]:
        with _store_errors("list links"):
            rows = await self._ordered_rows(KEY_LINKS, KEY_LINK_ORDER)
            return [Link.model_validate_json(row) for row in rows]

    async def get_link(self, link_id: str) -> Link | None:
        with _store_errors(f"get link {link_id}"):
            row = await self.client.hget(KEY_LINKS, link_id)
            return Link.model_validate_json(row) if row else None

    async def links_for_device(self, device_id: str) -> list[Link]:
        """Links whose source or target is the given device."""
        return [link for link in await self.list_links() if link.touches(device_id)]

    async def insert_link(self, link: Link) -> Link:
        with _store_errors(f"insert link {link.id}"):
            await self._insert_row(KEY_LINKS, KEY_LINK_ORDER, link.id, link.model_dump_json())
            await self._notify(ChangeTable.LINKS, ChangeOp.INSERT, link.model_dump(mode="json"))
        return link

    async def update_link(self, link_id: str, **fields: Any) -> Link | None:
        """
        Update fields of a link in place. Returns None if it does not exist.

        The write only happens while the link is still listed; a link deleted
        concurrently is never recreated.
        """
        with _store_errors(f"update link {link_id}"):
            async with self.client.pipeline(transaction=True) as pipe:
                while True:
                    try:
                        await pipe.watch(KEY_LINK_ORDER, KEY_LINKS)
                        if await pipe.zscore(KEY_LINK_ORDER, link_id) is None:
                            return None
                        row = await pipe.hget(KEY_LINKS, link_id)
                        if not row:
                            return None
                        updated = Link.model_validate_json(row).model_copy(update=fields)
                        pipe.multi()
                        pipe.hset(KEY_LINKS, link_id, updated.model_dump_json())
                        await pipe.execute()
                        break
                    except WatchError:
                        continue
            await self._notify(ChangeTable.LINKS, ChangeOp.UPDATE, updated.model_dump(mode="json"))
        return updated

    async def delete_link(self, link_id: str) -> bool:
        with _store_errors(f"delete link {link_id}"):
            async with self.client.pipeline(transaction=True) as pipe:
                pipe.hdel(KEY_LINKS, link_id)
                pipe.zrem(KEY_LINK_ORDER, link_id)
                removed, _ = await pipe.execute()
            if removed:
                await self._notify(ChangeTable.LINKS, ChangeOp.DELETE, {"id": link_id})
        return bool(removed)

    # ─────────────────────────────────────────────────────────────────────
    # Change feed
    # ─────────────────────────────────────────────────────────────────────

    async def changes(self) -> AsyncIterator[ChangeEvent]:
        """
        Yield change events published by any writer of this store.

        A lost connection ends the iteration with ``StoreError``; callers
        resubscribe by calling ``changes()`` again.
        """
        pubsub = self.client.pubsub()
        try:
            with _store_errors("subscribe to changes"):
                await pubsub.subscribe(CHANNEL_CHANGES)
                async for message in pubsub.listen():
                    if message.get("type") != "message":
                        continue
                    try:
                        event = ChangeEvent.model_validate_json(message["data"])
                    except ValueError as e:
                        logger.warning("Ignoring malformed change event: %s", e)
                        continue
                    yield event
        finally:
            # The connection may already be gone
            with contextlib.suppress(RedisError):
                await pubsub.unsubscribe(CHANNEL_CHANGES)
            with contextlib.suppress(RedisError):
                await pubsub.aclose()

    # ─────────────────────────────────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────────────────────────────────

    async def _ordered_rows(self, hash_key: str, order_key: str) -> list[str]:
        ids = await self.client.zrange(order_key, 0, -1)
        if not ids:
            return []
        rows = await self.client.hmget(hash_key, ids)
        return [row for row in rows if row]

    async def _insert_row(self, hash_key: str, order_key: str, row_id: str, row: str) -> None:
        seq = await self.client.incr(KEY_SEQUENCE)
        async with self.client.pipeline(transaction=True) as pipe:
            pipe.hset(hash_key, row_id, row)
            pipe.zadd(order_key, {row_id: seq})
            await pipe.execute()

    async def _notify(self, table: ChangeTable, op: ChangeOp, row: dict[str, Any]) -> None:
        event = ChangeEvent(table=table, op=op, row=row)
        await self.client.publish(CHANNEL_CHANGES, event.model_dump_json())


# Singleton instance
topology_store = TopologyStore()


def get_store() -> TopologyStore:
    """FastAPI dependency returning the shared store."""
    return topology_store
