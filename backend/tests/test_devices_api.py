"""
Tests for netflow.routers.devices.

Covers:
- GET    /api/devices
- GET    /api/devices/{id}
- GET    /api/devices/{id}/stats
- POST   /api/devices
- DELETE /api/devices/{id}
- POST   /api/devices/{id}/test

Uses httpx.AsyncClient + ASGITransport against a fake-Redis backed store.
"""
from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest
from httpx import ASGITransport, AsyncClient

from conftest import create_app, make_device, make_link, make_sample
from netflow.models.device import DeviceStatus
from netflow.models.topology import PollResult
from netflow.routers.devices import router
from netflow.store import KEY_DEVICE_ORDER, KEY_DEVICES, StoreError


def _client(store) -> AsyncClient:
    transport = ASGITransport(app=create_app(store, router))
    return AsyncClient(transport=transport, base_url="http://test")


class TestListDevices:
    @pytest.mark.asyncio
    async def test_device_without_sample_is_down(self, store):
        await store.insert_device(make_device(name="Fresh"))

        async with _client(store) as client:
            resp = await client.get("/api/devices")

        assert resp.status_code == 200
        body = resp.json()
        assert len(body) == 1
        assert body[0]["name"] == "Fresh"
        assert body[0]["status"] == "down"

    @pytest.mark.asyncio
    async def test_corrupt_row_is_structured_error(self, store):
        await store.client.hset(KEY_DEVICES, "bad", "{not json")
        await store.client.zadd(KEY_DEVICE_ORDER, {"bad": 1})

        async with _client(store) as client:
            resp = await client.get("/api/devices")

        assert resp.status_code == 500
        assert "list devices" in resp.json()["detail"]

    @pytest.mark.asyncio
    async def test_latest_sample_is_shown(self, store):
        device = await store.insert_device(make_device())
        await store.insert_stat(make_sample(device, DeviceStatus.UP, cpu=23, uptime="45d 12h"))

        async with _client(store) as client:
            resp = await client.get("/api/devices")

        row = resp.json()[0]
        assert row["status"] == "up"
        assert row["uptime"] == "45d 12h"
        assert row["cpu"] == 23

    @pytest.mark.asyncio
    async def test_store_failure_returns_500(self, store):
        store.list_devices = AsyncMock(side_effect=StoreError("list devices: refused"))

        async with _client(store) as client:
            resp = await client.get("/api/devices")

        assert resp.status_code == 500
        assert "refused" in resp.json()["detail"]


class TestGetDevice:
    @pytest.mark.asyncio
    async def test_found(self, store):
        device = await store.insert_device(make_device(name="Web Server", ip="192.168.1.10"))

        async with _client(store) as client:
            resp = await client.get(f"/api/devices/{device.id}")

        assert resp.status_code == 200
        assert resp.json()["ip"] == "192.168.1.10"

    @pytest.mark.asyncio
    async def test_not_found(self, store):
        async with _client(store) as client:
            resp = await client.get("/api/devices/missing")

        assert resp.status_code == 404

    @pytest.mark.asyncio
    async def test_stats_history(self, store):
        device = await store.insert_device(make_device())
        for hour in range(3):
            await store.insert_stat(make_sample(device, uptime=f"0d {hour}h"))

        async with _client(store) as client:
            resp = await client.get(f"/api/devices/{device.id}/stats", params={"limit": 2})

        assert resp.status_code == 200
        assert [s["uptime"] for s in resp.json()] == ["0d 2h", "0d 1h"]


class TestAddDevice:
    @pytest.mark.asyncio
    async def test_add_inserts_one_row_and_polls_once(self, store):
        poll = AsyncMock(return_value=PollResult(polled=1))

        with patch("netflow.routers.devices.poll_topology", poll):
            async with _client(store) as client:
                resp = await client.post(
                    "/api/devices",
                    json={"name": "Edge-1", "ip": "10.0.0.9", "type": "router", "snmp_community": "public"},
                )

        assert resp.status_code == 201
        devices = await store.list_devices()
        assert len(devices) == 1
        assert (devices[0].name, devices[0].ip) == ("Edge-1", "10.0.0.9")
        poll.assert_awaited_once_with(store)

    @pytest.mark.asyncio
    async def test_random_placement_window(self, store):
        with patch("netflow.routers.devices.poll_topology", AsyncMock()):
            async with _client(store) as client:
                for i in range(10):
                    await client.post("/api/devices", json={"name": f"D{i}", "ip": f"10.0.0.{i}"})

        for device in await store.list_devices():
            assert 300 <= device.x <= 700
            assert 200 <= device.y <= 500

    @pytest.mark.asyncio
    async def test_first_poll_gives_a_sample(self, store):
        async with _client(store) as client:
            resp = await client.post("/api/devices", json={"name": "Edge-1", "ip": "10.0.0.9"})

        device_id = resp.json()["id"]
        assert len(await store.list_stats(device_id)) == 1

    @pytest.mark.asyncio
    async def test_missing_name_rejected(self, store):
        async with _client(store) as client:
            resp = await client.post("/api/devices", json={"name": "", "ip": "10.0.0.9"})

        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_unknown_type_rejected(self, store):
        async with _client(store) as client:
            resp = await client.post(
                "/api/devices", json={"name": "Edge-1", "ip": "10.0.0.9", "type": "toaster"}
            )

        assert resp.status_code == 422


class TestRemoveDevice:
    @pytest.mark.asyncio
    async def test_remove_drops_device_and_its_links(self, store):
        a = await store.insert_device(make_device(name="A"))
        b = await store.insert_device(make_device(name="B"))
        await store.insert_link(make_link(a, b))

        async with _client(store) as client:
            resp = await client.delete(f"/api/devices/{a.id}")
            listed = await client.get("/api/devices")

        assert resp.status_code == 200
        assert resp.json() == {"success": True, "id": a.id}
        assert [d["id"] for d in listed.json()] == [b.id]
        assert await store.list_links() == []

    @pytest.mark.asyncio
    async def test_remove_unknown(self, store):
        async with _client(store) as client:
            resp = await client.delete("/api/devices/missing")

        assert resp.status_code == 404


class TestSnmpTest:
    @pytest.mark.asyncio
    async def test_polls_every_device(self, store):
        selected = await store.insert_device(make_device(name="Core Router"))
        other = await store.insert_device(make_device(name="Web Server"))

        async with _client(store) as client:
            resp = await client.post(f"/api/devices/{selected.id}/test")

        assert resp.status_code == 200
        body = resp.json()
        assert body["polled"] == 2
        assert body["message"] == "SNMP test completed for Core Router"
        assert len(await store.list_stats(other.id)) == 1

    @pytest.mark.asyncio
    async def test_unknown_device(self, store):
        async with _client(store) as client:
            resp = await client.post("/api/devices/missing/test")

        assert resp.status_code == 404

    @pytest.mark.asyncio
    async def test_poll_failure_surfaces(self, store):
        device = await store.insert_device(make_device())

        with patch(
            "netflow.routers.devices.run_poll_cycle",
            AsyncMock(side_effect=StoreError("list devices: timeout")),
        ):
            async with _client(store) as client:
                resp = await client.post(f"/api/devices/{device.id}/test")

        assert resp.status_code == 500
        assert resp.json()["detail"] == "list devices: timeout"
