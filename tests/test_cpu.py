import asyncio
import logging
import time

import httpx
import pytest

from loadgen.core import tasks
from loadgen.core.stress import burn_chunk, cpu_stress
from loadgen.main import app


def test_post_cpu_blocks_for_duration(client):
    start = time.monotonic()
    resp = client.post("/cpu", json={"seconds": 1})
    elapsed = time.monotonic() - start

    assert resp.status_code == 200
    body = resp.json()
    assert body["type"] == "CPU"
    assert body["duration"] == 1
    assert body["completed"] is True
    assert body["timestamp"].endswith("Z")
    assert elapsed >= 1


@pytest.mark.parametrize("payload", [{}, {"seconds": None}, None])
def test_post_cpu_missing_seconds(client, payload):
    resp = client.post("/cpu", json=payload)
    assert resp.status_code == 400
    assert resp.json()["error"] == "Missing required parameter: seconds is required"


@pytest.mark.parametrize("seconds", [0, -3, "5", True, [1]])
def test_post_cpu_rejects_non_positive_or_non_numeric(client, seconds):
    resp = client.post("/cpu", json={"seconds": seconds})
    assert resp.status_code == 400
    assert resp.json() == {"error": "seconds must be a positive number"}


def test_get_cpu_starts_in_background(client):
    start = time.monotonic()
    resp = client.get("/cpu", params={"seconds": 2})
    assert time.monotonic() - start < 1

    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "started"
    assert body["type"] == "CPU"
    assert body["duration"] == 2
    assert "timestamp" in body
    assert client.get("/health").status_code == 200


def test_get_cpu_missing_seconds_has_example(client):
    resp = client.get("/cpu")
    assert resp.status_code == 400
    assert resp.json() == {
        "error": "Missing required query parameter: seconds is required",
        "example": "/cpu?seconds=10",
    }


@pytest.mark.parametrize("seconds", ["abc", "0", "-1", "nan"])
def test_get_cpu_invalid_seconds(client, seconds):
    resp = client.get("/cpu", params={"seconds": seconds})
    assert resp.status_code == 400
    assert resp.json()["error"] == "seconds must be a positive number"


def test_post_cpu_internal_fault_is_500(client, monkeypatch):
    async def broken(seconds):
        raise RuntimeError("boom")

    monkeypatch.setattr("loadgen.routers.load.cpu_stress", broken)
    resp = client.post("/cpu", json={"seconds": 1})
    assert resp.status_code == 500
    assert resp.json() == {"error": "CPU stress test failed", "message": "boom"}


def test_burn_chunk_does_work():
    assert burn_chunk(0) == 0.0
    assert burn_chunk(1000) != 0.0


@pytest.mark.asyncio
async def test_cpu_stress_runs_at_least_duration():
    start = time.monotonic()
    result = await cpu_stress(0.2, chunk_iterations=1000)
    assert time.monotonic() - start >= 0.2
    assert result["completed"] is True
    assert result["duration"] == 0.2


@pytest.mark.asyncio
async def test_concurrent_cpu_stress_runs_interleave():
    start = time.monotonic()
    short, long = await asyncio.gather(
        cpu_stress(0.2, chunk_iterations=1000),
        cpu_stress(0.3, chunk_iterations=1000),
    )
    elapsed = time.monotonic() - start

    assert short["completed"] is True
    assert long["completed"] is True
    assert short["duration"] == 0.2
    assert long["duration"] == 0.3
    # run back to back they would need at least 0.5s
    assert 0.3 <= elapsed < 0.5


@pytest.mark.asyncio
async def test_health_stays_responsive_during_cpu_burn():
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        resp = await ac.get("/cpu", params={"seconds": 2})
        assert resp.status_code == 200

        start = time.monotonic()
        health = await ac.get("/health")
        assert health.status_code == 200
        assert time.monotonic() - start < 1.5
        assert tasks.running_tasks()

    await tasks.cancel_all()


@pytest.mark.asyncio
async def test_detached_fault_is_only_logged(monkeypatch, caplog):
    async def broken(seconds):
        raise RuntimeError("boom")

    monkeypatch.setattr("loadgen.routers.load.cpu_stress", broken)
    caplog.set_level(logging.INFO)

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        resp = await ac.get("/cpu", params={"seconds": 1})
        assert resp.status_code == 200
        assert resp.json()["status"] == "started"
        await asyncio.sleep(0.05)

    assert "Error during CPU stress test: boom" in caplog.text
    assert not tasks.running_tasks()
