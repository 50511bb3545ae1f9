from __future__ import annotations

import asyncio

import httpx
import pytest


@pytest.mark.asyncio
async def test_successful_updates_emit_one_job_each(make_app):
    seen = []

    async def record(job) -> None:
        seen.append(job)

    app = make_app(processor=record)
    jobs = app.state.ctx.jobs
    # ASGITransport does not run the lifespan, so workers are started by hand.
    jobs.start()
    try:
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
            assert (await client.post("/seats", json={"seat_code": 5})).status_code == 201
            assert (await client.post("/rooms", json={"room_code": 9})).status_code == 201

            assert (await client.put("/seats/5", json={"seat_title": "B2"})).status_code == 200
            assert (await client.put("/rooms/9", json={"room_top": 40})).status_code == 200
            # Rejected and missing updates do not notify.
            assert (await client.put("/seats/5", json={"seat_code": 6, "gender": 1})).status_code == 400
            assert (await client.put("/seats/77", json={"gender": 1})).status_code == 404

        await asyncio.wait_for(jobs.join(), timeout=5)
    finally:
        await jobs.stop()

    assert [(j.name, j.data.get("seat_code", j.data.get("room_code"))) for j in seen] == [
        ("SeatUpdated", 5),
        ("RoomUpdated", 9),
    ]
    assert all("time" in j.data for j in seen)


@pytest.mark.asyncio
async def test_updates_succeed_without_workers(make_app):
    app = make_app(job_workers=0)
    assert app.state.ctx.jobs is None

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        await client.post("/seats", json={"seat_code": 1})
        r = await client.put("/seats/1", json={"waiting": 1})
        assert r.status_code == 200
        assert r.json()["waiting"] == 1


@pytest.mark.asyncio
async def test_full_queue_does_not_fail_the_update(make_app):
    app = make_app(job_queue_size=1)
    jobs = app.state.ctx.jobs

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        await client.post("/seats", json={"seat_code": 1})
        for title in ("a", "b", "c"):
            r = await client.put("/seats/1", json={"seat_title": title})
            assert r.status_code == 200

    # No workers running: the first job is held, the rest were dropped.
    assert jobs.qsize() == 1


@pytest.mark.asyncio
async def test_lifespan_starts_and_stops_workers(make_app):
    app = make_app(job_workers=2)
    jobs = app.state.ctx.jobs
    async with app.router.lifespan_context(app):
        assert jobs.running
    assert not jobs.running
