"""
HTTP behavior that is decided before any query runs, exercised against an app whose
database is unreachable.
"""

from __future__ import annotations

import httpx
import pytest


CORS = {
    "access-control-allow-origin": "*",
    "access-control-allow-methods": "GET, POST, PUT, DELETE, OPTIONS",
    "access-control-allow-headers": "Content-Type, X-Fields",
}


def _client(app) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test")


@pytest.mark.asyncio
@pytest.mark.parametrize("path", ["/seats", "/rooms/3", "/does-not-exist"])
async def test_options_short_circuits_with_cors_headers(offline_app, path) -> None:
    async with _client(offline_app()) as client:
        r = await client.options(path)
    assert r.status_code == 200
    for name, value in CORS.items():
        assert r.headers[name] == value


@pytest.mark.asyncio
async def test_error_responses_carry_cors_headers_and_plain_text(offline_app) -> None:
    async with _client(offline_app()) as client:
        r = await client.get("/seats/abc")
    assert r.status_code == 400
    assert r.headers["access-control-allow-origin"] == "*"
    assert r.headers["content-type"].startswith("text/plain")
    assert r.text == "invalid seat_code"


@pytest.mark.asyncio
@pytest.mark.parametrize("method", ["GET", "PUT", "DELETE"])
async def test_non_integer_path_key_is_400(offline_app, method) -> None:
    async with _client(offline_app()) as client:
        r = await client.request(method, "/rooms/1.5", json={"room_title": "x"})
    assert r.status_code == 400
    assert r.text == "invalid room_code"


@pytest.mark.asyncio
async def test_update_key_mismatch_is_rejected_before_touching_the_database(offline_app) -> None:
    async with _client(offline_app()) as client:
        r = await client.put("/seats/5", json={"seat_code": 6, "seat_title": "B2"})
    assert r.status_code == 400
    assert r.text == "seat_code in URL and body differ"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("body", "message"),
    [
        ({}, "no fields to update"),
        ({"bogus": 1, "auto_increment": 3}, "no valid fields to update"),
        ({"seat_width": "wide"}, "invalid value for seat_width"),
    ],
)
async def test_invalid_update_sets_are_400(offline_app, body, message) -> None:
    async with _client(offline_app()) as client:
        r = await client.put("/seats/5", json=body)
    assert r.status_code == 400
    assert r.text == message


@pytest.mark.asyncio
@pytest.mark.parametrize("content", [b"", b"{not json", b"\xff\xfe"])
async def test_malformed_json_is_400(offline_app, content) -> None:
    async with _client(offline_app()) as client:
        r = await client.post("/seats", content=content, headers={"Content-Type": "application/json"})
    assert r.status_code == 400
    assert r.text == "invalid request data"


@pytest.mark.asyncio
async def test_create_with_wrong_field_type_is_400(offline_app) -> None:
    async with _client(offline_app()) as client:
        r = await client.post("/rooms", json={"room_code": "not-a-number"})
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_invalid_filter_value_is_400(offline_app) -> None:
    async with _client(offline_app()) as client:
        r = await client.get("/seats", params={"company_code": "acme"})
    assert r.status_code == 400
    assert r.text == "invalid company_code value"


@pytest.mark.asyncio
async def test_database_failure_is_generic_500(offline_app) -> None:
    async with _client(offline_app(query_timeout_s=5)) as client:
        r = await client.get("/rooms")
    assert r.status_code == 500
    assert r.text == "failed to fetch data"


@pytest.mark.asyncio
async def test_database_failure_detail_exposed_when_enabled(offline_app) -> None:
    async with _client(offline_app(query_timeout_s=5, expose_db_errors=True)) as client:
        r = await client.get("/rooms/1")
    assert r.status_code == 500
    assert r.text.startswith("failed to fetch room: ")
    assert len(r.text) > len("failed to fetch room: ")


@pytest.mark.asyncio
async def test_metrics_endpoint_reports_requests(offline_app) -> None:
    async with _client(offline_app()) as client:
        await client.get("/seats/abc")
        r = await client.get("/metrics")
    assert r.status_code == 200
    assert "floorplan_http_latency_ms" in r.text
    assert 'route="/seats/{seat_code}",method="GET",status="4xx"' in r.text


def test_no_workers_means_null_notifier(offline_app) -> None:
    from services.floorplan.app.jobs import JobQueue, NullNotifier

    assert isinstance(offline_app(job_workers=0).state.ctx.notifier, NullNotifier)
    assert isinstance(offline_app(job_workers=2).state.ctx.notifier, JobQueue)


def test_routes_cover_both_collections(offline_app) -> None:
    app = offline_app()
    routes = {(r.path, m) for r in app.routes for m in getattr(r, "methods", set())}
    for collection, key in (("seats", "seat_code"), ("rooms", "room_code")):
        assert (f"/{collection}", "GET") in routes
        assert (f"/{collection}", "POST") in routes
        for method in ("GET", "PUT", "DELETE"):
            assert (f"/{collection}/{{{key}}}", method) in routes


@pytest.mark.asyncio
async def test_startup_fails_when_database_is_unreachable(offline_app) -> None:
    from sqlalchemy.exc import SQLAlchemyError

    app = offline_app(startup_ping_timeout_s=2)
    with pytest.raises((OSError, SQLAlchemyError)):
        async with app.router.lifespan_context(app):
            pass
    assert not app.state.ctx.jobs.running


@pytest.mark.asyncio
@pytest.mark.parametrize(("method", "path"), [("POST", "/seats"), ("PUT", "/seats/5")])
async def test_non_object_body_is_plain_text_400(offline_app, method, path) -> None:
    async with _client(offline_app()) as client:
        r = await client.request(method, path, json=[{"seat_code": 5}])
    assert r.status_code == 400
    assert r.headers["content-type"].startswith("text/plain")
    assert r.text == "invalid request data"


@pytest.mark.asyncio
async def test_create_with_null_fields_passes_validation(offline_app) -> None:
    async with _client(offline_app(query_timeout_s=5)) as client:
        r = await client.post("/seats", json={"seat_code": 5, "seat_background_color": None, "seat_width": None})
    # Reaches the (unreachable) database instead of being rejected as bad input.
    assert r.status_code == 500
    assert r.text == "failed to create seat"
