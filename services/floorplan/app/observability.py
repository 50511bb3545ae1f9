from __future__ import annotations

import time
from collections.abc import Callable

from fastapi import FastAPI, Request, Response
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    GCCollector,
    Histogram,
    PlatformCollector,
    ProcessCollector,
    generate_latest,
)
from sqlalchemy.ext.asyncio import AsyncEngine

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor


LATENCY_BUCKETS_MS = (1, 5, 10, 25, 50, 100, 250, 500, 1000, 2500, 5000, 10000)

REGISTRY = CollectorRegistry()
ProcessCollector(registry=REGISTRY)
PlatformCollector(registry=REGISTRY)
GCCollector(registry=REGISTRY)

HTTP_REQUESTS_TOTAL = Counter(
    "floorplan_http_requests_total",
    "Requests answered, by route template and status class",
    ["route", "method", "status"],
    registry=REGISTRY,
)
HTTP_LATENCY = Histogram(
    "floorplan_http_latency_ms",
    "Time from request received to response returned, in milliseconds",
    ["route", "method"],
    buckets=LATENCY_BUCKETS_MS,
    registry=REGISTRY,
)

# outcome: enqueued | dropped | processed | timed_out | failed
JOB_EVENTS_TOTAL = Counter(
    "floorplan_job_events_total",
    "Notification job lifecycle events",
    ["job", "outcome"],
    registry=REGISTRY,
)
JOB_LATENCY = Histogram(
    "floorplan_job_latency_ms",
    "Processing time of notification jobs that completed, in milliseconds",
    ["job"],
    buckets=LATENCY_BUCKETS_MS,
    registry=REGISTRY,
)


def route_template(request: Request) -> str:
    # e.g. /seats/{seat_code} rather than /seats/17; OPTIONS never reaches routing.
    route = request.scope.get("route")
    return getattr(route, "path", None) or "unmatched"


def status_class(status_code: int) -> str:
    return f"{status_code // 100}xx"


def enable_tracing(app: FastAPI, engine: AsyncEngine, service_name: str) -> None:
    """
    Export spans for every request and every SQL statement over OTLP/HTTP.

    The exporter reads its endpoint from the standard OTEL_EXPORTER_OTLP_* variables.
    """
    provider = TracerProvider(resource=Resource.create({"service.name": service_name}))
    provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter()))
    trace.set_tracer_provider(provider)
    FastAPIInstrumentor.instrument_app(app, excluded_urls="metrics,healthz")
    SQLAlchemyInstrumentor().instrument(engine=engine.sync_engine)


def add_metrics(app: FastAPI) -> None:
    @app.middleware("http")
    async def _record(request: Request, call_next: Callable) -> Response:
        start = time.perf_counter()
        resp = await call_next(request)
        route = route_template(request)
        HTTP_LATENCY.labels(route, request.method).observe((time.perf_counter() - start) * 1000)
        HTTP_REQUESTS_TOTAL.labels(route, request.method, status_class(resp.status_code)).inc()
        return resp

    @app.get("/metrics", include_in_schema=False)
    async def metrics() -> Response:
        return Response(generate_latest(REGISTRY), media_type=CONTENT_TYPE_LATEST)
