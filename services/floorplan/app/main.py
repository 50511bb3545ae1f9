from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import sqlalchemy as sa
import uvicorn
from fastapi import FastAPI

from services.floorplan.app import observability
from services.floorplan.app.context import AppContext, build_context
from services.floorplan.app.db import mask_sensitive_url
from services.floorplan.app.errors import register_exception_handlers
from services.floorplan.app.handlers import build_router
from services.floorplan.app.jobs import JobProcessor, log_job
from services.floorplan.app.logging import configure_logging, logger
from services.floorplan.app.middleware import add_cors_middleware, add_request_logging
from services.floorplan.app.resources import RESOURCES
from services.floorplan.app.settings import FloorplanSettings, load_settings


SERVICE_NAME = "floorplan"


async def ping_database(ctx: AppContext, timeout_s: float) -> None:
    async with asyncio.timeout(timeout_s):
        async with ctx.engine.connect() as conn:
            await conn.execute(sa.text("SELECT 1"))


def _lifespan(ctx: AppContext):
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info("database_configured", database_url=mask_sensitive_url(ctx.settings.database_url))
        try:
            await ping_database(ctx, ctx.settings.startup_ping_timeout_s)
        except Exception:
            logger.exception("database_ping_failed")
            await ctx.engine.dispose()
            raise
        if ctx.jobs is not None:
            ctx.jobs.start()
        logger.info("service_started", host=ctx.settings.host, port=ctx.settings.port)
        yield
        if ctx.jobs is not None:
            await ctx.jobs.stop()
        await ctx.engine.dispose()
        logger.info("service_stopped")

    return lifespan


def create_app(settings: FloorplanSettings | None = None, *, processor: JobProcessor = log_job) -> FastAPI:
    settings = settings or load_settings()
    configure_logging(settings.log_level)
    ctx = build_context(settings, processor=processor)

    app = FastAPI(title="Floorplan API", version="0.1.0", lifespan=_lifespan(ctx))
    app.state.ctx = ctx
    register_exception_handlers(app, expose_db_errors=settings.expose_db_errors)

    for resource in RESOURCES:
        app.include_router(build_router(resource, ctx, ctx.notifier))

    @app.get("/healthz")
    async def healthz() -> dict:
        async with ctx.deadline("database unavailable"):
            async with ctx.sessionmaker() as session:
                await session.execute(sa.text("SELECT 1"))
        return {"ok": True}

    # Registration order matters: the last middleware added runs first.
    add_cors_middleware(app)
    observability.add_metrics(app)
    add_request_logging(app, debug=settings.debug)
    if settings.otel_enabled:
        observability.enable_tracing(app, ctx.engine, service_name=SERVICE_NAME)
    return app


def serve() -> None:
    settings = load_settings()
    uvicorn.run(
        "services.floorplan.app.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )

