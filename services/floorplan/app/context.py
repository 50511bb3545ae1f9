from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from services.floorplan.app.db import create_engine, create_sessionmaker
from services.floorplan.app.errors import ServerError
from services.floorplan.app.jobs import JobProcessor, JobQueue, Notifier, NullNotifier, log_job
from services.floorplan.app.settings import FloorplanSettings


@dataclass
class AppContext:
    """Process-wide collaborators, built once in create_app() and handed to each router."""

    settings: FloorplanSettings
    engine: AsyncEngine
    sessionmaker: async_sessionmaker[AsyncSession]
    jobs: JobQueue | None = None

    @property
    def notifier(self) -> Notifier:
        return self.jobs if self.jobs is not None else NullNotifier()

    @asynccontextmanager
    async def deadline(self, failure_message: str) -> AsyncIterator[None]:
        """
        Bound a block of database work by QUERY_TIMEOUT_S.

        Timeouts, driver errors and refused connections become a ServerError carrying
        `failure_message`. ApiErrors raised inside the block pass through unchanged.
        """
        try:
            async with asyncio.timeout(self.settings.query_timeout_s):
                yield
        except TimeoutError as e:
            raise ServerError(failure_message, detail=f"query exceeded {self.settings.query_timeout_s}s") from e
        except SQLAlchemyError as e:
            raise ServerError(failure_message, detail=str(e.orig) if getattr(e, "orig", None) else str(e)) from e
        except OSError as e:
            # asyncpg raises connection failures unwrapped.
            raise ServerError(failure_message, detail=str(e) or type(e).__name__) from e


def build_context(settings: FloorplanSettings, *, processor: JobProcessor = log_job) -> AppContext:
    engine = create_engine(settings.database_url)
    jobs = None
    if settings.job_workers > 0:
        jobs = JobQueue(
            capacity=settings.job_queue_size,
            workers=settings.job_workers,
            timeout_s=settings.job_timeout_s,
            processor=processor,
        )
    return AppContext(settings=settings, engine=engine, sessionmaker=create_sessionmaker(engine), jobs=jobs)
