from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest
import sqlalchemy as sa
from testcontainers.postgres import PostgresContainer


REPO_ROOT = Path(__file__).resolve().parents[1]
# Ensure the monorepo root is importable (so `import services.*` and `import db.*` work in tests).
sys.path.insert(0, str(REPO_ROOT))


@pytest.fixture(scope="session")
def postgres_url() -> str:
    with PostgresContainer("postgres:16") as pg:
        yield pg.get_connection_url()


@pytest.fixture(scope="session")
def schema_db(postgres_url: str) -> str:
    from db.seed import create_schema, sync_database_url

    create_schema(postgres_url)
    # The service normalizes any postgres URL to asyncpg itself.
    os.environ["DATABASE_URL"] = postgres_url
    return sync_database_url(postgres_url)


@pytest.fixture()
def clean_db(schema_db: str) -> str:
    engine = sa.create_engine(schema_db, future=True)
    try:
        with engine.begin() as conn:
            conn.execute(sa.text("TRUNCATE TABLE seat_table, room_table RESTART IDENTITY"))
    finally:
        engine.dispose()
    return schema_db


@pytest.fixture()
def make_app(clean_db: str):
    """Build an app bound to the test database; keyword arguments override settings."""
    from services.floorplan.app.jobs import log_job
    from services.floorplan.app.main import create_app
    from services.floorplan.app.settings import FloorplanSettings

    def _make(processor=log_job, **overrides):
        settings = FloorplanSettings(database_url=clean_db, **overrides)
        return create_app(settings, processor=processor)

    return _make
