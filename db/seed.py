from __future__ import annotations

import argparse
import json
import os
import random
import string
from typing import Any

import sqlalchemy as sa

from db.settings import SETTINGS
from services.floorplan.app.resources import ROOMS, SEATS, Resource
from services.floorplan.app.tables import metadata


# Grid geometry in layout units; matches the API's default 100x100 tiles.
TILE = 100
GAP = 10
PALETTE = ["#FFFFFF", "#F4E3B2", "#D6EAF8", "#D5F5E3", "#FADBD8"]


def sync_database_url(url: str) -> str:
    # Seeding uses a sync driver. Normalize common runtime URLs.
    url = url.replace("postgresql+asyncpg://", "postgresql+psycopg://")
    url = url.replace("postgresql+psycopg2://", "postgresql+psycopg://")
    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql+psycopg://", 1)
    if url.startswith("postgresql://"):
        url = url.replace("postgresql://", "postgresql+psycopg://", 1)
    return url


def create_schema(database_url: str) -> None:
    """Create seat_table / room_table if they do not exist yet (no migrations)."""
    engine = sa.create_engine(sync_database_url(database_url), future=True)
    try:
        metadata.create_all(engine)
    finally:
        engine.dispose()


def _row_label(i: int) -> str:
    letters = string.ascii_uppercase
    return letters[i % len(letters)] * (1 + i // len(letters))


def layout_rows(
    resource: Resource,
    n: int,
    *,
    company_code: int,
    per_row: int,
    rng: random.Random,
    code_start: int = 1,
) -> list[dict[str, Any]]:
    """
    Place `n` tiles on a grid, `per_row` per line, titled A1, A2, ... B1, ...
    """
    prefix = resource.name
    rows: list[dict[str, Any]] = []
    for i in range(n):
        line, col = divmod(i, per_row)
        rows.append(
            {
                "company_code": company_code,
                resource.key: code_start + i,
                resource.title: f"{_row_label(line)}{col + 1}",
                "title_background_color": "#000000",
                "title_text_color": "#FFFFFF",
                f"{prefix}_background_color": rng.choice(PALETTE),
                f"{prefix}_top": line * (TILE + GAP),
                f"{prefix}_left": col * (TILE + GAP),
                f"{prefix}_width": TILE,
                f"{prefix}_height": TILE,
                "gender": rng.choice([0, 0, 1, 2]),
                "waiting": 0,
                "release": 0,
                "hide_title": 0,
                "transparent_background": 0,
                "hide_border": 0,
                "kiosk_disabled": 1 if rng.random() < 0.1 else 0,
                "power_control": 1 if rng.random() < 0.5 else 0,
                "breaker_number": 1 + i // per_row,
            }
        )
    return rows


def seed(
    database_url: str,
    seed_value: int,
    seats_n: int,
    rooms_n: int,
    *,
    company_code: int = 1,
    per_row: int = 10,
) -> dict[str, int]:
    rng = random.Random(seed_value)
    create_schema(database_url)
    engine = sa.create_engine(sync_database_url(database_url), future=True)

    seat_rows = layout_rows(SEATS, seats_n, company_code=company_code, per_row=per_row, rng=rng)
    room_rows = layout_rows(ROOMS, rooms_n, company_code=company_code, per_row=max(1, per_row // 2), rng=rng)

    # Truncate existing rows for deterministic idempotence in dev.
    try:
        with engine.begin() as conn:
            conn.execute(sa.text(f"TRUNCATE TABLE {SEATS.table.name}, {ROOMS.table.name} RESTART IDENTITY"))
            if seat_rows:
                conn.execute(SEATS.table.insert(), seat_rows)
            if room_rows:
                conn.execute(ROOMS.table.insert(), room_rows)

            counts = {}
            for resource in (SEATS, ROOMS):
                counts[resource.table.name] = conn.execute(
                    sa.select(sa.func.count()).select_from(resource.table)
                ).scalar_one()
    finally:
        engine.dispose()

    print(json.dumps({"seed": seed_value, "company_code": company_code, "counts": counts}, indent=2))
    return counts


def main() -> None:
    parser = argparse.ArgumentParser(description="Create the seat/room tables and load a sample layout.")
    parser.add_argument("--database-url", default=os.getenv("DATABASE_URL") or SETTINGS.database_url)
    parser.add_argument("--company-code", type=int, default=SETTINGS.company_code)
    parser.add_argument("--seed", type=int, default=1337)
    parser.add_argument("--seats", type=int, default=40)
    parser.add_argument("--rooms", type=int, default=8)
    parser.add_argument("--per-row", type=int, default=10)
    parser.add_argument("--schema-only", action="store_true", help="Only create missing tables; insert nothing.")
    args = parser.parse_args()

    if args.schema_only:
        create_schema(args.database_url)
        return
    seed(
        args.database_url,
        args.seed,
        args.seats,
        args.rooms,
        company_code=args.company_code,
        per_row=args.per_row,
    )


if __name__ == "__main__":
    main()
