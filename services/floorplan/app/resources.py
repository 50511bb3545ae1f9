from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

import sqlalchemy as sa
from pydantic import BaseModel

from services.floorplan.app.schemas import Room, RoomField, RoomUpdate, Seat, SeatField, SeatUpdate
from services.floorplan.app.tables import room_table, seat_table


@dataclass(frozen=True)
class Resource:
    """
    Everything that differs between the seat and room collections.

    Handlers, the query builder and the seed script are written once against this
    description; adding a filter or sort key to a collection is a change here only.
    """

    name: str
    collection: str
    table: sa.Table
    key: str
    title: str
    record_model: type[BaseModel]
    field_enum: type[StrEnum]
    update_model: type[BaseModel]
    job_name: str
    # Exact-match query parameters (all integer columns).
    filters: tuple[str, ...] = ()
    searchable: bool = False
    sortable: tuple[str, ...] = ()
    default_sort: str | None = None
    # Applied on create when the client sent a zero/empty value.
    defaults: Mapping[str, Any] = field(default_factory=dict)

    @property
    def columns(self) -> list[str]:
        return [c.name for c in self.table.c]

    @property
    def updatable(self) -> frozenset[str]:
        return frozenset(f.value for f in self.field_enum)

    def column(self, name: str) -> sa.Column:
        return self.table.c[name]


def _defaults(prefix: str) -> dict[str, Any]:
    return {
        f"{prefix}_width": 100,
        f"{prefix}_height": 100,
        f"{prefix}_background_color": "#FFFFFF",
        "title_background_color": "#000000",
        "title_text_color": "#FFFFFF",
    }


SEATS = Resource(
    name="seat",
    collection="seats",
    table=seat_table,
    key="seat_code",
    title="seat_title",
    record_model=Seat,
    field_enum=SeatField,
    update_model=SeatUpdate,
    job_name="SeatUpdated",
    filters=("company_code", "seat_code", "gender", "waiting", "release", "kiosk_disabled", "power_control"),
    searchable=True,
    sortable=("seat_code", "seat_title", "auto_increment"),
    default_sort="seat_code",
    defaults=_defaults("seat"),
)

# Room listing has no filter/search/sort support; see DESIGN.md (open questions).
ROOMS = Resource(
    name="room",
    collection="rooms",
    table=room_table,
    key="room_code",
    title="room_title",
    record_model=Room,
    field_enum=RoomField,
    update_model=RoomUpdate,
    job_name="RoomUpdated",
    defaults=_defaults("room"),
)

RESOURCES: tuple[Resource, ...] = (SEATS, ROOMS)
