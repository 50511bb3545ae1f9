"""
Statement construction for the seat and room collections.

Identifiers only ever come from a Resource's allow-lists; every client-supplied value
is a bound parameter.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from enum import StrEnum
from typing import Any

import sqlalchemy as sa
from pydantic import ValidationError

from services.floorplan.app.errors import BadRequest
from services.floorplan.app.resources import Resource


FieldUpdate = dict[StrEnum, int | str]


def select_fields(header: str | None, allowed: Sequence[str]) -> list[str]:
    """
    Resolve an `X-Fields` header against the allow-list.

    Unknown names are dropped; if none survive the full allow-list is used (fail-open).
    """
    if not header:
        return list(allowed)
    allowed_set = set(allowed)
    fields: list[str] = []
    for name in header.split(","):
        name = name.strip()
        if name in allowed_set and name not in fields:
            fields.append(name)
    return fields or list(allowed)


def _int_param(name: str, value: str) -> int:
    try:
        return int(value)
    except ValueError as e:
        raise BadRequest(f"invalid {name} value") from e


def filter_conditions(resource: Resource, params: Mapping[str, str]) -> list[Any]:
    where: list[Any] = []
    for name in resource.filters:
        value = params.get(name)
        if value:
            where.append(resource.column(name) == _int_param(name, value))
    if resource.searchable:
        search = params.get("search")
        if search:
            where.append(resource.column(resource.title).like(f"%{search}%"))
    return where


def sort_clause(resource: Resource, sort: str | None) -> Any:
    if not sort:
        if resource.default_sort:
            return resource.column(resource.default_sort).asc()
        return None
    descending = sort.startswith("-")
    name = sort[1:] if descending else sort
    if name not in resource.sortable:
        return None
    col = resource.column(name)
    return col.desc() if descending else col.asc()


def build_list_query(resource: Resource, fields: Sequence[str], params: Mapping[str, str]) -> sa.Select:
    q = sa.select(*(resource.column(f) for f in fields))
    where = filter_conditions(resource, params)
    if where:
        q = q.where(sa.and_(*where))
    order = sort_clause(resource, params.get("sort"))
    if order is not None:
        q = q.order_by(order)
    return q


def build_get_query(resource: Resource, key: int) -> sa.Select:
    return sa.select(resource.table).where(resource.column(resource.key) == key)


def build_insert(resource: Resource, values: Mapping[str, Any]) -> sa.Insert:
    unknown = set(values) - set(resource.columns)
    if unknown:
        raise ValueError(f"unknown {resource.name} columns: {sorted(unknown)}")
    return sa.insert(resource.table).values(dict(values)).returning(*resource.table.c)


def build_update(resource: Resource, key: int, updates: FieldUpdate) -> sa.Update:
    if not updates:
        raise ValueError("update set must not be empty")
    return (
        sa.update(resource.table)
        .where(resource.column(resource.key) == key)
        .values({resource.column(f.value): v for f, v in updates.items()})
    )


def build_delete(resource: Resource, key: int) -> sa.Delete:
    return sa.delete(resource.table).where(resource.column(resource.key) == key)


def parse_field_update(resource: Resource, key: int, body: Any) -> FieldUpdate:  # noqa: ANN401 - raw JSON body
    """
    Turn a PUT body into a typed field update.

    - A business key in the body must be a number equal to the path key; it is then dropped.
    - Keys outside the resource's updatable fields are ignored, but at least one must remain.
    - Surviving values are validated against the field types (null is not accepted).
    """
    if not isinstance(body, dict):
        raise BadRequest("invalid request data")
    data = dict(body)

    if resource.key in data:
        body_key = data.pop(resource.key)
        if isinstance(body_key, bool) or not isinstance(body_key, (int, float)):
            raise BadRequest(f"invalid {resource.key} value")
        if body_key != key:
            raise BadRequest(f"{resource.key} in URL and body differ")

    if not data:
        raise BadRequest("no fields to update")

    allowed = {k: v for k, v in data.items() if k in resource.updatable}
    if not allowed:
        raise BadRequest("no valid fields to update")

    nulls = sorted(k for k, v in allowed.items() if v is None)
    if nulls:
        raise BadRequest(f"invalid value for {', '.join(nulls)}")
    try:
        parsed = resource.update_model.model_validate(allowed)
    except ValidationError as e:
        bad = sorted({str(err["loc"][0]) for err in e.errors() if err.get("loc")})
        raise BadRequest(f"invalid value for {', '.join(bad) or 'update'}") from e

    return {resource.field_enum(k): v for k, v in parsed.model_dump(exclude_unset=True).items()}
