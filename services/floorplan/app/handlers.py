from __future__ import annotations

import json
import time
from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter, Request, Response, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError
from sqlalchemy.exc import IntegrityError

from services.floorplan.app.context import AppContext
from services.floorplan.app.db import row_to_dict
from services.floorplan.app.errors import BadRequest, NotFound
from services.floorplan.app.jobs import Job, Notifier
from services.floorplan.app.logging import logger
from services.floorplan.app.query import (
    build_delete,
    build_get_query,
    build_insert,
    build_list_query,
    build_update,
    parse_field_update,
    select_fields,
)
from services.floorplan.app.resources import Resource


def _path_key(request: Request, resource: Resource) -> int:
    raw = request.path_params.get(resource.key, "")
    try:
        return int(raw)
    except ValueError as e:
        raise BadRequest(f"invalid {resource.key}") from e


async def _json_body(request: Request) -> Any:  # noqa: ANN401 - arbitrary JSON
    try:
        return await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise BadRequest("invalid request data") from e


def _apply_defaults(resource: Resource, record: BaseModel) -> BaseModel:
    missing = {name: value for name, value in resource.defaults.items() if not getattr(record, name)}
    return record.model_copy(update=missing) if missing else record


def build_router(resource: Resource, ctx: AppContext, notifier: Notifier) -> APIRouter:
    """
    Register list/get/create/update/delete for one collection.

    `notifier` receives a Job after every successful update.
    """
    router = APIRouter(prefix=f"/{resource.collection}", tags=[resource.collection])
    item_path = f"/{{{resource.key}}}"
    label = resource.name.capitalize()

    async def fetch_one(key: int) -> BaseModel:
        async with ctx.sessionmaker() as session:
            row = (await session.execute(build_get_query(resource, key))).mappings().first()
        if row is None:
            raise NotFound(f"{label} not found")
        return resource.record_model.model_validate(row_to_dict(row))

    @router.get("", name=f"list_{resource.collection}")
    async def list_records(request: Request) -> JSONResponse:
        fields = select_fields(request.headers.get("X-Fields"), resource.columns)
        stmt = build_list_query(resource, fields, request.query_params)
        logger.info("list_query", resource=resource.name, sql=str(stmt), params=stmt.compile().params)

        async with ctx.deadline("failed to fetch data"):
            async with ctx.sessionmaker() as session:
                rows = (await session.execute(stmt)).mappings().all()
        return JSONResponse([row_to_dict(r) for r in rows])

    @router.get(item_path, response_model=resource.record_model, name=f"get_{resource.name}")
    async def get_record(request: Request) -> Any:  # noqa: ANN401
        key = _path_key(request, resource)
        async with ctx.deadline(f"failed to fetch {resource.name}"):
            return await fetch_one(key)

    @router.post(
        "",
        response_model=resource.record_model,
        status_code=status.HTTP_201_CREATED,
        name=f"create_{resource.name}",
    )
    async def create_record(request: Request) -> Any:  # noqa: ANN401
        body = await _json_body(request)
        if isinstance(body, dict):
            # null reads as "not sent"; _apply_defaults fills it in below.
            body = {k: v for k, v in body.items() if v is not None}
        try:
            record = resource.record_model.model_validate(body)
        except ValidationError as e:
            raise BadRequest("invalid request data") from e
        record = _apply_defaults(resource, record)
        values = record.model_dump(exclude={"auto_increment"})

        start = time.perf_counter()
        logger.info("record_create_started", resource=resource.name, record=values)
        async with ctx.deadline(f"failed to create {resource.name}"):
            try:
                async with ctx.sessionmaker.begin() as session:
                    row = (await session.execute(build_insert(resource, values))).mappings().one()
            except IntegrityError as e:
                if "duplicate key" in str(e):
                    raise BadRequest(f"{resource.name} code already exists") from e
                raise
            finally:
                elapsed_ms = int((time.perf_counter() - start) * 1000)
                logger.info("record_create_finished", resource=resource.name, elapsed_ms=elapsed_ms)
        return resource.record_model.model_validate(row_to_dict(row))

    @router.put(item_path, response_model=resource.record_model, name=f"update_{resource.name}")
    async def update_record(request: Request) -> Any:  # noqa: ANN401
        key = _path_key(request, resource)
        updates = parse_field_update(resource, key, await _json_body(request))

        async with ctx.deadline(f"failed to update {resource.name}"):
            async with ctx.sessionmaker.begin() as session:
                result = await session.execute(build_update(resource, key, updates))
            if result.rowcount == 0:
                raise NotFound(f"{label} not found")

            notifier.notify(
                Job(name=resource.job_name, data={resource.key: key, "time": datetime.now(tz=UTC)}),
            )
            return await fetch_one(key)

    @router.delete(item_path, status_code=status.HTTP_204_NO_CONTENT, name=f"delete_{resource.name}")
    async def delete_record(request: Request) -> Response:
        key = _path_key(request, resource)
        async with ctx.deadline(f"failed to delete {resource.name}"):
            async with ctx.sessionmaker.begin() as session:
                await session.execute(build_delete(resource, key))
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return router
