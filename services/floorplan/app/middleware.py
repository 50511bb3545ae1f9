from __future__ import annotations

import time
from collections.abc import Callable
from http import HTTPStatus

from fastapi import FastAPI, Request, Response

from services.floorplan.app.logging import logger


CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, X-Fields",
}


def client_ip(request: Request) -> str:
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for
    return request.client.host if request.client else "unknown"


def add_cors_middleware(app: FastAPI) -> None:
    """
    Every response gets permissive CORS headers; any OPTIONS request is answered with 200
    before routing, whether or not it is a well-formed preflight.
    """

    @app.middleware("http")
    async def _cors(request: Request, call_next: Callable) -> Response:
        if request.method == "OPTIONS":
            resp = Response(status_code=HTTPStatus.OK)
        else:
            resp = await call_next(request)
        for name, value in CORS_HEADERS.items():
            resp.headers[name] = value
        return resp


def add_request_logging(app: FastAPI, *, debug: bool = False) -> None:
    @app.middleware("http")
    async def _log_requests(request: Request, call_next: Callable) -> Response:
        start = time.perf_counter()
        method = request.method
        path = request.url.path
        logger.info("request_started", method=method, path=path, client_ip=client_ip(request))
        if debug:
            logger.info("request_headers", method=method, path=path, headers=dict(request.headers))

        resp = await call_next(request)

        try:
            reason = HTTPStatus(resp.status_code).phrase
        except ValueError:
            reason = ""
        logger.info(
            "request_finished",
            method=method,
            path=path,
            status=resp.status_code,
            reason=reason,
            duration_ms=int((time.perf_counter() - start) * 1000),
        )
        return resp
