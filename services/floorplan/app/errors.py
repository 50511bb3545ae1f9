from __future__ import annotations

from fastapi import FastAPI, Request, status
from fastapi.responses import PlainTextResponse

from services.floorplan.app.logging import logger


class ApiError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, *, detail: str | None = None):
        self.message = message
        # Raw driver text; only sent to clients when EXPOSE_DB_ERRORS is on.
        self.detail = detail
        super().__init__(message)


class BadRequest(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST


class NotFound(ApiError):
    status_code = status.HTTP_404_NOT_FOUND


class ServerError(ApiError):
    pass


def register_exception_handlers(app: FastAPI, *, expose_db_errors: bool = False) -> None:
    @app.exception_handler(ApiError)
    async def _api_error(request: Request, exc: ApiError) -> PlainTextResponse:
        body = exc.message
        if exc.status_code >= 500:
            logger.error(
                "request_failed",
                method=request.method,
                path=request.url.path,
                error=exc.message,
                detail=exc.detail,
            )
            if expose_db_errors and exc.detail:
                body = f"{exc.message}: {exc.detail}"
        else:
            logger.info("request_rejected", method=request.method, path=request.url.path, status=exc.status_code, error=exc.message)
        return PlainTextResponse(body, status_code=exc.status_code)
