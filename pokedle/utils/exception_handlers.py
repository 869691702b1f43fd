from typing import cast

from fastapi import HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger

from pokedle.core.exceptions import GameError
from pokedle.schemas.common import APIResponse


def _error_response(
    status_code: int, message: str, *, headers: dict[str, str] | None = None, data: object = None
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=APIResponse(status="error", message=message, data=data).model_dump(),
        headers=headers,
    )


def http_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    exc = cast(HTTPException, exc)
    if isinstance(exc, GameError) and exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        # Broken catalog data, not a client mistake
        logger.error(
            f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.detail}"
        )
    return _error_response(exc.status_code, str(exc.detail), headers=exc.headers)


def validation_exception_handler(_request: Request, exc: Exception) -> JSONResponse:
    exc = cast(RequestValidationError, exc)
    return _error_response(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "Validation error",
        data=[{"loc": err["loc"], "msg": err["msg"], "type": err["type"]} for err in exc.errors()],
    )


def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.opt(exception=exc).error(f"Unhandled error on {request.method} {request.url.path}")
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")
