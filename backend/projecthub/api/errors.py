"""Exception handlers — every error response body is ``{"error": "<message>"}``.

The frontend reads ``error`` from failed responses, so FastAPI's default
``detail`` key is not used.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from projecthub.services.errors import EnumValidationError, RecordError

logger = structlog.stdlib.get_logger("projecthub.errors")


async def record_error_handler(request: Request, exc: RecordError) -> JSONResponse:
    logger.info(
        "request_rejected",
        method=request.method,
        path=request.url.path,
        error=exc.message,
        status=exc.status_code,
    )
    content: dict = {"error": exc.message}
    if isinstance(exc, EnumValidationError):
        content["errors"] = exc.errors
    return JSONResponse(status_code=exc.status_code, content=content)


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    first = exc.errors()[0] if exc.errors() else {}
    location = ".".join(str(part) for part in first.get("loc", ()))
    message = first.get("msg", "Invalid request")
    return JSONResponse(
        status_code=422,
        content={"error": f"{location}: {message}" if location else message},
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_error", method=request.method, path=request.url.path)
    return JSONResponse(status_code=500, content={"error": str(exc) or "Internal server error"})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RecordError, record_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(HTTPException, http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(
        RequestValidationError, validation_exception_handler  # type: ignore[arg-type]
    )
    app.add_exception_handler(Exception, unhandled_exception_handler)
