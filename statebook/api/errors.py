"""Exception handlers that turn failures into structured error bodies."""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from statebook.common.exceptions import PersistenceError, ValidationError
from statebook.common.logging import get_logger

logger = get_logger("api.errors")


def field_errors(exc: RequestValidationError) -> dict[str, list[str]]:
    fields: dict[str, list[str]] = {}
    for error in exc.errors():
        # drop the "body"/"query"/"path" prefix FastAPI puts in front of the field
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path", "form")]
        key = ".".join(loc) or "_"
        fields.setdefault(key, []).append(error.get("msg", "Invalid value"))
    return fields


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    error = ValidationError("Request validation failed", field_errors(exc))
    return JSONResponse(status_code=error.status_code, content={"detail": error.detail})


async def persistence_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception("Persistence failure on %s %s", request.method, request.url.path)
    error = PersistenceError()
    return JSONResponse(status_code=error.status_code, content={"detail": error.detail})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(SQLAlchemyError, persistence_error_handler)
