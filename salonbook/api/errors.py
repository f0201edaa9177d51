"""Exception handlers: domain errors and driver failures to JSON responses."""
from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from salonbook.core.exceptions import RemoteFailure, SalonbookError

logger = logging.getLogger(__name__)


async def salonbook_error_handler(request: Request, exc: SalonbookError) -> JSONResponse:
    if exc.http_status >= 500:
        logger.error("%s %s failed: %r", request.method, request.url.path, exc, exc_info=exc.cause)
    else:
        logger.info("%s %s rejected: %s (%s)", request.method, request.url.path, exc.message, exc.code)
    return JSONResponse(status_code=exc.http_status, content=exc.to_dict())


async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception("%s %s: database error", request.method, request.url.path)
    failure = RemoteFailure("Database request failed")
    return JSONResponse(status_code=failure.http_status, content=failure.to_dict())


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(SalonbookError, salonbook_error_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
