"""
API error taxonomy and the JSON error envelope.

Every failure the client sees is `{"error": "<message>"}`. Internal detail
(the exception chained via `raise ... from exc`) is logged, never returned.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class ApiError(Exception):
    status_code = 500
    message = "Internal error"

    def __init__(self, message: str | None = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)


# Bad input shape or content. Raised before any store call.
class InvalidInputError(ApiError):
    status_code = 400
    message = "Invalid request"


class NotFoundError(ApiError):
    status_code = 404
    message = "Not found"


class PersistenceError(ApiError):
    status_code = 500
    message = "DB error"


# Liveness check failed.
class UnavailableError(ApiError):
    status_code = 503
    message = "DB not available"


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


async def _api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    cause = exc.__cause__
    if cause is not None:
        logger.error(
            "http_error status=%s error=%r path=%s internal=%r",
            exc.status_code,
            exc.message,
            request.url.path,
            cause,
        )
    else:
        logger.info("http_error status=%s error=%r path=%s", exc.status_code, exc.message, request.url.path)
    return error_response(exc.status_code, exc.message)


async def _http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    logger.info("http_error status=%s error=%r path=%s", exc.status_code, exc.detail, request.url.path)
    response = error_response(exc.status_code, str(exc.detail))
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info("http_error status=400 error='Invalid request' path=%s internal=%r", request.url.path, exc.errors())
    return error_response(400, "Invalid request")


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "http_error status=500 error='Internal server error' path=%s internal=%r",
        request.url.path,
        exc,
        exc_info=exc,
    )
    return error_response(500, "Internal server error")


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApiError, _api_error_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    # Starlette answers with this from its outermost middleware, then re-raises for the server.
    app.add_exception_handler(Exception, _unhandled_error_handler)
