"""Exception handlers that render failures as ``{"error": ...}`` bodies."""

from __future__ import annotations

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .. import logging_manager as log_mgr
from ..errors import EcholingoError, ValidationError

logger = log_mgr.get_logger().getChild("webapi.errors")

INTERNAL_ERROR_MESSAGE = "Internal server error"


class ApiError(Exception):
    """Raised by routes to return a specific status with a stable message."""

    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        self.message = message
        super().__init__(message)


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


async def _handle_api_error(_request: Request, exc: ApiError) -> JSONResponse:
    return error_response(exc.status_code, exc.message)


async def _handle_validation_error(_request: Request, exc: ValidationError) -> JSONResponse:
    return error_response(status.HTTP_400_BAD_REQUEST, str(exc))


async def _handle_request_validation_error(
    _request: Request, exc: RequestValidationError
) -> JSONResponse:
    logger.info(
        "Rejected malformed request: %s",
        exc.errors(),
        extra={"event": "api.request.invalid", "status": 400},
    )
    return error_response(status.HTTP_400_BAD_REQUEST, "Invalid request body")


async def _handle_echolingo_error(request: Request, exc: EcholingoError) -> JSONResponse:
    logger.error(
        "Unhandled %s while serving %s: %s",
        exc.__class__.__name__,
        request.url.path,
        exc,
        exc_info=exc,
        extra={"event": "api.request.failed", "status": 500},
    )
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR_MESSAGE)


def register_exception_handlers(app: FastAPI) -> None:
    """Register the handlers shared by every echolingo router."""

    app.add_exception_handler(ApiError, _handle_api_error)
    app.add_exception_handler(ValidationError, _handle_validation_error)
    app.add_exception_handler(RequestValidationError, _handle_request_validation_error)
    app.add_exception_handler(EcholingoError, _handle_echolingo_error)


__all__ = ["ApiError", "INTERNAL_ERROR_MESSAGE", "error_response", "register_exception_handlers"]
