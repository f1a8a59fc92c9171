"""
API error type and the global exception handlers.

Every error response has the same body: {"code": ..., "message": ...}.
"""

from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .logging import get_logger

logger = get_logger("errors")

# Default codes for framework-raised HTTP errors
HTTP_ERROR_CODES = {
    status.HTTP_404_NOT_FOUND: "not_found",
    status.HTTP_405_METHOD_NOT_ALLOWED: "method_not_allowed",
}


class ApiError(Exception):
    """Error with a stable public code, rendered as {code, message}."""

    def __init__(
        self,
        status_code: int,
        code: str,
        message: Optional[str] = None,
        headers: Optional[dict[str, str]] = None,
    ):
        super().__init__(message or code)
        self.status_code = status_code
        self.code = code
        self.message = message
        self.headers = headers

    def to_body(self) -> dict:
        return {"code": self.code, "message": self.message}

    def __repr__(self) -> str:
        return f"<ApiError({self.status_code}, code='{self.code}')>"


def error_response(status_code: int, code: str, message: Optional[str] = None, **extra) -> JSONResponse:
    body = {"code": code, "message": message}
    body.update(extra)
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body))


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("API error", extra={"code": exc.code, "path": request.url.path})
    response = error_response(exc.status_code, exc.code, exc.message)
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    code = HTTP_ERROR_CODES.get(exc.status_code, "http_error")
    message = exc.detail if isinstance(exc.detail, str) else None
    response = error_response(exc.status_code, code, message)
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return error_response(
        422,
        "validation_failed",
        "Request validation failed.",
        issues=exc.errors(),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "Unhandled error",
        exc_info=exc,
        extra={"method": request.method, "path": request.url.path},
    )
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "internal_server_error",
        "An unexpected server error occurred.",
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the handlers on the app."""
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
