"""Uniform `{success, data | error}` envelope and the handlers that render errors."""

from __future__ import annotations

from typing import Any, Generic, Optional, TypeVar

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from spacebook.domain.errors import AppError, UnexpectedError
from spacebook.utils.logger import get_logger


logger = get_logger(__name__)

T = TypeVar("T")

_HTTP_KINDS = {
    status.HTTP_400_BAD_REQUEST: "ValidationError",
    status.HTTP_401_UNAUTHORIZED: "Unauthorized",
    status.HTTP_403_FORBIDDEN: "Forbidden",
    status.HTTP_404_NOT_FOUND: "NotFound",
    status.HTTP_405_METHOD_NOT_ALLOWED: "MethodNotAllowed",
    status.HTTP_409_CONFLICT: "Conflict",
    status.HTTP_503_SERVICE_UNAVAILABLE: "Unavailable",
}


class ErrorDetail(BaseModel):
    message: str
    kind: str
    code: Optional[str] = None


class Envelope(BaseModel, Generic[T]):
    success: bool = True
    data: T


class MessageResponse(BaseModel):
    message: str


def ok(data: Any) -> dict[str, Any]:
    return {"success": True, "data": data}


def error_response(
    status_code: int,
    message: str,
    kind: str,
    code: Optional[str] = None,
    headers: Optional[dict[str, str]] = None,
) -> JSONResponse:
    detail = ErrorDetail(message=message, kind=kind, code=code)
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": detail.model_dump(exclude_none=True)},
        headers=headers,
    )


async def _handle_app_error(request: Request, exc: AppError) -> JSONResponse:
    if isinstance(exc, UnexpectedError):
        logger.error("Unexpected failure on %s %s: %s", request.method, request.url.path, exc.message)
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == status.HTTP_401_UNAUTHORIZED else None
    return error_response(exc.status_code, exc.public_message, exc.kind, exc.code, headers)


async def _handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    kind = _HTTP_KINDS.get(exc.status_code, "HTTPError")
    return error_response(exc.status_code, str(exc.detail), kind, headers=getattr(exc, "headers", None))


async def _handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        problems.append(f"{location}: {error.get('msg', 'invalid value')}" if location else error.get("msg", ""))
    message = "; ".join(problems) or "invalid request"
    return error_response(status.HTTP_400_BAD_REQUEST, message, "ValidationError", "request_invalid")


async def _handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled failure on %s %s", request.method, request.url.path)
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "internal server error",
        "Unexpected",
    )


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, _handle_app_error)
    app.add_exception_handler(StarletteHTTPException, _handle_http_exception)
    app.add_exception_handler(RequestValidationError, _handle_request_validation)
    app.add_exception_handler(Exception, _handle_unexpected)
