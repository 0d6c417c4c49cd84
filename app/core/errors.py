import logging
from typing import Any, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base class for errors rendered as ``{"error": ..., "details": ...}``"""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        body = {"error": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class ValidationFailed(AppError):
    status_code = status.HTTP_400_BAD_REQUEST


class IdentityRequired(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED


class NotFoundOrDenied(AppError):
    status_code = status.HTTP_404_NOT_FOUND


class StoreError(AppError):
    """The hosted store answered with a non-2xx status or could not be reached.

    ``status`` is the store's HTTP status when it answered, else ``None``.
    """

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, details: Optional[Any] = None, status: Optional[int] = None):
        super().__init__(message, details)
        self.status = status


class StoreTimeout(StoreError):
    status_code = status.HTTP_504_GATEWAY_TIMEOUT


def _describe_validation_errors(errors) -> str:
    fields = []
    for error in errors:
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        if loc:
            fields.append(".".join(loc))
    if not fields:
        return "Invalid request"
    return "Missing or invalid field: " + ", ".join(dict.fromkeys(fields))


async def app_error_handler(request: Request, exc: AppError):
    if isinstance(exc, StoreError):
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, IdentityRequired) else None
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": _describe_validation_errors(errors),
            "details": [
                {"loc": list(error.get("loc", ())), "msg": error.get("msg"), "type": error.get("type")}
                for error in errors
            ],
        },
    )


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    detail = exc.detail
    if exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
        detail = "Method not allowed"
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": detail},
        headers=getattr(exc, "headers", None),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
