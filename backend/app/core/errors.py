"""BizDesk - Error taxonomy and request-boundary exception handlers."""
import logging
from enum import Enum
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.responses import error_response

logger = logging.getLogger(__name__)


class ErrorCode(str, Enum):
    BAD_REQUEST = "BAD_REQUEST"
    UNAUTHENTICATED = "UNAUTHENTICATED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    METHOD_NOT_ALLOWED = "METHOD_NOT_ALLOWED"
    CONFLICT = "CONFLICT"
    UNPROCESSABLE_ENTITY = "UNPROCESSABLE_ENTITY"
    TOO_MANY_REQUESTS = "TOO_MANY_REQUESTS"
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"


STATUS_CODES: dict[ErrorCode, int] = {
    ErrorCode.BAD_REQUEST: status.HTTP_400_BAD_REQUEST,
    ErrorCode.UNAUTHENTICATED: status.HTTP_401_UNAUTHORIZED,
    ErrorCode.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorCode.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.METHOD_NOT_ALLOWED: status.HTTP_405_METHOD_NOT_ALLOWED,
    ErrorCode.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorCode.UNPROCESSABLE_ENTITY: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorCode.TOO_MANY_REQUESTS: status.HTTP_429_TOO_MANY_REQUESTS,
    ErrorCode.INTERNAL_SERVER_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorCode.SERVICE_UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
}

_CODES_BY_STATUS = {code: error for error, code in STATUS_CODES.items()}

_DEFAULT_MESSAGES = {
    ErrorCode.BAD_REQUEST: "Bad request",
    ErrorCode.UNAUTHENTICATED: "Unauthenticated.",
    ErrorCode.FORBIDDEN: "This action is unauthorized.",
    ErrorCode.NOT_FOUND: "The requested resource was not found",
    ErrorCode.METHOD_NOT_ALLOWED: "The requested method is not allowed",
    ErrorCode.CONFLICT: "The request conflicts with the current state of the resource",
    ErrorCode.UNPROCESSABLE_ENTITY: "The given data was invalid.",
    ErrorCode.TOO_MANY_REQUESTS: "Too many requests. Please slow down.",
    ErrorCode.INTERNAL_SERVER_ERROR: "Internal server error",
    ErrorCode.SERVICE_UNAVAILABLE: "Service temporarily unavailable",
}


def error_code_for_status(status_code: int) -> ErrorCode:
    if status_code in _CODES_BY_STATUS:
        return _CODES_BY_STATUS[status_code]
    if status_code >= 500:
        return ErrorCode.INTERNAL_SERVER_ERROR
    return ErrorCode.BAD_REQUEST


class ApiError(Exception):
    """Client-safe error rendered through the error envelope."""

    code: ErrorCode = ErrorCode.INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str | None = None,
        *,
        code: ErrorCode | None = None,
        details: list[Any] | None = None,
        validation_errors: dict[str, list[str]] | None = None,
        headers: dict[str, str] | None = None,
    ):
        if code is not None:
            self.code = code
        self.message = message or _DEFAULT_MESSAGES[self.code]
        self.details = details or []
        self.validation_errors = validation_errors or {}
        self.headers = headers
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        return STATUS_CODES[self.code]


class NotFoundError(ApiError):
    code = ErrorCode.NOT_FOUND


class ConflictError(ApiError):
    code = ErrorCode.CONFLICT


class UnauthenticatedError(ApiError):
    code = ErrorCode.UNAUTHENTICATED


class ForbiddenError(ApiError):
    code = ErrorCode.FORBIDDEN


class ResourceValidationError(ApiError):
    """Raised when a payload fails the synthesized field rules."""

    code = ErrorCode.UNPROCESSABLE_ENTITY

    def __init__(self, field_errors: dict[str, list[str]], message: str | None = None):
        super().__init__(message, validation_errors=field_errors)

    @property
    def field_errors(self) -> dict[str, list[str]]:
        return self.validation_errors


def _field_key(loc: tuple) -> str:
    parts = [str(part) for part in loc if part not in ("body", "query", "path", "header")]
    return ".".join(parts) or "request"


def register_exception_handlers(app: FastAPI) -> None:
    """Translate every failure into the error envelope."""

    @app.exception_handler(ApiError)
    async def handle_api_error(request: Request, exc: ApiError):
        return error_response(
            exc.code,
            exc.message,
            exc.status_code,
            details=exc.details,
            validation_errors=exc.validation_errors,
            headers=exc.headers,
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        if any(err.get("type") == "json_invalid" for err in errors):
            return error_response(
                ErrorCode.BAD_REQUEST, "Invalid JSON payload", status.HTTP_400_BAD_REQUEST
            )
        field_errors: dict[str, list[str]] = {}
        for err in errors:
            message = str(err.get("msg")).removeprefix("Value error, ")
            field_errors.setdefault(_field_key(tuple(err.get("loc", ()))), []).append(message)
        return error_response(
            ErrorCode.UNPROCESSABLE_ENTITY,
            _DEFAULT_MESSAGES[ErrorCode.UNPROCESSABLE_ENTITY],
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            validation_errors=field_errors,
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        code = error_code_for_status(exc.status_code)
        message = exc.detail if isinstance(exc.detail, str) and exc.detail else _DEFAULT_MESSAGES[code]
        if code is ErrorCode.NOT_FOUND and message == "Not Found":
            message = _DEFAULT_MESSAGES[code]
        elif code is ErrorCode.METHOD_NOT_ALLOWED and message == "Method Not Allowed":
            message = _DEFAULT_MESSAGES[code]
        return error_response(code, message, exc.status_code, headers=getattr(exc, "headers", None))

    @app.exception_handler(Exception)
    async def handle_unhandled_error(request: Request, exc: Exception):
        logger.error(
            "Unhandled error on %s %s", request.method, request.url.path, exc_info=exc
        )
        return error_response(
            ErrorCode.INTERNAL_SERVER_ERROR,
            _DEFAULT_MESSAGES[ErrorCode.INTERNAL_SERVER_ERROR],
            status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
