from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging

from .errors import AppError, RateLimitError

logger = logging.getLogger(__name__)

_HTTP_CODES = {
    400: "VALIDATION_ERROR",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    409: "CONFLICT",
    429: "RATE_LIMITED",
}

INTERNAL_ERROR_BODY = {"errorCode": "INTERNAL_ERROR", "message": "An internal error occurred"}


def _validation_details(errors) -> dict[str, list[str]]:
    """pydantic errors -> {"contact.companyName": ["Field required"], ...}"""
    details: dict[str, list[str]] = {}
    for error in errors:
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        field = ".".join(loc) or "request"
        details.setdefault(field, []).append(error.get("msg", "invalid"))
    return details


def register_exception_handlers(app):
    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        if exc.status_code >= 500:
            logger.error(f"[AppError] {exc.code}: {exc.message} | Path={request.url.path}")
        else:
            logger.info(f"[AppError] {exc.code}: {exc.message} | Path={request.url.path}")

        headers = None
        if isinstance(exc, RateLimitError):
            headers = {
                "Retry-After": str(exc.retry_after),
                "X-RateLimit-Reset": str(exc.reset_at_ms),
            }

        return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.warning(f"[ValidationError] Path={request.url.path} | {exc.errors()}")
        return JSONResponse(
            status_code=400,
            content={
                "errorCode": "VALIDATION_ERROR",
                "message": "Invalid request",
                "details": _validation_details(exc.errors()),
            },
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        logger.warning(f"[HTTPException] {exc.detail} | Path={request.url.path}")
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "errorCode": _HTTP_CODES.get(exc.status_code, "HTTP_ERROR"),
                "message": str(exc.detail),
            },
        )

    @app.exception_handler(SQLAlchemyError)
    async def database_exception_handler(request: Request, exc: SQLAlchemyError):
        logger.exception(f"[DatabaseError] {request.method} {request.url.path}: {exc}")
        return JSONResponse(status_code=500, content=INTERNAL_ERROR_BODY)

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.exception(f"[UnhandledError] {request.method} {request.url.path}: {exc}")
        return JSONResponse(status_code=500, content=INTERNAL_ERROR_BODY)
