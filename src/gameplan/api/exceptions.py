from __future__ import annotations

import datetime as dt
import traceback
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import DBAPIError  # type: ignore[import-not-found]
from starlette import status
from starlette.exceptions import HTTPException as StarletteHTTPException

from gameplan.commons.exceptions import BaseServiceException
from gameplan.commons.logging import logger
from gameplan.core import db_errors
from gameplan.core.settings import settings

_HTTP_CODES = {
    status.HTTP_400_BAD_REQUEST: "BAD_REQUEST",
    status.HTTP_401_UNAUTHORIZED: "UNAUTHORIZED",
    status.HTTP_403_FORBIDDEN: "FORBIDDEN",
    status.HTTP_404_NOT_FOUND: "NOT_FOUND",
    status.HTTP_405_METHOD_NOT_ALLOWED: "METHOD_NOT_ALLOWED",
    status.HTTP_413_CONTENT_TOO_LARGE: "REQUEST_TOO_LARGE",
    status.HTTP_429_TOO_MANY_REQUESTS: "TOO_MANY_REQUESTS",
}


def error_envelope(
    request: Request,
    *,
    code: str,
    message: str,
    details: Any = None,
    stack: str | None = None,
) -> dict[str, Any]:
    error: dict[str, Any] = {"code": code, "message": message}
    if details:
        error["details"] = details
    if stack and settings.is_debug():
        error["stack"] = stack
    return {
        "success": False,
        "error": error,
        "timestamp": dt.datetime.now(dt.UTC).isoformat(),
        "path": request.url.path,
        "method": request.method,
    }


def _error_response(
    request: Request,
    status_code: int,
    *,
    code: str,
    message: str,
    details: Any = None,
    stack: str | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=error_envelope(
            request, code=code, message=message, details=details, stack=stack
        ),
        headers=headers,
    )


def _validation_errors(exc: RequestValidationError) -> list[dict[str, Any]]:
    errors = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ())]
        location = loc[0] if loc else None
        field = ".".join(loc[1:]) if len(loc) > 1 else None
        errors.append(
            {
                "field": field,
                # pydantic prefixes custom validator messages with "Value error, "
                "message": str(err.get("msg", "")).removeprefix("Value error, "),
                "location": location,
            }
        )
    return errors


def configure_global_exception_handlers(app: FastAPI) -> FastAPI:
    @app.exception_handler(BaseServiceException)
    async def service_exception_handler(
        request: Request, exc: BaseServiceException
    ) -> JSONResponse:
        return _error_response(
            request,
            exc.status_code,
            code=exc.code,
            message=exc.message,
            details=exc.details,
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return _error_response(
            request,
            status.HTTP_400_BAD_REQUEST,
            code="VALIDATION_ERROR",
            message="Validation failed",
            details={"errors": _validation_errors(exc)},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        if exc.status_code == status.HTTP_404_NOT_FOUND:
            logger.info("404 Not Found: %s %s", request.method, request.url.path)
            return _error_response(
                request,
                exc.status_code,
                code="NOT_FOUND",
                message=f"Cannot {request.method} {request.url.path}",
                details={
                    "method": request.method,
                    "path": request.url.path,
                    "suggestion": "Check the URL and HTTP method",
                },
            )
        return _error_response(
            request,
            exc.status_code,
            code=_HTTP_CODES.get(exc.status_code, "HTTP_ERROR"),
            message=str(exc.detail),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(DBAPIError)
    async def database_exception_handler(
        request: Request, exc: DBAPIError
    ) -> JSONResponse:
        violation = db_errors.classify(exc)
        if violation is None:
            return await unhandled_exception_handler(request, exc)
        translated = db_errors.translate(violation)
        return _error_response(
            request,
            translated.status_code,
            code=translated.code,
            message=translated.message,
            details=translated.details,
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        logger.exception(
            "Unhandled error on %s %s", request.method, request.url.path, exc_info=exc
        )
        return _error_response(
            request,
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            code="INTERNAL_SERVER_ERROR",
            message="Internal Server Error",
            stack="".join(traceback.format_exception(exc)),
        )

    return app
