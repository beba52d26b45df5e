from datetime import datetime
from typing import List, Optional

from fastapi import Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette import status
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging

from .exceptions import ExpenseTrackerError

logger = logging.getLogger("expense_tracker.errors")


def error_body(
    status_code: int,
    error: str,
    message: str,
    path: str,
    details: Optional[List[str]] = None,
) -> dict:
    body = {
        "timestamp": datetime.now().isoformat(timespec="seconds"),
        "status": status_code,
        "error": error,
        "message": message,
        "path": path,
    }
    if details:
        body["details"] = details
    return body


def domain_error_handler(request: Request, exc: ExpenseTrackerError):  # type: ignore
    if exc.status >= 500:
        logger.error("domain error %s: %s", exc.code, exc.message)
    else:
        logger.info("request rejected %s: %s", exc.code, exc.message)
    return JSONResponse(
        status_code=exc.status,
        content=error_body(
            exc.status, exc.code, exc.message, request.url.path, exc.details
        ),
    )


def http_error_handler(request: Request, exc: StarletteHTTPException):  # type: ignore
    if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
        message = f"No route for {request.method} {request.url.path}"
    else:
        message = str(exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(
            exc.status_code,
            "NOT_FOUND" if exc.status_code == 404 else "HTTP_ERROR",
            message,
            request.url.path,
        ),
    )


def validation_error_handler(request: Request, exc: RequestValidationError):  # type: ignore
    details = []
    for err in exc.errors():
        # Drop the leading "body"/"query" segment so fields read as in the payload.
        loc = [str(part) for part in err.get("loc", ())[1:]]
        details.append(f"{'.'.join(loc) or 'request'}: {err.get('msg')}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body(
            status.HTTP_400_BAD_REQUEST,
            "VALIDATION_FAILED",
            "Input validation failed",
            request.url.path,
            details,
        ),
    )


def server_error_handler(request: Request, exc: Exception):  # type: ignore
    logger.exception("unhandled exception")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "INTERNAL_ERROR",
            "An unexpected error occurred.",
            request.url.path,
        ),
    )
