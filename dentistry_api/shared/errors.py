"""Error envelope shared by every endpoint"""

import logging
from typing import Optional

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Raised by routers and services; rendered as {success: false, message, error}"""

    def __init__(self, status_code: int, message: str, error: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.error = error


def error_body(message: str, error: Optional[str] = None) -> dict:
    body = {"success": False, "message": message}
    if error is not None:
        body["error"] = error
    return body


async def api_error_handler(request: Request, exc: ApiError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} - {exc.message}: {exc.error}")
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.message, exc.error))


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Report malformed input as 400 with the first validation problem"""
    errors = exc.errors()
    logger.warning(f"Validation error for {request.url.path}: {errors}")

    detail = "Unknown validation error"
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        detail = f"{location}: {first.get('msg')}" if location else str(first.get("msg"))

    return JSONResponse(status_code=400, content=error_body("Invalid request", detail))
