# =============================================================================
# Exception Handlers — Domain Errors → JSON Envelopes
# =============================================================================
#
# Every error response has the same body:
#   {"success": false, "kind": "<machine-readable>", "message": "<human>"}
#
# - RecordsError subclasses carry their own kind and status code.
# - Pydantic body validation errors become kind "validation" with status
#   400 and a list of readable messages under "errors".
# - Anything else is logged with its traceback and answered with a generic
#   500. Internal error text never reaches the client.
# =============================================================================

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.errors import RecordsError

logger = logging.getLogger(__name__)


async def records_error_handler(request: Request, exc: RecordsError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.warning("%s %s failed: %s", request.method, request.url.path, exc.kind)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def validation_error_handler(
    request: Request, exc: RequestValidationError,
) -> JSONResponse:
    messages = [_format_validation_error(err) for err in exc.errors()]
    return JSONResponse(
        status_code=400,
        content={
            "success": False,
            "kind": "validation",
            "message": "Validation error",
            "errors": messages,
        },
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "kind": "internal",
            "message": "Internal server error",
        },
    )


def _format_validation_error(error: dict) -> str:
    # ("body", "address", "zip_code") → "address.zip_code"
    location = [str(part) for part in error.get("loc", ()) if part != "body"]
    field = ".".join(location)
    message = error.get("msg", "Invalid value")
    return f"{field}: {message}" if field else message


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RecordsError, records_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
