"""Centralized FastAPI exception handlers with a stable error contract."""

from __future__ import annotations

import logging

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from api.guardrails import error_payload
from errors import AccessDenied, ConfigurationError, UpstreamError

logger = logging.getLogger(__name__)

DEFAULT_MESSAGES = {
    400: ("bad_request", "Request is invalid."),
    401: ("unauthorized", "Authentication is required."),
    403: ("forbidden", "You do not have permission to perform this action."),
    404: ("not_found", "The requested resource was not found."),
    405: ("method_not_allowed", "Method not allowed."),
    422: ("validation_error", "Request validation failed."),
    500: ("internal_error", "Unexpected server error."),
    502: ("upstream_error", "The document store request failed."),
}


async def http_exception_handler(_: Request, exc: HTTPException) -> JSONResponse:
    detail = exc.detail
    if isinstance(detail, dict) and "error" in detail:
        return JSONResponse(status_code=exc.status_code, content=detail)

    default_code, default_message = DEFAULT_MESSAGES.get(
        exc.status_code, ("http_error", "Request failed.")
    )
    message = str(detail) if detail else default_message
    retryable = exc.status_code == 429 or exc.status_code >= 500
    return JSONResponse(
        status_code=exc.status_code,
        content=error_payload(code=default_code, message=message, retryable=retryable),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content=error_payload(
            code="validation_error",
            message="Request validation failed.",
            retryable=False,
            details=exc.errors(),
        ),
    )


async def access_denied_handler(_: Request, exc: AccessDenied) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(
        status_code=exc.status_code,
        content=error_payload(code=exc.code, message=exc.message, retryable=False),
        headers=headers,
    )


async def configuration_error_handler(_: Request, exc: ConfigurationError) -> JSONResponse:
    # The message may name the misconfigured setting; keep it server-side
    logger.error("Configuration error: %s", exc)
    return JSONResponse(
        status_code=500,
        content=error_payload(
            code="server_misconfigured",
            message="The server is not configured correctly.",
            retryable=False,
        ),
    )


async def upstream_error_handler(_: Request, exc: UpstreamError) -> JSONResponse:
    logger.error("Upstream error: %s (status=%s)", exc, exc.status_code)
    return JSONResponse(
        status_code=502,
        content=error_payload(
            code="upstream_error",
            message="The document store request failed.",
            retryable=True,
        ),
    )


async def unhandled_exception_handler(_: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error")
    return JSONResponse(
        status_code=500,
        content=error_payload(
            code="internal_error",
            message="Unexpected server error.",
            retryable=True,
            details={"exception": exc.__class__.__name__},
        ),
    )
