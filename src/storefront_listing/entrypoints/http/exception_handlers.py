"""FastAPI exception handlers.

Listing operations never raise for catalog failures (they become listing
state), so what reaches these handlers is bad input, unknown listing ids
and genuine bugs. Every response body has the shape
``{"detail": ..., "code": ..., "errors"?: [...]}``; domain context stays in
the logs.
"""

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from storefront_listing.domain.errors import DomainError

logger = logging.getLogger(__name__)

# HTTP_422_UNPROCESSABLE_CONTENT is missing from older starlette releases
UNPROCESSABLE = 422

STATUS_BY_ERROR_CODE: dict[str, int] = {
    "VALIDATION_ERROR": UNPROCESSABLE,
    "NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "CATALOG_UNAVAILABLE": status.HTTP_502_BAD_GATEWAY,
    "CATALOG_MALFORMED_RESPONSE": status.HTTP_502_BAD_GATEWAY,
}

# Location prefixes pydantic adds that the client never typed
_LOCATION_PREFIXES = ("body", "query", "path")


def _error_body(
    detail: str, code: str, errors: list[dict[str, Any]] | None = None
) -> dict[str, Any]:
    body: dict[str, Any] = {"detail": detail, "code": code}
    if errors:
        body["errors"] = errors
    return body


def _request_extra(request: Request, **fields: Any) -> dict[str, Any]:
    return {"path": request.url.path, "method": request.method, **fields}


async def handle_domain_error(request: Request, exc: DomainError) -> JSONResponse:
    """Answer with the status registered for the error code, 400 if unregistered."""
    status_code = STATUS_BY_ERROR_CODE.get(exc.error_code, status.HTTP_400_BAD_REQUEST)
    extra = _request_extra(
        request, error_code=exc.error_code, error_message=exc.message, context=exc.context
    )
    if status_code >= 500:
        logger.error("Domain error", extra=extra)
    else:
        logger.info("Client error", extra=extra)

    payload = exc.to_dict()
    return JSONResponse(
        status_code=status_code,
        content=_error_body(payload["message"], payload["code"], payload.get("errors")),
    )


def _field_errors(exc: RequestValidationError) -> list[dict[str, Any]]:
    """Flatten pydantic errors to ``field``/``message``/``code`` entries.

    A body of ``{"price_range": {"min": -5}}`` yields the field
    ``price_range.min`` rather than ``body.price_range.min``.
    """
    return [
        {
            "field": ".".join(str(part) for part in error["loc"] if part not in _LOCATION_PREFIXES),
            "message": error["msg"],
            "code": error["type"],
        }
        for error in exc.errors()
    ]


async def handle_request_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = _field_errors(exc)
    logger.info("Request validation error", extra=_request_extra(request, errors=errors))

    return JSONResponse(
        status_code=UNPROCESSABLE,
        content={
            "detail": "Invalid request parameters",
            "code": "VALIDATION_ERROR",
            "errors": errors,
        },
    )


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for bugs and infrastructure failures; logged with traceback."""
    logger.error(
        "Unexpected error occurred",
        exc_info=exc,
        extra=_request_extra(request, error_type=type(exc).__name__),
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body("An unexpected error occurred", "INTERNAL_ERROR"),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainError, handle_domain_error)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, handle_unexpected_error)

    logger.info("Exception handlers registered")
