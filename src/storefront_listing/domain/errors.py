"""Listing domain errors.

Raised by the domain, its adapters and the HTTP mappers. Each error has a
stable ``error_code`` that transports translate: the REST layer maps codes
to status codes, while the listing coordinator turns catalog errors into
visible listing state and never lets them escape.
"""

from typing import Any


class DomainError(Exception):
    """Root of the hierarchy: a message plus free-form diagnostic context."""

    error_code: str = "DOMAIN_ERROR"

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def to_dict(self) -> dict[str, Any]:
        """Flat, JSON-friendly form: message, code, then context keys."""
        return {"message": self.message, "code": self.error_code, **self.context}


class ValidationError(DomainError):
    """Rejected listing input: an unknown sort, a bad price range, page < 1.

    ``errors`` optionally lists per-field problems, each a dict with
    ``field``, ``message`` and usually ``code``
    (e.g. ``{"field": "sort_by", "code": "INVALID_SORT", ...}``).

    REST: 422
    """

    error_code: str = "VALIDATION_ERROR"

    def __init__(
        self,
        message: str | None = None,
        errors: list[dict[str, str]] | None = None,
        **context: Any,
    ) -> None:
        self.errors: list[dict[str, str]] | None = errors or None
        default = "Validation failed" if self.errors else "Validation error"
        super().__init__(message or default, **context)

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        if self.errors:
            payload["errors"] = self.errors
        return payload


class NotFoundError(DomainError):
    """Unknown resource, typically a listing id that is closed or never existed.

    REST: 404
    """

    error_code: str = "NOT_FOUND"

    def __init__(self, resource: str, identifier: str | None = None, **context: Any) -> None:
        message = (
            f"{resource} with identifier '{identifier}' not found"
            if identifier
            else f"{resource} not found"
        )
        super().__init__(message, resource=resource, identifier=identifier, **context)


class CatalogQueryError(DomainError):
    """The catalog could not answer: transport failure or non-success status.

    REST: 502
    """

    error_code: str = "CATALOG_UNAVAILABLE"


class MalformedCatalogResponseError(CatalogQueryError):
    """The catalog answered with a payload missing the expected shape.

    The coordinator handles it exactly like a transport failure.
    """

    error_code: str = "CATALOG_MALFORMED_RESPONSE"
