from __future__ import annotations

import os

from storefront_listing.domain.listing import DEFAULT_PAGE_SIZE

CATALOG_BACKENDS = ("http", "database")


def catalog_backend() -> str:
    backend = os.getenv("CATALOG_BACKEND", "http").strip().lower()

    if backend not in CATALOG_BACKENDS:
        raise RuntimeError(
            f"CATALOG_BACKEND must be one of {list(CATALOG_BACKENDS)}, got '{backend}'"
        )

    return backend


def catalog_api_url() -> str:
    url = os.getenv("CATALOG_API_URL")

    if not url:
        raise RuntimeError("CATALOG_API_URL environment variable is not set")

    return url


def catalog_api_timeout_seconds() -> float:
    raw = os.getenv("CATALOG_API_TIMEOUT_SECONDS", "10")
    try:
        timeout = float(raw)
    except ValueError:
        raise RuntimeError(f"CATALOG_API_TIMEOUT_SECONDS must be a number, got '{raw}'")

    if timeout <= 0:
        raise RuntimeError("CATALOG_API_TIMEOUT_SECONDS must be > 0")

    return timeout


def listing_page_size() -> int:
    raw = os.getenv("LISTING_PAGE_SIZE", str(DEFAULT_PAGE_SIZE))
    try:
        page_size = int(raw)
    except ValueError:
        raise RuntimeError(f"LISTING_PAGE_SIZE must be an integer, got '{raw}'")

    if page_size <= 0:
        raise RuntimeError("LISTING_PAGE_SIZE must be > 0")

    return page_size


def storefront_base_path() -> str:
    base_path = os.getenv("STOREFRONT_BASE_PATH", "/")
    return base_path if base_path.endswith("/") else f"{base_path}/"


def database_url() -> str:
    """SQLAlchemy URL for the `database` backend, seeding and migrations."""
    url = os.getenv("DATABASE_URL")

    if not url:
        raise RuntimeError("DATABASE_URL must be set when CATALOG_BACKEND=database")

    return url


def max_open_listings() -> int:
    raw = os.getenv("LISTING_MAX_OPEN", "1000")
    try:
        limit = int(raw)
    except ValueError:
        raise RuntimeError(f"LISTING_MAX_OPEN must be an integer, got '{raw}'")

    if limit <= 0:
        raise RuntimeError("LISTING_MAX_OPEN must be > 0")

    return limit


def listing_idle_timeout_seconds() -> float:
    raw = os.getenv("LISTING_IDLE_TIMEOUT_SECONDS", "1800")
    try:
        timeout = float(raw)
    except ValueError:
        raise RuntimeError(f"LISTING_IDLE_TIMEOUT_SECONDS must be a number, got '{raw}'")

    if timeout <= 0:
        raise RuntimeError("LISTING_IDLE_TIMEOUT_SECONDS must be > 0")

    return timeout
