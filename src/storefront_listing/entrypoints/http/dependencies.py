"""
Dependency injection for FastAPI routes.

Listing sessions outlive a single request, so coordinators live in the
app-scoped ListingRegistry. Catalog clients are shared singletons; the
database strategy still opens one session per search.
"""

from __future__ import annotations

from functools import lru_cache

from fastapi import Header, Request

from storefront_listing.adapters.http_catalog_query_client import HttpCatalogQueryClient
from storefront_listing.adapters.postgres_catalog_query_client import PostgresCatalogQueryClient
from storefront_listing.adapters.static_customer_context_provider import (
    StaticCustomerContextProvider,
)
from storefront_listing.domain.customer import CustomerContext
from storefront_listing.entrypoints.http.listing_registry import ListingRegistry
from storefront_listing.infra.config import (
    catalog_api_timeout_seconds,
    catalog_api_url,
    catalog_backend,
    listing_page_size,
    storefront_base_path,
)
from storefront_listing.ports.catalog_query_client import CatalogQueryClient
from storefront_listing.ports.customer_context_provider import CustomerContextProvider


def get_listing_registry(request: Request) -> ListingRegistry:
    """The registry created with the app (see build_app)."""
    return request.app.state.listing_registry


@lru_cache
def get_catalog_query_client() -> CatalogQueryClient:
    """
    Catalog strategy selected by CATALOG_BACKEND.

    Cached: the HTTP client pools connections and both strategies hold
    no per-shopper state.
    """
    if catalog_backend() == "database":
        return PostgresCatalogQueryClient()
    return HttpCatalogQueryClient(
        base_url=catalog_api_url(),
        timeout_seconds=catalog_api_timeout_seconds(),
    )


def get_customer_context_provider(
    x_customer_group: str | None = Header(default=None),
    x_persona_id: str | None = Header(default=None),
    x_user_id: str | None = Header(default=None),
) -> CustomerContextProvider:
    """
    Shopper context forwarded by the storefront session layer.

    Requests without a customer group are anonymous and get the guest default.
    """
    if not x_customer_group:
        return StaticCustomerContextProvider(None)
    return StaticCustomerContextProvider(
        CustomerContext(
            customer_group=x_customer_group,
            persona_id=x_persona_id,
            user_id=x_user_id,
        )
    )


def get_listing_page_size() -> int:
    return listing_page_size()


def get_base_path() -> str:
    return storefront_base_path()
