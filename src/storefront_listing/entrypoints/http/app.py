from fastapi import FastAPI

from storefront_listing.entrypoints.http.exception_handlers import register_exception_handlers
from storefront_listing.entrypoints.http.listing_registry import ListingRegistry
from storefront_listing.entrypoints.http.routes.health import router as health_router
from storefront_listing.entrypoints.http.routes.listings import router as listings_router
from storefront_listing.infra.config import listing_idle_timeout_seconds, max_open_listings


def build_app() -> FastAPI:
    app = FastAPI(
        title="Storefront Listing API",
        description="""
        Product listing sessions for storefront catalog pages.

        ## Features
        - Open a listing for a category or search phrase
        - Refine it with facet filters, an in-page search and sort
        - Infinite scroll through `/more`

        ## Error Handling
        Catalog outages show up as the listing's `error_state`.
        Invalid input and unknown listings return structured JSON errors.
        """,
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    app.state.listing_registry = ListingRegistry(
        max_listings=max_open_listings(),
        idle_seconds=listing_idle_timeout_seconds(),
    )

    register_exception_handlers(app)

    app.include_router(health_router)
    app.include_router(listings_router, prefix="/v1")

    return app


app = build_app()
