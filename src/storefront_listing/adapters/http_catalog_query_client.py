"""Remote catalog search over HTTP."""

from __future__ import annotations

import logging
from decimal import Decimal

import httpx
from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from storefront_listing.domain.errors import CatalogQueryError, MalformedCatalogResponseError
from storefront_listing.domain.listing import (
    CatalogQuery,
    Facet,
    FacetOption,
    ListingResult,
    ProductPrice,
    ProductSummary,
)
from storefront_listing.ports.catalog_query_client import CatalogQueryClient

logger = logging.getLogger(__name__)

SEARCH_PATH = "/products/search"
CUSTOMER_GROUP_HEADER = "X-Customer-Group"


# ==============================================================================
# Response payload
# ==============================================================================


class _Payload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class PricePayload(_Payload):
    value: Decimal
    currency: str = "USD"


class AttributePayload(_Payload):
    name: str
    value: str


class ProductItemPayload(_Payload):
    sku: str
    name: str
    description: str | None = None
    image_url: str | None = Field(default=None, alias="imageUrl")
    price: PricePayload | None = None
    in_stock: bool = Field(default=True, alias="inStock")
    category: str | None = None
    attributes: list[AttributePayload] = Field(default_factory=list)


class ProductsPayload(_Payload):
    items: list[ProductItemPayload]


class FacetOptionPayload(_Payload):
    id: str
    name: str
    count: int | None = None


class FacetPayload(_Payload):
    key: str
    title: str
    options: list[FacetOptionPayload] = Field(default_factory=list)


class FacetsPayload(_Payload):
    facets: list[FacetPayload] = Field(default_factory=list)


class CatalogSearchPayload(_Payload):
    """Body of a successful ``POST /products/search``."""

    products: ProductsPayload
    total_count: int = Field(alias="totalCount", ge=0)
    facets: FacetsPayload | None = None


# ==============================================================================
# Client
# ==============================================================================


class HttpCatalogQueryClient(CatalogQueryClient):
    """
    CatalogQueryClient backed by the storefront catalog service.

    - Sends the wire query as JSON; sort and filter are omitted when unset
    - Sends the shopper's customer group as a header for personalized pricing
    - Maps transport errors and non-2xx statuses to CatalogQueryError
    - Validates the payload shape, raising MalformedCatalogResponseError
    """

    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout_seconds)

    async def search(self, query: CatalogQuery) -> ListingResult:
        headers = {}
        if query.customer_group:
            headers[CUSTOMER_GROUP_HEADER] = query.customer_group

        try:
            response = await self._client.post(
                SEARCH_PATH, json=query.to_payload(), headers=headers
            )
        except httpx.HTTPError as exc:
            raise CatalogQueryError(
                "Catalog request failed", reason=str(exc), page=query.page
            ) from exc

        if response.is_error:
            raise CatalogQueryError(
                f"Catalog responded with HTTP {response.status_code}",
                status_code=response.status_code,
                page=query.page,
            )

        try:
            payload = CatalogSearchPayload.model_validate(response.json())
        except (ValueError, PydanticValidationError) as exc:
            raise MalformedCatalogResponseError(
                "Catalog response has an unexpected shape", page=query.page
            ) from exc

        logger.debug(
            "Catalog search answered",
            extra={
                "page": query.page,
                "items": len(payload.products.items),
                "total_count": payload.total_count,
            },
        )
        return self._to_domain(payload)

    async def aclose(self) -> None:
        await self._client.aclose()

    def _to_domain(self, payload: CatalogSearchPayload) -> ListingResult:
        items = [
            ProductSummary(
                sku=item.sku,
                name=item.name,
                description=item.description,
                image_url=item.image_url,
                price=(
                    ProductPrice(value=item.price.value, currency=item.price.currency)
                    if item.price
                    else None
                ),
                in_stock=item.in_stock,
                category=item.category,
                attributes={attribute.name: attribute.value for attribute in item.attributes},
            )
            for item in payload.products.items
        ]

        facets = None
        if payload.facets is not None:
            facets = [
                Facet(
                    key=facet.key,
                    title=facet.title,
                    options=tuple(
                        FacetOption(id=option.id, name=option.name, count=option.count)
                        for option in facet.options
                    ),
                )
                for facet in payload.facets.facets
            ]

        return ListingResult(items=items, total_count=payload.total_count, facets=facets)
