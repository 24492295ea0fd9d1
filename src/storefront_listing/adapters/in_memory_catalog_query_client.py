from __future__ import annotations

from decimal import Decimal
from typing import Mapping

from storefront_listing.domain.listing import (
    CatalogQuery,
    Facet,
    FacetOption,
    ListingResult,
    ProductSummary,
    category_url_key,
)
from storefront_listing.ports.catalog_query_client import CatalogQueryClient
from storefront_listing.use_cases.build_catalog_query import (
    CATEGORY_FILTER_KEY,
    PRICE_FILTER_KEY,
)


class InMemoryCatalogQueryClient(CatalogQueryClient):
    """
    Canonical contract implementation for tests.

    - Stores products in insertion order
    - Phrase matches sku, name or description (case-insensitive substring)
    - Applies AND-semantics across facets, OR within a facet
    - Applies paging AFTER filtering and sorting
    - Returns total_count of matches before paging and facet counts over all matches
    - Records every query it receives in ``queries``
    """

    def __init__(
        self,
        products: list[ProductSummary],
        facet_titles: Mapping[str, str] | None = None,
    ) -> None:
        self._products = products
        self._facet_titles = dict(facet_titles or {})
        self.queries: list[CatalogQuery] = []

    async def search(self, query: CatalogQuery) -> ListingResult:
        self.queries.append(query)

        matches = [product for product in self._products if self._matches(product, query)]
        matches = self._sorted(matches, query)
        total_count = len(matches)  # Count BEFORE paging

        start = (query.page - 1) * query.page_size
        end = start + query.page_size

        return ListingResult(
            items=matches[start:end],
            total_count=total_count,
            facets=self._facets(matches) if self._facet_titles else None,
        )

    def _matches(self, product: ProductSummary, query: CatalogQuery) -> bool:
        if query.phrase:
            phrase = query.phrase.lower()
            haystack = " ".join(filter(None, (product.sku, product.name, product.description)))
            if phrase not in haystack.lower():
                return False

        for key, values in (query.filter or {}).items():
            if key == CATEGORY_FILTER_KEY:
                if category_url_key(product.category) not in values:
                    return False
            elif key == PRICE_FILTER_KEY:
                if not any(self._in_price_range(product, token) for token in values):
                    return False
            elif product.attributes.get(key) not in values:
                return False
        return True

    def _in_price_range(self, product: ProductSummary, token: str) -> bool:
        low, _, high = token.partition("-")
        price = product.price.value if product.price else Decimal("0")
        return Decimal(low) <= price <= Decimal(high)

    def _sorted(self, products: list[ProductSummary], query: CatalogQuery) -> list[ProductSummary]:
        if query.sort is None:
            return products

        reverse = query.sort.direction == "DESC"
        if query.sort.attribute == "PRICE":
            return sorted(
                products,
                key=lambda p: p.price.value if p.price else Decimal("0"),
                reverse=reverse,
            )
        return sorted(products, key=lambda p: p.name.lower(), reverse=reverse)

    def _facets(self, matches: list[ProductSummary]) -> list[Facet]:
        facets = []
        for key, title in self._facet_titles.items():
            counts: dict[str, int] = {}
            for product in matches:
                value = product.attributes.get(key)
                if value is not None:
                    counts[value] = counts.get(value, 0) + 1
            options = tuple(
                FacetOption(id=value, name=value, count=count)
                for value, count in sorted(counts.items())
            )
            facets.append(Facet(key=key, title=title, options=options))
        return facets
