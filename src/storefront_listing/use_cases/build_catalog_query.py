from __future__ import annotations

from storefront_listing.domain.customer import CustomerContext
from storefront_listing.domain.listing import (
    CatalogQuery,
    ListingFilters,
    ListingQuery,
    MultiSelectFilter,
    PriceRangeFilter,
    SortInput,
    SortOrder,
)

CATEGORY_FILTER_KEY = "categoryUrlKey"
PRICE_FILTER_KEY = "price"

# No relevance entry: the catalog orders by relevance when sort is omitted.
_SORT_INPUTS: dict[SortOrder, SortInput] = {
    SortOrder.PRICE_ASC: SortInput(attribute="PRICE", direction="ASC"),
    SortOrder.PRICE_DESC: SortInput(attribute="PRICE", direction="DESC"),
    SortOrder.NAME_ASC: SortInput(attribute="NAME", direction="ASC"),
    SortOrder.NAME_DESC: SortInput(attribute="NAME", direction="DESC"),
}


def map_sort(sort: SortOrder | None) -> SortInput | None:
    """Translate a sort selection; relevance (or no selection) maps to None."""
    if sort is None:
        return None
    return _SORT_INPUTS.get(sort)


def merge_filters(
    filters: ListingFilters, category_url_key: str | None = None
) -> dict[str, tuple[str, ...]]:
    """
    Merge facet selections into the catalog's filter shape.

    - The URL category, when present, is sent as ``categoryUrlKey``
    - ``price_range`` becomes a single ``price`` range token
    - Multi-select facets pass through verbatim under their facet key
    """
    merged: dict[str, tuple[str, ...]] = {}
    if category_url_key:
        merged[CATEGORY_FILTER_KEY] = (category_url_key,)

    for key, value in filters.entries.items():
        if isinstance(value, PriceRangeFilter):
            merged[PRICE_FILTER_KEY] = (value.token(),)
        elif isinstance(value, MultiSelectFilter):
            merged[key] = value.option_ids

    return merged


def build_catalog_query(
    query: ListingQuery, customer: CustomerContext | None = None
) -> CatalogQuery:
    """
    Build the wire query for the page ``query.page`` of ``query``.

    Only ``query`` and ``customer`` are read, so the result always reflects
    the listing state at the moment the fetch is issued.
    """
    merged = merge_filters(query.filters, query.category_url_key)
    return CatalogQuery(
        page=query.page,
        page_size=query.page_size,
        phrase=query.phrase,
        filter=merged or None,
        sort=map_sort(query.sort),
        customer_group=customer.customer_group if customer else None,
    )
