"""
Test suite for InMemoryCatalogQueryClient.

The in-memory client is the reference for the catalog search contract:
- Phrase and facet filtering (AND across facets, OR within a facet)
- Category and price range filters in their wire shape
- Sorting before paging; total_count counted before paging
- Facet counts over all matches
"""

from __future__ import annotations

import asyncio
from decimal import Decimal

import pytest

from storefront_listing.adapters.in_memory_catalog_query_client import InMemoryCatalogQueryClient
from storefront_listing.domain.listing import CatalogQuery, ProductSummary, SortInput


@pytest.fixture()
def client(catalog_products: list[ProductSummary]) -> InMemoryCatalogQueryClient:
    return InMemoryCatalogQueryClient(catalog_products, facet_titles={"manufacturer": "Brand"})


def search(client: InMemoryCatalogQueryClient, **kwargs: object) -> object:
    kwargs.setdefault("page", 1)
    kwargs.setdefault("page_size", 48)
    return asyncio.run(client.search(CatalogQuery(**kwargs)))  # type: ignore[arg-type]


# ==============================================================================
# Filtering
# ==============================================================================


def test_no_filters_returns_first_page_in_insertion_order(
    client: InMemoryCatalogQueryClient,
) -> None:
    result = search(client)

    assert [item.sku for item in result.items][:3] == ["SKU-0001", "SKU-0002", "SKU-0003"]
    assert len(result.items) == 48
    assert result.total_count == 130


def test_phrase_is_case_insensitive_substring(client: InMemoryCatalogQueryClient) -> None:
    result = search(client, phrase="product 012")

    assert [item.sku for item in result.items] == [f"SKU-{i:04d}" for i in range(120, 130)]
    assert result.total_count == 10


def test_phrase_matches_sku(client: InMemoryCatalogQueryClient) -> None:
    result = search(client, phrase="sku-0007")

    assert [item.sku for item in result.items] == ["SKU-0007"]


def test_facet_values_are_or_within_a_facet(client: InMemoryCatalogQueryClient) -> None:
    result = search(client, filter={"manufacturer": ("acme", "globex")})

    assert result.total_count == 130


def test_facets_are_and_across_facets(client: InMemoryCatalogQueryClient) -> None:
    """Even SKUs are acme; the hand tools category holds the odd ones."""
    result = search(
        client,
        filter={"manufacturer": ("acme",), "categoryUrlKey": ("hand-tools",)},
    )

    assert result.total_count == 0
    assert result.items == []


def test_category_url_key_matches_slugged_category(client: InMemoryCatalogQueryClient) -> None:
    result = search(client, filter={"categoryUrlKey": ("power-tools",)})

    assert result.total_count == 65
    assert all(item.category == "Power Tools" for item in result.items)


def test_price_token_bounds_are_inclusive(client: InMemoryCatalogQueryClient) -> None:
    result = search(client, filter={"price": ("10-12",)})

    assert [item.price.value for item in result.items] == [
        Decimal("10"),
        Decimal("11"),
        Decimal("12"),
    ]


def test_unknown_facet_key_matches_nothing(client: InMemoryCatalogQueryClient) -> None:
    result = search(client, filter={"color": ("red",)})

    assert result.total_count == 0


# ==============================================================================
# Sorting and paging
# ==============================================================================


def test_sort_by_price_descending(client: InMemoryCatalogQueryClient) -> None:
    result = search(client, sort=SortInput(attribute="PRICE", direction="DESC"), page_size=3)

    assert [item.sku for item in result.items] == ["SKU-0130", "SKU-0129", "SKU-0128"]


def test_sort_by_name_ascending(client: InMemoryCatalogQueryClient) -> None:
    result = search(client, sort=SortInput(attribute="NAME", direction="ASC"), page_size=2)

    assert [item.name for item in result.items] == ["Product 0001", "Product 0002"]


def test_last_page_is_partial(client: InMemoryCatalogQueryClient) -> None:
    result = search(client, page=3)

    assert len(result.items) == 34
    assert result.items[0].sku == "SKU-0097"
    assert result.total_count == 130


def test_page_beyond_end_is_empty(client: InMemoryCatalogQueryClient) -> None:
    result = search(client, page=4)

    assert result.items == []
    assert result.total_count == 130


# ==============================================================================
# Facets and bookkeeping
# ==============================================================================


def test_facet_counts_cover_all_matches(client: InMemoryCatalogQueryClient) -> None:
    result = search(client, page_size=10)

    assert len(result.facets) == 1
    facet = result.facets[0]
    assert facet.key == "manufacturer"
    assert facet.title == "Brand"
    assert [(option.id, option.count) for option in facet.options] == [
        ("acme", 65),
        ("globex", 65),
    ]


def test_facets_absent_without_titles(catalog_products: list[ProductSummary]) -> None:
    client = InMemoryCatalogQueryClient(catalog_products)

    result = search(client)

    assert result.facets is None


def test_records_received_queries(client: InMemoryCatalogQueryClient) -> None:
    search(client, phrase="drill")
    search(client, page=2)

    assert [(query.phrase, query.page) for query in client.queries] == [
        ("drill", 1),
        (None, 2),
    ]


def test_empty_catalog() -> None:
    client = InMemoryCatalogQueryClient([])

    result = search(client)

    assert result.items == []
    assert result.total_count == 0
