"""
Unit test suite for PostgresCatalogQueryClient.

Uses a mocked SQLAlchemy session. Tests verify:
- COUNT, page and facet queries are executed per search
- Phrase, category, price and facet filters reach the WHERE clause
- Sorting keeps sku as a tie-breaker; OFFSET/LIMIT follow the page
- Rows map to ProductSummary with Decimal prices and facet attributes
- Database errors surface as CatalogQueryError
"""

from __future__ import annotations

import asyncio
from contextlib import nullcontext
from decimal import Decimal
from unittest.mock import Mock

import pytest
from sqlalchemy.dialects import postgresql
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from storefront_listing.adapters.postgres_catalog_query_client import PostgresCatalogQueryClient
from storefront_listing.domain.errors import CatalogQueryError
from storefront_listing.domain.listing import (
    CatalogQuery,
    ListingResult,
    PriceRangeFilter,
    SortInput,
)
from storefront_listing.infra.db.models.product import ProductRow


@pytest.fixture()
def mock_session() -> Mock:
    """Mock SQLAlchemy session."""
    return Mock(spec=Session)


@pytest.fixture()
def sample_rows() -> list[ProductRow]:
    return [
        ProductRow(
            sku="DRL-100",
            name="Cordless Drill",
            description="18V drill driver",
            image_url="https://cdn.test/drl-100.jpg",
            price=Decimal("129.99"),
            currency="USD",
            in_stock=True,
            category="Power Tools",
            category_url_key="power-tools",
            manufacturer="acme",
        ),
        ProductRow(
            sku="HMR-7",
            name="Claw Hammer",
            price=Decimal("19.50"),
            currency="USD",
            in_stock=False,
        ),
    ]


def stub_results(mock_session: Mock, rows: list[ProductRow], total_count: int) -> None:
    count_result = Mock()
    count_result.scalar.return_value = total_count

    select_result = Mock()
    select_result.scalars.return_value.all.return_value = rows

    manufacturer_facet = Mock()
    manufacturer_facet.all.return_value = [("acme", 1)]

    category_facet = Mock()
    category_facet.all.return_value = [("Power Tools", 1)]

    mock_session.execute.side_effect = [
        count_result,
        select_result,
        manufacturer_facet,
        category_facet,
    ]


def run_search(mock_session: Mock, query: CatalogQuery) -> ListingResult:
    client = PostgresCatalogQueryClient(session_scope=lambda: nullcontext(mock_session))
    return asyncio.run(client.search(query))


def compiled(mock_session: Mock, call_index: int) -> str:
    statement = mock_session.execute.call_args_list[call_index].args[0]
    return str(statement.compile(dialect=postgresql.dialect()))


# ==============================================================================
# Query execution
# ==============================================================================


def test_search_executes_count_page_and_facet_queries(
    mock_session: Mock, sample_rows: list[ProductRow]
) -> None:
    stub_results(mock_session, sample_rows, total_count=2)

    result = run_search(mock_session, CatalogQuery(page=1, page_size=48))

    assert mock_session.execute.call_count == 4
    assert result.total_count == 2
    assert len(result.items) == 2
    assert "count(*)" in compiled(mock_session, 0)


def test_phrase_uses_case_insensitive_match(mock_session: Mock) -> None:
    stub_results(mock_session, [], total_count=0)

    run_search(mock_session, CatalogQuery(page=1, page_size=48, phrase="drill"))

    sql = compiled(mock_session, 1)
    assert "products.name ILIKE" in sql
    assert "products.sku ILIKE" in sql
    assert "products.description ILIKE" in sql


def test_filters_reach_where_clause(mock_session: Mock) -> None:
    stub_results(mock_session, [], total_count=0)

    run_search(
        mock_session,
        CatalogQuery(
            page=1,
            page_size=48,
            filter={
                "categoryUrlKey": ("power-tools",),
                "price": ("10-999999",),
                "manufacturer": ("acme", "globex"),
            },
        ),
    )

    sql = compiled(mock_session, 1)
    assert "products.category_url_key IN" in sql
    assert "products.price BETWEEN" in sql
    assert "products.manufacturer IN" in sql


def test_unknown_facet_key_is_ignored(mock_session: Mock) -> None:
    stub_results(mock_session, [], total_count=0)

    run_search(mock_session, CatalogQuery(page=1, page_size=48, filter={"color": ("red",)}))

    assert "WHERE" not in compiled(mock_session, 1)


def test_sort_and_paging_are_applied(mock_session: Mock) -> None:
    stub_results(mock_session, [], total_count=0)

    run_search(
        mock_session,
        CatalogQuery(page=3, page_size=48, sort=SortInput(attribute="PRICE", direction="DESC")),
    )

    statement = mock_session.execute.call_args_list[1].args[0]
    sql = str(
        statement.compile(dialect=postgresql.dialect(), compile_kwargs={"literal_binds": True})
    )
    assert "ORDER BY products.price DESC, products.sku" in sql
    assert "LIMIT 48 OFFSET 96" in sql


def test_fractional_price_bounds_reach_between(mock_session: Mock) -> None:
    stub_results(mock_session, [], total_count=0)
    token = PriceRangeFilter(min=Decimal("1E-7"), max=Decimal("2.5E+2")).token()

    result = run_search(
        mock_session, CatalogQuery(page=1, page_size=48, filter={"price": (token,)})
    )

    statement = mock_session.execute.call_args_list[1].args[0]
    params = statement.compile(dialect=postgresql.dialect()).params
    assert Decimal("0.0000001") in params.values()
    assert Decimal("250") in params.values()
    assert result.total_count == 0


def test_default_order_is_by_sku(mock_session: Mock) -> None:
    stub_results(mock_session, [], total_count=0)

    run_search(mock_session, CatalogQuery(page=1, page_size=48))

    assert "ORDER BY products.sku" in compiled(mock_session, 1)


# ==============================================================================
# Mapping
# ==============================================================================


def test_rows_map_to_product_summaries(mock_session: Mock, sample_rows: list[ProductRow]) -> None:
    stub_results(mock_session, sample_rows, total_count=2)

    result = run_search(mock_session, CatalogQuery(page=1, page_size=48))

    drill, hammer = result.items
    assert drill.sku == "DRL-100"
    assert drill.price is not None
    assert drill.price.value == Decimal("129.99")
    assert isinstance(drill.price.value, Decimal)
    assert drill.attributes == {"manufacturer": "acme", "product_category": "Power Tools"}
    assert hammer.attributes == {}
    assert hammer.in_stock is False


def test_facets_are_built_from_group_counts(
    mock_session: Mock, sample_rows: list[ProductRow]
) -> None:
    stub_results(mock_session, sample_rows, total_count=2)

    result = run_search(mock_session, CatalogQuery(page=1, page_size=48))

    assert result.facets is not None
    assert [(facet.key, facet.title) for facet in result.facets] == [
        ("manufacturer", "Manufacturer"),
        ("product_category", "Category"),
    ]
    assert result.facets[0].options[0].id == "acme"
    assert result.facets[0].options[0].count == 1


# ==============================================================================
# Failures
# ==============================================================================


def test_database_error_becomes_catalog_query_error(mock_session: Mock) -> None:
    mock_session.execute.side_effect = OperationalError("SELECT 1", {}, Exception("down"))

    with pytest.raises(CatalogQueryError) as exc_info:
        run_search(mock_session, CatalogQuery(page=2, page_size=48))

    assert exc_info.value.context == {"page": 2}
