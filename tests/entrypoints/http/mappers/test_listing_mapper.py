"""
Test suite for ListingMapper.

Verifies the REST boundary:
- URL context becomes the initial ListingQuery
- Sidebar DTOs become tagged domain filters, with bad shapes rejected
- Snapshots render to the response DTO with formatted prices
"""

from __future__ import annotations

from decimal import Decimal

import pytest

from storefront_listing.domain.errors import ValidationError
from storefront_listing.domain.listing import (
    Facet,
    FacetOption,
    FilterValidationError,
    ListingFilters,
    ListingQuery,
    MultiSelectFilter,
    PriceRangeFilter,
    ProductPrice,
    ProductSummary,
    SortOrder,
)
from storefront_listing.domain.view_state import ListingSnapshot, ListingStatus
from storefront_listing.entrypoints.http.dtos.listing import (
    CreateListingDTO,
    FiltersChangedDTO,
    PriceRangeDTO,
)
from storefront_listing.entrypoints.http.mappers.listing_mapper import ListingMapper
from storefront_listing.use_cases.build_catalog_query import build_catalog_query


def make_snapshot(**overrides: object) -> ListingSnapshot:
    values: dict[str, object] = {
        "status": ListingStatus.READY,
        "query": ListingQuery(),
        "items": (),
        "total_count": 0,
        "current_page": 1,
        "has_more": False,
        "facets": (),
        "generation": 1,
    }
    values.update(overrides)
    return ListingSnapshot(**values)  # type: ignore[arg-type]


# ==============================================================================
# Requests to domain
# ==============================================================================


def test_to_initial_query_uses_url_context_and_page_size() -> None:
    dto = CreateListingDTO(phrase="drill", category="power-tools", sort_by=SortOrder.NAME_ASC)

    query = ListingMapper.to_initial_query(dto, page_size=24)

    assert query == ListingQuery(
        initial_phrase="drill",
        category_url_key="power-tools",
        sort=SortOrder.NAME_ASC,
        page_size=24,
    )


def test_to_initial_query_treats_blank_context_as_absent() -> None:
    query = ListingMapper.to_initial_query(CreateListingDTO(phrase="", category=""), 48)

    assert query.initial_phrase is None
    assert query.category_url_key is None


def test_to_domain_filters_builds_tagged_filters() -> None:
    dto = FiltersChangedDTO(
        filters={
            "manufacturer": ["acme", "globex"],
            "price_range": PriceRangeDTO(min=Decimal("10")),
            "color": [],
        }
    )

    filters = ListingMapper.to_domain_filters(dto)

    assert dict(filters.entries) == {
        "manufacturer": MultiSelectFilter(option_ids=("acme", "globex")),
        "price_range": PriceRangeFilter(min=Decimal("10")),
    }


def test_price_range_reaches_catalog_as_plain_numbers() -> None:
    dto = FiltersChangedDTO.model_validate(
        {"filters": {"price_range": {"min": "1E+1", "max": "50.00"}}}
    )

    filters = ListingMapper.to_domain_filters(dto)
    catalog_query = build_catalog_query(ListingQuery(filters=filters))

    assert catalog_query.filter == {"price": ("10-50",)}


def test_to_domain_filters_rejects_list_price_range() -> None:
    dto = FiltersChangedDTO(filters={"price_range": ["0-10"]})

    with pytest.raises(ValidationError) as exc_info:
        ListingMapper.to_domain_filters(dto)

    assert exc_info.value.errors[0]["code"] == "INVALID_PRICE_RANGE"


def test_to_domain_filters_rejects_range_on_multi_select_facet() -> None:
    dto = FiltersChangedDTO(filters={"manufacturer": PriceRangeDTO(min=Decimal("1"))})

    with pytest.raises(ValidationError) as exc_info:
        ListingMapper.to_domain_filters(dto)

    assert exc_info.value.errors[0]["code"] == "INVALID_FACET_SELECTION"


def test_to_domain_filters_rejects_inverted_range() -> None:
    dto = FiltersChangedDTO(
        filters={"price_range": PriceRangeDTO(min=Decimal("50"), max=Decimal("10"))}
    )

    with pytest.raises(FilterValidationError):
        ListingMapper.to_domain_filters(dto)


def test_filters_dto_parses_json_shapes() -> None:
    dto = FiltersChangedDTO.model_validate(
        {"filters": {"manufacturer": ["acme"], "price_range": {"min": "5", "max": None}}}
    )

    assert dto.filters["manufacturer"] == ["acme"]
    assert dto.filters["price_range"] == PriceRangeDTO(min=Decimal("5"))


# ==============================================================================
# Domain to response
# ==============================================================================


def test_to_query_dto_echoes_active_query() -> None:
    query = ListingQuery(
        filters=ListingFilters(
            entries={
                "manufacturer": MultiSelectFilter(option_ids=("acme",)),
                "price_range": PriceRangeFilter(max=Decimal("99")),
            }
        ),
        search_term="saw",
        sort=SortOrder.PRICE_ASC,
        initial_phrase="tools",
        category_url_key="hand-tools",
    )

    dto = ListingMapper.to_query_dto(query)

    assert dto.phrase == "saw"
    assert dto.category == "hand-tools"
    assert dto.sort_by is SortOrder.PRICE_ASC
    assert dto.filters == {
        "manufacturer": ["acme"],
        "price_range": PriceRangeDTO(max=Decimal("99")),
    }
    assert dto.page == 1
    assert dto.page_size == 48


def test_to_response_renders_cards_and_facets() -> None:
    item = ProductSummary(
        sku="DRL-100",
        name="Cordless Drill",
        image_url="/media/placeholder.png",
        price=ProductPrice(value=Decimal("129.99")),
    )
    facet = Facet(
        key="manufacturer",
        title="Manufacturer",
        options=(FacetOption(id="acme", name="ACME", count=40),),
    )
    snapshot = make_snapshot(items=(item,), total_count=57, has_more=True, facets=(facet,))

    dto = ListingMapper.to_response("listing-1", snapshot, "/shop/")

    assert dto.id == "listing-1"
    assert dto.status is ListingStatus.READY
    assert dto.count_label == "Showing 1 of 57 products"
    assert dto.loaded_count == 1
    assert dto.show_load_more is True
    card = dto.cards[0]
    assert card.price == "$129.99"
    assert card.image_url is None
    assert card.uses_placeholder_image is True
    assert card.detail_url == "/shop/pages/product-detail.html?sku=DRL-100"
    assert dto.facets[0].options[0].count == 40
    assert dto.empty_state is None
    assert dto.error_state is None


def test_to_response_for_empty_listing() -> None:
    dto = ListingMapper.to_response("listing-1", make_snapshot())

    assert dto.count_label == "0 products"
    assert dto.empty_state is not None
    assert dto.empty_state.action_label == "Clear Filters"
    assert dto.empty_state.title is None


def test_to_response_for_error() -> None:
    dto = ListingMapper.to_response(
        "listing-1", make_snapshot(status=ListingStatus.ERROR, error_message="HTTP 503")
    )

    assert dto.cards == []
    assert dto.error_state is not None
    assert dto.error_state.title == "Unable to Load Products"
    assert dto.error_state.action == "reload"
