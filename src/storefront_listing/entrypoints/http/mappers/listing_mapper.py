from __future__ import annotations

from storefront_listing.domain.errors import ValidationError
from storefront_listing.domain.listing import (
    PRICE_RANGE_KEY,
    FacetFilter,
    ListingFilters,
    ListingQuery,
    MultiSelectFilter,
    PriceRangeFilter,
)
from storefront_listing.domain.view_state import ListingSnapshot
from storefront_listing.entrypoints.http.dtos.listing import (
    CreateListingDTO,
    FacetDTO,
    FacetOptionDTO,
    FiltersChangedDTO,
    ListingQueryDTO,
    ListingResponseDTO,
    PriceRangeDTO,
    ProductCardDTO,
    StateMessageDTO,
)
from storefront_listing.presentation.product_cards import render_listing


class ListingMapper:
    """Maps between REST DTOs and the listing domain."""

    @staticmethod
    def to_initial_query(dto: CreateListingDTO, page_size: int) -> ListingQuery:
        return ListingQuery(
            initial_phrase=dto.phrase or None,
            category_url_key=dto.category or None,
            sort=dto.sort_by,
            page_size=page_size,
        )

    @staticmethod
    def to_domain_filters(dto: FiltersChangedDTO) -> ListingFilters:
        """
        Converts sidebar selections to the tagged filter union.

        Raises:
            ValidationError: If a facet carries the wrong kind of value
            FilterValidationError: If the price range is inverted
        """
        entries: dict[str, FacetFilter] = {}
        for key, value in dto.filters.items():
            if key == PRICE_RANGE_KEY:
                if not isinstance(value, PriceRangeDTO):
                    raise ValidationError(
                        errors=[
                            {
                                "field": f"filters.{key}",
                                "message": "Must be an object with min and max",
                                "code": "INVALID_PRICE_RANGE",
                            }
                        ]
                    )
                entries[key] = PriceRangeFilter(min=value.min, max=value.max)
            elif isinstance(value, list):
                entries[key] = MultiSelectFilter(option_ids=tuple(value))
            else:
                raise ValidationError(
                    errors=[
                        {
                            "field": f"filters.{key}",
                            "message": "Must be a list of option ids",
                            "code": "INVALID_FACET_SELECTION",
                        }
                    ]
                )

        filters = ListingFilters(entries=entries)
        filters.validate()
        return filters

    @staticmethod
    def to_query_dto(query: ListingQuery) -> ListingQueryDTO:
        filters: dict[str, PriceRangeDTO | list[str]] = {}
        for key, value in query.filters.entries.items():
            if isinstance(value, PriceRangeFilter):
                filters[key] = PriceRangeDTO(min=value.min, max=value.max)
            else:
                filters[key] = list(value.option_ids)

        return ListingQueryDTO(
            phrase=query.phrase,
            category=query.category_url_key,
            sort_by=query.sort,
            filters=filters,
            page=query.page,
            page_size=query.page_size,
        )

    @staticmethod
    def to_response(
        listing_id: str, snapshot: ListingSnapshot, base_path: str = "/"
    ) -> ListingResponseDTO:
        """
        Renders a coordinator snapshot into the REST response.

        Prices are formatted strings at the boundary; no Decimal leaves here.
        """
        view = render_listing(snapshot, base_path)

        empty_state = None
        if view.empty_state is not None:
            empty_state = StateMessageDTO(
                message=view.empty_state.message,
                action_label=view.empty_state.action_label,
                action=view.empty_state.action,
            )

        error_state = None
        if view.error_state is not None:
            error_state = StateMessageDTO(
                title=view.error_state.title,
                message=view.error_state.message,
                action_label=view.error_state.action_label,
                action=view.error_state.action,
            )

        return ListingResponseDTO(
            id=listing_id,
            status=snapshot.status,
            count_label=view.count_label,
            total_count=snapshot.total_count,
            loaded_count=snapshot.loaded_count,
            has_more=snapshot.has_more,
            show_load_more=view.show_load_more,
            cards=[
                ProductCardDTO(
                    sku=card.sku,
                    name=card.name,
                    detail_url=card.detail_url,
                    image_url=card.image_url,
                    uses_placeholder_image=card.uses_placeholder_image,
                    price=card.price_text,
                    price_label=card.price_label,
                    list_price=card.list_price_text,
                    savings=card.savings_text,
                )
                for card in view.cards
            ],
            facets=[
                FacetDTO(
                    key=facet.key,
                    title=facet.title,
                    options=[
                        FacetOptionDTO(id=option.id, name=option.name, count=option.count)
                        for option in facet.options
                    ],
                )
                for facet in snapshot.facets
            ],
            empty_state=empty_state,
            error_state=error_state,
            query=ListingMapper.to_query_dto(snapshot.query),
        )
