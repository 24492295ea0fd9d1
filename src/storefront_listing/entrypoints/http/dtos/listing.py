from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from storefront_listing.domain.listing import SortOrder
from storefront_listing.domain.view_state import ListingStatus


# ==============================================================================
# Requests
# ==============================================================================


class CreateListingDTO(BaseModel):
    """Context of the page that opens a listing (taken from its URL)."""

    phrase: str | None = Field(
        default=None,
        description="Search phrase from the page URL (`q` or `search`)",
        examples=["drill"],
        max_length=200,
    )
    category: str | None = Field(
        default=None,
        description="Category URL key from the page URL",
        examples=["power-tools"],
        max_length=120,
    )
    sort_by: SortOrder | None = Field(
        default=None,
        description="Initial sort order; relevance when omitted",
        examples=["price-asc"],
    )


class PriceRangeDTO(BaseModel):
    min: Decimal | None = Field(default=None, ge=0, examples=["10"])
    max: Decimal | None = Field(default=None, ge=0, examples=[None])


class FiltersChangedDTO(BaseModel):
    """Facet selections from the filters sidebar, or a reset."""

    filters: dict[str, PriceRangeDTO | list[str]] = Field(
        default_factory=dict,
        description="Facet key to selected option ids; `price_range` takes {min, max}",
    )
    reset: bool = Field(default=False, description="Clear filters and search term")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "filters": {
                    "manufacturer": ["acme", "globex"],
                    "price_range": {"min": "10", "max": None},
                },
                "reset": False,
            }
        }
    )


class SearchTermChangedDTO(BaseModel):
    search_term: str = Field(default="", max_length=200, examples=["cordless"])


class SortChangedDTO(BaseModel):
    sort_by: SortOrder | None = Field(default=None, examples=["name-asc"])


# ==============================================================================
# Responses
# ==============================================================================


class ProductCardDTO(BaseModel):
    sku: str
    name: str
    detail_url: str
    image_url: str | None
    uses_placeholder_image: bool
    price: str | None = None
    price_label: str | None = None
    list_price: str | None = None
    savings: str | None = None


class FacetOptionDTO(BaseModel):
    id: str
    name: str
    count: int | None = None


class FacetDTO(BaseModel):
    key: str
    title: str
    options: list[FacetOptionDTO]


class StateMessageDTO(BaseModel):
    """Empty or error state shown instead of product cards."""

    title: str | None = None
    message: str
    action_label: str
    action: str


class ListingQueryDTO(BaseModel):
    phrase: str | None
    category: str | None
    sort_by: SortOrder | None
    filters: dict[str, PriceRangeDTO | list[str]]
    page: int
    page_size: int


class ListingResponseDTO(BaseModel):
    id: str
    status: ListingStatus
    count_label: str | None
    total_count: int
    loaded_count: int
    has_more: bool
    show_load_more: bool
    cards: list[ProductCardDTO]
    facets: list[FacetDTO]
    empty_state: StateMessageDTO | None = None
    error_state: StateMessageDTO | None = None
    query: ListingQueryDTO
