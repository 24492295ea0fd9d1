from __future__ import annotations

from dataclasses import dataclass, field, replace
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Mapping

from storefront_listing.domain.errors import ValidationError


# ==============================================================================
# Constants
# ==============================================================================

DEFAULT_PAGE_SIZE = 48

# Upper bound sent in the price range token when the shopper leaves "max" empty.
PRICE_RANGE_UPPER_BOUND = 999999

PRICE_RANGE_KEY = "price_range"


# ==============================================================================
# Domain Exceptions
# ==============================================================================


class FilterValidationError(ValidationError):
    """Raised when filter parameters are invalid."""

    pass


class PagingValidationError(ValidationError):
    """Raised when paging parameters are invalid."""

    pass


# ==============================================================================
# Sort
# ==============================================================================


class SortOrder(str, Enum):
    RELEVANCE = "relevance"
    PRICE_ASC = "price-asc"
    PRICE_DESC = "price-desc"
    NAME_ASC = "name-asc"
    NAME_DESC = "name-desc"

    @classmethod
    def parse(cls, value: str | None) -> SortOrder | None:
        """
        Parse a sort selection coming from the sort dropdown.

        Empty values mean "no explicit selection".

        Raises:
            ValidationError: If the value is not a known sort order
        """
        if not value:
            return None
        try:
            return cls(value)
        except ValueError:
            raise ValidationError(
                errors=[
                    {
                        "field": "sort_by",
                        "message": f"Must be one of {[order.value for order in cls]}",
                        "code": "INVALID_SORT",
                    }
                ]
            )


# ==============================================================================
# Filters
# ==============================================================================


@dataclass(frozen=True, slots=True)
class MultiSelectFilter:
    """Selected option ids of a facet, in selection order."""

    option_ids: tuple[str, ...]

    def is_empty(self) -> bool:
        return not self.option_ids


def _plain_number(value: Decimal) -> str:
    return format(value.normalize(), "f")


@dataclass(frozen=True, slots=True)
class PriceRangeFilter:
    min: Decimal | None = None
    max: Decimal | None = None

    def is_empty(self) -> bool:
        return self.min is None and self.max is None

    def token(self) -> str:
        """
        Range token understood by the catalog, e.g. ``"10-999999"``.

        Bounds are written as plain fixed-point numbers without trailing zeros,
        so ``Decimal("1E+1")`` and ``Decimal("10.00")`` both become ``10``.
        """
        low = _plain_number(self.min) if self.min is not None else "0"
        high = _plain_number(self.max) if self.max is not None else str(PRICE_RANGE_UPPER_BOUND)
        return f"{low}-{high}"

    def validate(self) -> None:
        """
        Raises:
            FilterValidationError: If the bounds are negative, not Decimal or inverted
        """
        for name, bound in (("min", self.min), ("max", self.max)):
            if bound is None:
                continue
            if not isinstance(bound, Decimal):
                raise FilterValidationError(f"price_range.{name} must be Decimal or None")
            if bound < 0:
                raise FilterValidationError(f"price_range.{name} must be >= 0")
        if self.min is not None and self.max is not None and self.min > self.max:
            raise FilterValidationError("price_range.min cannot be greater than price_range.max")


FacetFilter = MultiSelectFilter | PriceRangeFilter


@dataclass(frozen=True, slots=True)
class ListingFilters:
    """
    Active facet selections keyed by facet key.

    Multi-select facets with no selected options are dropped on construction,
    so an empty selection is never sent to the catalog as ``[]``.
    """

    entries: Mapping[str, FacetFilter] = field(default_factory=dict)

    def __post_init__(self) -> None:
        kept = {key: value for key, value in self.entries.items() if not value.is_empty()}
        object.__setattr__(self, "entries", MappingProxyType(kept))

    @property
    def price_range(self) -> PriceRangeFilter | None:
        value = self.entries.get(PRICE_RANGE_KEY)
        return value if isinstance(value, PriceRangeFilter) else None

    def validate(self) -> None:
        for key, value in self.entries.items():
            if isinstance(value, PriceRangeFilter):
                if key != PRICE_RANGE_KEY:
                    raise FilterValidationError(
                        f"price ranges are only supported under '{PRICE_RANGE_KEY}'", facet=key
                    )
                value.validate()
            elif key == PRICE_RANGE_KEY:
                raise FilterValidationError(
                    f"'{PRICE_RANGE_KEY}' must be a price range", facet=key
                )

    def __bool__(self) -> bool:
        return bool(self.entries)


# ==============================================================================
# Query
# ==============================================================================


@dataclass(frozen=True, slots=True)
class ListingQuery:
    """
    The only state read when building a catalog fetch.

    ``initial_phrase`` and ``category_url_key`` come from the page URL;
    ``search_term`` is the in-page search box. A non-empty search term wins
    over the URL phrase.
    """

    filters: ListingFilters = field(default_factory=ListingFilters)
    search_term: str = ""
    sort: SortOrder | None = None
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE
    initial_phrase: str | None = None
    category_url_key: str | None = None

    @property
    def phrase(self) -> str | None:
        return self.search_term or self.initial_phrase or None

    def with_filters(self, filters: ListingFilters) -> ListingQuery:
        return replace(self, filters=filters, page=1)

    def with_search_term(self, search_term: str) -> ListingQuery:
        return replace(self, search_term=search_term, page=1)

    def with_sort(self, sort: SortOrder | None) -> ListingQuery:
        return replace(self, sort=sort, page=1)

    def reset(self) -> ListingQuery:
        """Clear filters and the in-page search term; URL context is kept."""
        return replace(self, filters=ListingFilters(), search_term="", page=1)

    def with_page(self, page: int) -> ListingQuery:
        return replace(self, page=page)

    def validate(self) -> None:
        """
        Raises:
            PagingValidationError: If page or page_size are out of range
            FilterValidationError: If filters are invalid
        """
        if self.page < 1:
            raise PagingValidationError("page must be >= 1")
        if self.page_size <= 0:
            raise PagingValidationError("page_size must be > 0")
        self.filters.validate()


@dataclass(frozen=True, slots=True)
class SortInput:
    attribute: str
    direction: str


@dataclass(frozen=True, slots=True)
class CatalogQuery:
    """Wire-level query handed to a CatalogQueryClient."""

    page: int
    page_size: int
    phrase: str | None = None
    filter: Mapping[str, tuple[str, ...]] | None = None
    sort: SortInput | None = None
    customer_group: str | None = None

    def to_payload(self) -> dict[str, object]:
        """JSON body for the remote catalog; absent parts are omitted, not nulled."""
        payload: dict[str, object] = {"page": self.page, "pageSize": self.page_size}
        if self.phrase:
            payload["phrase"] = self.phrase
        if self.filter:
            payload["filter"] = {key: list(values) for key, values in self.filter.items()}
        if self.sort is not None:
            payload["sort"] = {"attribute": self.sort.attribute, "direction": self.sort.direction}
        return payload


# ==============================================================================
# Results
# ==============================================================================


@dataclass(frozen=True, slots=True)
class ProductPrice:
    value: Decimal
    currency: str = "USD"


@dataclass(frozen=True, slots=True)
class ProductSummary:
    sku: str
    name: str
    description: str | None = None
    image_url: str | None = None
    price: ProductPrice | None = None
    in_stock: bool = True
    category: str | None = None
    attributes: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class FacetOption:
    id: str
    name: str
    count: int | None = None


@dataclass(frozen=True, slots=True)
class Facet:
    key: str
    title: str
    options: tuple[FacetOption, ...] = ()


@dataclass(frozen=True)
class ListingResult:
    """One page of catalog matches."""

    items: list[ProductSummary]
    total_count: int = 0  # Total matches at the server, independent of page size
    facets: list[Facet] | None = None


def category_url_key(category: str | None) -> str | None:
    """Slug used in category URLs, e.g. ``"Power Tools"`` -> ``"power-tools"``."""
    if not category:
        return None
    return "-".join(category.lower().split())
