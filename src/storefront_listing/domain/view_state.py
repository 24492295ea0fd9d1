from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from storefront_listing.domain.customer import CustomerContext
from storefront_listing.domain.listing import Facet, ListingQuery, ProductSummary


class ListingStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"  # first paint
    VALIDATING = "validating"  # refinement of an already painted listing
    READY = "ready"
    ERROR = "error"


@dataclass(slots=True)
class ViewState:
    """
    Mutable session state of one listing surface.

    Owned by exactly one CatalogListingCoordinator; everything else sees
    ListingSnapshot copies.
    """

    loaded_items: list[ProductSummary] = field(default_factory=list)
    current_page: int = 1
    total_count: int = 0
    has_more: bool = True
    is_fetching_initial: bool = False
    is_fetching_more: bool = False
    generation: int = 0
    status: ListingStatus = ListingStatus.IDLE
    facets: tuple[Facet, ...] = ()
    customer: CustomerContext | None = None
    error_message: str | None = None

    def start_generation(self) -> int:
        """Discard accumulated results and invalidate in-flight continuations."""
        self.generation += 1
        self.loaded_items = []
        self.current_page = 1
        self.total_count = 0
        self.has_more = True
        self.error_message = None
        return self.generation


@dataclass(frozen=True, slots=True)
class ListingSnapshot:
    status: ListingStatus
    query: ListingQuery
    items: tuple[ProductSummary, ...]
    total_count: int
    current_page: int
    has_more: bool
    facets: tuple[Facet, ...]
    generation: int
    error_message: str | None = None

    @classmethod
    def of(cls, state: ViewState, query: ListingQuery) -> ListingSnapshot:
        return cls(
            status=state.status,
            query=query,
            items=tuple(state.loaded_items),
            total_count=state.total_count,
            current_page=state.current_page,
            has_more=state.has_more,
            facets=state.facets,
            generation=state.generation,
            error_message=state.error_message,
        )

    @property
    def loaded_count(self) -> int:
        return len(self.items)
