"""Catalog listing coordinator.

Owns the query and view state of one product listing surface and keeps the
loaded product cards consistent with it while the shopper filters, searches,
sorts and scrolls.
"""

from __future__ import annotations

import logging
from typing import Callable

from storefront_listing.domain.customer import CustomerContext
from storefront_listing.domain.errors import MalformedCatalogResponseError, ValidationError
from storefront_listing.domain.events import (
    FacetsUpdated,
    FiltersChanged,
    ListingEvent,
    ListingEventBus,
    ListingLoaded,
    ListingSignal,
    LoadingEnded,
    LoadingStarted,
    ScrollProximityReached,
    SearchTermChanged,
    SortChanged,
    ValidatingEnded,
    ValidatingStarted,
)
from storefront_listing.domain.listing import (
    ListingFilters,
    ListingQuery,
    ListingResult,
    SortOrder,
)
from storefront_listing.domain.view_state import ListingSnapshot, ListingStatus, ViewState
from storefront_listing.ports.catalog_query_client import CatalogQueryClient
from storefront_listing.ports.customer_context_provider import CustomerContextProvider
from storefront_listing.use_cases.build_catalog_query import build_catalog_query

logger = logging.getLogger(__name__)


class CatalogListingCoordinator:
    """
    Drives catalog queries for one listing surface.

    Guarantees:
    - At most one reload fetch and one load-more fetch are in flight
    - Every filter, search or sort change starts a new generation: page resets
      to 1 and accumulated items are discarded
    - Results from an older generation are never applied
    - Public operations never raise on catalog failures; failures surface as
      ListingStatus.ERROR (reload) or as the end of pagination (load more)

    Overlapping refinements are coalesced: while a reload is in flight, new
    refinements only update the query; the in-flight reload notices the
    generation change when it resolves and re-fetches once with the latest query.
    """

    def __init__(
        self,
        catalog_client: CatalogQueryClient,
        customer_context_provider: CustomerContextProvider | None = None,
        event_bus: ListingEventBus | None = None,
        query: ListingQuery | None = None,
    ) -> None:
        self._catalog_client = catalog_client
        self._customer_context_provider = customer_context_provider
        self.events = event_bus or ListingEventBus()
        self._query = query or ListingQuery()
        self._state = ViewState()
        self._open_notifications: set[type[ListingEvent]] = set()
        self._closed = False

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    @property
    def query(self) -> ListingQuery:
        return self._query

    def snapshot(self) -> ListingSnapshot:
        return ListingSnapshot.of(self._state, self._query)

    def subscribe(
        self, event_type: type[ListingEvent], handler: Callable[..., None]
    ) -> Callable[[], None]:
        return self.events.subscribe(event_type, handler)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def load_initial(self) -> None:
        """First paint: fetch page 1 of the current query."""
        if self._state.is_fetching_initial:
            logger.debug("Initial load already in flight; trigger dropped")
            return
        await self._reload(validating=False)

    async def apply_filters(
        self, filters: ListingFilters | None = None, *, reset: bool = False
    ) -> None:
        """Replace the active filters, or clear filters and search term on reset."""
        if reset:
            self._query = self._query.reset()
        else:
            self._query = self._query.with_filters(filters or ListingFilters())
        await self._reload(validating=True)

    async def apply_search(self, term: str | None) -> None:
        self._query = self._query.with_search_term((term or "").strip())
        await self._reload(validating=True)

    async def apply_sort(self, order: SortOrder | None) -> None:
        self._query = self._query.with_sort(order)
        await self._reload(validating=True)

    async def retry(self) -> None:
        """Reload the unchanged query (the error state's reload action)."""
        await self._reload(validating=True)

    async def maybe_load_more(self) -> None:
        """
        Append the next page when the shopper nears the end of the list.

        No-op while any fetch is in flight, before the first page is shown,
        or once every match is loaded.
        """
        state = self._state
        if (
            self._closed
            or state.is_fetching_more
            or state.is_fetching_initial
            or not state.has_more
            or state.status is not ListingStatus.READY
        ):
            return

        state.is_fetching_more = True
        generation = state.generation
        query = self._query.with_page(state.current_page + 1)
        try:
            result = await self._catalog_client.search(build_catalog_query(query, state.customer))
        except Exception:
            if generation == state.generation:
                # Partial results stay visible; the shopper is not shown an error.
                state.has_more = False
                logger.warning(
                    "Loading more products failed; pagination stopped",
                    exc_info=True,
                    extra={"page": query.page, "loaded": len(state.loaded_items)},
                )
            else:
                logger.info(
                    "Stale load-more failed after a newer query started",
                    extra={"page": query.page, "generation": generation},
                )
            return
        finally:
            state.is_fetching_more = False

        if generation != state.generation:
            logger.info(
                "Discarding stale page",
                extra={
                    "page": query.page,
                    "generation": generation,
                    "current_generation": state.generation,
                },
            )
            return

        self._query = query
        state.current_page = query.page
        state.loaded_items.extend(result.items)
        if len(result.items) < query.page_size or len(state.loaded_items) >= state.total_count:
            state.has_more = False

        logger.info(
            "Loaded more products",
            extra={
                "page": query.page,
                "received": len(result.items),
                "loaded": len(state.loaded_items),
                "total_count": state.total_count,
            },
        )

    async def dispatch(self, signal: ListingSignal) -> None:
        """Route a signal from the filter, search, sort or scroll UI."""
        if isinstance(signal, FiltersChanged):
            await self.apply_filters(signal.filters, reset=signal.reset)
        elif isinstance(signal, SearchTermChanged):
            await self.apply_search(signal.search_term)
        elif isinstance(signal, SortChanged):
            try:
                order = SortOrder.parse(signal.sort_by)
            except ValidationError:
                logger.warning(
                    "Unknown sort order; using relevance", extra={"sort_by": signal.sort_by}
                )
                order = None
            await self.apply_sort(order)
        elif isinstance(signal, ScrollProximityReached):
            await self.maybe_load_more()
        else:
            raise TypeError(f"Unsupported listing signal: {type(signal).__name__}")

    def deactivate(self) -> None:
        """Tear the surface down; in-flight fetches resolve into nothing."""
        self._closed = True
        self._state.start_generation()
        self._state.has_more = False
        self._state.status = ListingStatus.IDLE

    # ------------------------------------------------------------------
    # Reload path
    # ------------------------------------------------------------------

    async def _reload(self, validating: bool) -> None:
        if self._closed:
            logger.debug("Listing deactivated; reload ignored")
            return

        state = self._state
        state.start_generation()
        self._query = self._query.with_page(1)
        state.status = ListingStatus.VALIDATING if validating else ListingStatus.LOADING
        self._open(ValidatingStarted() if validating else LoadingStarted())

        if state.is_fetching_initial:
            logger.debug(
                "Reload coalesced into in-flight fetch", extra={"generation": state.generation}
            )
            return

        state.is_fetching_initial = True
        try:
            await self._fetch_first_page()
        finally:
            state.is_fetching_initial = False
            self._close_notifications()

    async def _fetch_first_page(self) -> None:
        state = self._state
        while True:
            generation = state.generation
            query = self._query
            try:
                customer = await self._resolve_customer()
                result = await self._catalog_client.search(build_catalog_query(query, customer))
                if result.total_count < len(result.items):
                    raise MalformedCatalogResponseError(
                        "Catalog total is smaller than the first page",
                        total_count=result.total_count,
                        received=len(result.items),
                    )
            except Exception as exc:
                if self._is_stale(generation):
                    continue
                self._show_error(exc)
                return

            if self._is_stale(generation):
                logger.info(
                    "Discarding stale first page; re-fetching latest query",
                    extra={"generation": generation, "current_generation": state.generation},
                )
                continue

            state.customer = customer
            self._show_first_page(query, result)
            return

    def _is_stale(self, generation: int) -> bool:
        if self._closed:
            # Returning False stops the retry loop; the closed state is left as is.
            return False
        return generation != self._state.generation

    async def _resolve_customer(self) -> CustomerContext:
        if self._customer_context_provider is None:
            return CustomerContext.guest()
        context = await self._customer_context_provider.get_customer_context()
        return context or CustomerContext.guest()

    def _show_first_page(self, query: ListingQuery, result: ListingResult) -> None:
        state = self._state
        if self._closed:
            return

        items = list(result.items)
        state.loaded_items = items
        state.current_page = 1
        state.total_count = result.total_count if items else 0
        state.has_more = not (len(items) < query.page_size or len(items) >= state.total_count)
        state.status = ListingStatus.READY

        logger.info(
            "Loaded listing",
            extra={
                "loaded": len(items),
                "total_count": state.total_count,
                "phrase": query.phrase,
                "customer_group": state.customer.customer_group if state.customer else None,
            },
        )

        if result.facets is not None:
            state.facets = tuple(result.facets)
            self.events.emit(FacetsUpdated(facets=state.facets, total_count=result.total_count))
        self.events.emit(ListingLoaded(succeeded=True))

    def _show_error(self, exc: Exception) -> None:
        state = self._state
        if self._closed:
            return

        logger.error(
            "Loading products failed",
            exc_info=exc,
            extra={"error_type": type(exc).__name__, "generation": state.generation},
        )
        # Filters and sort stay untouched so the reload action repeats the same query.
        state.loaded_items = []
        state.total_count = 0
        state.has_more = False
        state.status = ListingStatus.ERROR
        state.error_message = str(exc) or type(exc).__name__
        self.events.emit(ListingLoaded(succeeded=False))

    # ------------------------------------------------------------------
    # Started/ended notification pairing
    # ------------------------------------------------------------------

    def _open(self, event: ListingEvent) -> None:
        if type(event) in self._open_notifications:
            return
        self._open_notifications.add(type(event))
        self.events.emit(event)

    def _close_notifications(self) -> None:
        opened = self._open_notifications
        self._open_notifications = set()
        if LoadingStarted in opened:
            self.events.emit(LoadingEnded())
        if ValidatingStarted in opened:
            self.events.emit(ValidatingEnded())
