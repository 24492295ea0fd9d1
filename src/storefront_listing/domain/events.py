"""Notifications emitted by a listing coordinator and the signals it consumes.

Sidebar, rendering and scroll collaborators talk to the coordinator only
through these types: they subscribe to notifications on a ListingEventBus
and hand signals to ``CatalogListingCoordinator.dispatch``.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Callable, TypeVar

from storefront_listing.domain.listing import Facet, ListingFilters

logger = logging.getLogger(__name__)


# ==============================================================================
# Emitted notifications
# ==============================================================================


@dataclass(frozen=True, slots=True)
class ListingEvent:
    pass


@dataclass(frozen=True, slots=True)
class LoadingStarted(ListingEvent):
    """First paint of the listing surface is in progress."""


@dataclass(frozen=True, slots=True)
class LoadingEnded(ListingEvent):
    pass


@dataclass(frozen=True, slots=True)
class ValidatingStarted(ListingEvent):
    """A filter, search or sort refinement is reloading the listing."""


@dataclass(frozen=True, slots=True)
class ValidatingEnded(ListingEvent):
    pass


@dataclass(frozen=True, slots=True)
class FacetsUpdated(ListingEvent):
    facets: tuple[Facet, ...]
    total_count: int


@dataclass(frozen=True, slots=True)
class ListingLoaded(ListingEvent):
    """Rendering may proceed; ``succeeded`` is False when the error state is shown."""

    succeeded: bool


# ==============================================================================
# Consumed signals
# ==============================================================================


@dataclass(frozen=True, slots=True)
class FiltersChanged:
    filters: ListingFilters | None = None
    reset: bool = False


@dataclass(frozen=True, slots=True)
class SearchTermChanged:
    search_term: str = ""


@dataclass(frozen=True, slots=True)
class SortChanged:
    sort_by: str | None = None


@dataclass(frozen=True, slots=True)
class ScrollProximityReached:
    pass


ListingSignal = FiltersChanged | SearchTermChanged | SortChanged | ScrollProximityReached


# ==============================================================================
# Observer registry
# ==============================================================================

E = TypeVar("E", bound=ListingEvent)


class ListingEventBus:
    """
    Synchronous observer registry for listing notifications.

    Handlers are called in subscription order. A handler that raises is
    logged and skipped; it never interrupts the publisher.
    """

    def __init__(self) -> None:
        self._handlers: dict[type[ListingEvent], list[Callable[[ListingEvent], None]]] = (
            defaultdict(list)
        )

    def subscribe(self, event_type: type[E], handler: Callable[[E], None]) -> Callable[[], None]:
        """
        Register ``handler`` for ``event_type``.

        Returns:
            A callable that removes the registration
        """
        handlers = self._handlers[event_type]
        handlers.append(handler)  # type: ignore[arg-type]

        def unsubscribe() -> None:
            if handler in handlers:
                handlers.remove(handler)  # type: ignore[arg-type]

        return unsubscribe

    def emit(self, event: ListingEvent) -> None:
        for handler in list(self._handlers.get(type(event), ())):
            try:
                handler(event)
            except Exception:
                logger.error(
                    "Listing event handler failed",
                    exc_info=True,
                    extra={"event_type": type(event).__name__},
                )
