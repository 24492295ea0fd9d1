from __future__ import annotations

import logging
import time
from collections import OrderedDict
from typing import Callable
from uuid import uuid4

from storefront_listing.domain.errors import NotFoundError
from storefront_listing.use_cases.catalog_listing_coordinator import CatalogListingCoordinator

logger = logging.getLogger(__name__)

DEFAULT_MAX_LISTINGS = 1000
DEFAULT_IDLE_SECONDS = 1800.0


class ListingRegistry:
    """
    In-memory listing sessions, one coordinator per open listing surface.

    Shoppers rarely close a listing explicitly, so the registry is bounded:
    - Listings not touched for ``idle_seconds`` are evicted
    - Opening a listing at capacity evicts the least recently used one
    Evicted listings are deactivated and answer 404 afterwards.
    """

    def __init__(
        self,
        max_listings: int = DEFAULT_MAX_LISTINGS,
        idle_seconds: float = DEFAULT_IDLE_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._max_listings = max_listings
        self._idle_seconds = idle_seconds
        self._clock = clock
        # Least recently used first; values are (coordinator, last access time)
        self._listings: OrderedDict[str, tuple[CatalogListingCoordinator, float]] = OrderedDict()

    def add(self, coordinator: CatalogListingCoordinator) -> str:
        self._evict_idle()
        while len(self._listings) >= self._max_listings:
            oldest_id = next(iter(self._listings))
            self._evict(oldest_id, reason="capacity")

        listing_id = str(uuid4())
        self._listings[listing_id] = (coordinator, self._clock())
        logger.info("Listing opened", extra={"listing_id": listing_id})
        return listing_id

    def get(self, listing_id: str) -> CatalogListingCoordinator:
        """
        Raises:
            NotFoundError: If no open listing has this id
        """
        self._evict_idle()
        entry = self._listings.get(listing_id)
        if entry is None:
            raise NotFoundError(resource="Listing", identifier=listing_id)

        coordinator, _ = entry
        self._listings[listing_id] = (coordinator, self._clock())
        self._listings.move_to_end(listing_id)
        return coordinator

    def close(self, listing_id: str) -> None:
        """
        Raises:
            NotFoundError: If no open listing has this id
        """
        coordinator = self.get(listing_id)
        coordinator.deactivate()
        del self._listings[listing_id]
        logger.info("Listing closed", extra={"listing_id": listing_id})

    def _evict_idle(self) -> None:
        cutoff = self._clock() - self._idle_seconds
        expired = [
            listing_id
            for listing_id, (_, last_access) in self._listings.items()
            if last_access <= cutoff
        ]
        for listing_id in expired:
            self._evict(listing_id, reason="idle")

    def _evict(self, listing_id: str, reason: str) -> None:
        coordinator, _ = self._listings.pop(listing_id)
        coordinator.deactivate()
        logger.info("Listing evicted", extra={"listing_id": listing_id, "reason": reason})

    def __len__(self) -> int:
        return len(self._listings)
