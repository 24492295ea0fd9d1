from __future__ import annotations

from abc import ABC, abstractmethod

from storefront_listing.domain.listing import CatalogQuery, ListingResult


class CatalogQueryClient(ABC):
    """
    Port for the remote catalog search.

    Contract:
        - ``query`` is already in wire shape (see build_catalog_query)
        - Transport errors and non-success statuses raise CatalogQueryError
        - Payloads missing the expected shape raise MalformedCatalogResponseError
    """

    @abstractmethod
    async def search(self, query: CatalogQuery) -> ListingResult:
        """
        Run one page of a catalog search.

        Args:
            query: Phrase, filter, sort and paging for the page to fetch

        Returns:
            ListingResult with the page items, total matches and optional facets

        Raises:
            CatalogQueryError: If the catalog cannot answer the query
        """
        ...
