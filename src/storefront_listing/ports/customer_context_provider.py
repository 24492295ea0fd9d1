from __future__ import annotations

from abc import ABC, abstractmethod

from storefront_listing.domain.customer import CustomerContext


class CustomerContextProvider(ABC):
    """Port for the signed-in shopper's personalization context."""

    @abstractmethod
    async def get_customer_context(self) -> CustomerContext | None:
        """Return the current shopper's context, or None when nobody is signed in."""
        ...
