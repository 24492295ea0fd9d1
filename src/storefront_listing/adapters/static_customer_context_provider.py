from __future__ import annotations

from storefront_listing.domain.customer import CustomerContext
from storefront_listing.ports.customer_context_provider import CustomerContextProvider


class StaticCustomerContextProvider(CustomerContextProvider):
    """
    Provider for a context resolved once, up front.

    Used when the shopper's identity arrives with the request that opens
    the listing. ``None`` means an anonymous shopper.
    """

    def __init__(self, context: CustomerContext | None = None) -> None:
        self._context = context

    async def get_customer_context(self) -> CustomerContext | None:
        return self._context
