"""Pure rendering of listing state into view-models.

Nothing here performs I/O or mutates coordinator state; every function maps
immutable inputs to immutable outputs.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Mapping

from storefront_listing.domain.listing import ProductSummary
from storefront_listing.domain.view_state import ListingSnapshot, ListingStatus

PRICE_LABEL = "per unit"
PLACEHOLDER_IMAGE_MARKER = "placeholder.png"

_CURRENCY_SYMBOLS = {"USD": "$", "EUR": "€", "GBP": "£"}


@dataclass(frozen=True, slots=True)
class PricingInfo:
    unit_price: Decimal
    currency: str = "USD"
    retail_price: Decimal | None = None
    savings: Decimal = Decimal("0")
    savings_percent: int = 0


@dataclass(frozen=True, slots=True)
class ProductCard:
    sku: str
    name: str
    detail_url: str
    image_url: str | None
    price_text: str | None = None
    price_label: str | None = None
    list_price_text: str | None = None
    savings_text: str | None = None

    @property
    def uses_placeholder_image(self) -> bool:
        return self.image_url is None


@dataclass(frozen=True, slots=True)
class EmptyState:
    message: str = "No products found matching your criteria."
    action_label: str = "Clear Filters"
    action: str = "reset_filters"


@dataclass(frozen=True, slots=True)
class ErrorState:
    title: str = "Unable to Load Products"
    message: str = "We're having trouble loading the catalog. Please try again."
    action_label: str = "Reload Page"
    action: str = "reload"


@dataclass(frozen=True, slots=True)
class ListingView:
    status: ListingStatus
    cards: tuple[ProductCard, ...] = ()
    count_label: str | None = None
    empty_state: EmptyState | None = None
    error_state: ErrorState | None = None
    show_load_more: bool = False

    @property
    def is_validating(self) -> bool:
        return self.status is ListingStatus.VALIDATING


def format_currency(value: Decimal, currency: str = "USD") -> str:
    amount = Decimal(value).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    symbol = _CURRENCY_SYMBOLS.get(currency)
    if symbol is None:
        return f"{amount:,.2f} {currency}"
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol}{abs(amount):,.2f}"


def count_label(loaded: int, total: int) -> str:
    """
    Product count text above the grid.

    ``"Showing 48 of 130 products"`` mid-pagination, otherwise
    ``"130 products"`` / ``"1 product"`` / ``"0 products"``.
    """
    if total > loaded:
        return f"Showing {loaded} of {total} products"
    return f"{loaded} product{'' if loaded == 1 else 's'}"


def build_pricing_map(items: Iterable[ProductSummary]) -> dict[str, PricingInfo]:
    """Pricing per SKU from the prices embedded in catalog items."""
    return {
        item.sku: PricingInfo(unit_price=item.price.value, currency=item.price.currency)
        for item in items
        if item.price is not None
    }


def _image_url(item: ProductSummary) -> str | None:
    url = (item.image_url or "").strip()
    if not url or PLACEHOLDER_IMAGE_MARKER in url:
        return None
    return url


def render_product_card(
    item: ProductSummary, pricing: PricingInfo | None, base_path: str = "/"
) -> ProductCard:
    card: dict[str, str | None] = {
        "sku": item.sku,
        "name": item.name,
        "detail_url": f"{base_path}pages/product-detail.html?sku={item.sku}",
        "image_url": _image_url(item),
    }

    if pricing is not None:
        card["price_text"] = format_currency(pricing.unit_price, pricing.currency)
        card["price_label"] = PRICE_LABEL
        if pricing.savings > 0:
            card["savings_text"] = f"Save {pricing.savings_percent}%"
            if pricing.retail_price:
                card["list_price_text"] = (
                    f"List: {format_currency(pricing.retail_price, pricing.currency)}"
                )
    elif item.price is not None and item.price.value:
        card["price_text"] = format_currency(item.price.value, item.price.currency)
        card["price_label"] = PRICE_LABEL

    return ProductCard(**card)  # type: ignore[arg-type]


def render_product_cards(
    items: Iterable[ProductSummary],
    pricing: Mapping[str, PricingInfo],
    base_path: str = "/",
) -> list[ProductCard]:
    return [render_product_card(item, pricing.get(item.sku), base_path) for item in items]


def render_listing(snapshot: ListingSnapshot, base_path: str = "/") -> ListingView:
    """Map a coordinator snapshot to what the listing area shows."""
    if snapshot.status is ListingStatus.ERROR:
        return ListingView(status=snapshot.status, error_state=ErrorState())

    if snapshot.status is not ListingStatus.READY:
        # Items were dropped when the generation started; only the status is shown.
        return ListingView(status=snapshot.status)

    if snapshot.total_count == 0:
        return ListingView(
            status=snapshot.status,
            count_label=count_label(0, 0),
            empty_state=EmptyState(),
        )

    cards = render_product_cards(snapshot.items, build_pricing_map(snapshot.items), base_path)
    return ListingView(
        status=snapshot.status,
        cards=tuple(cards),
        count_label=count_label(snapshot.loaded_count, snapshot.total_count),
        show_load_more=snapshot.has_more and snapshot.loaded_count < snapshot.total_count,
    )
