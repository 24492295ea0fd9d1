from __future__ import annotations

from decimal import Decimal

import pytest

from storefront_listing.domain.listing import ProductPrice, ProductSummary

MANUFACTURERS = ("acme", "globex")
CATEGORIES = ("Power Tools", "Hand Tools")


def build_products(count: int) -> list[ProductSummary]:
    """Deterministic catalog: alternating manufacturer/category, price = index."""
    return [
        ProductSummary(
            sku=f"SKU-{index:04d}",
            name=f"Product {index:04d}",
            description=f"Description for product {index}",
            image_url=f"/media/sku-{index:04d}.jpg",
            price=ProductPrice(value=Decimal(index)),
            category=CATEGORIES[index % 2],
            attributes={"manufacturer": MANUFACTURERS[index % 2]},
        )
        for index in range(1, count + 1)
    ]


@pytest.fixture()
def catalog_products() -> list[ProductSummary]:
    """130 products: three pages at the default page size of 48."""
    return build_products(130)


@pytest.fixture()
def make_products():
    """Factory for catalogs of a given size."""
    return build_products
