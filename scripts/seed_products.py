#!/usr/bin/env python3
"""
Seed the products table with deterministic random data.

Features:
- Deterministic: fixed seed -> same catalog every run
- Idempotent: safe to run multiple times (clears before seeding)
- 130 products by default, so a 48-per-page listing spans three pages

Usage:
    alembic upgrade head
    python scripts/seed_products.py
"""

from __future__ import annotations

import random
import sys
from decimal import Decimal
from pathlib import Path

# Add src to path so we can import our modules
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from sqlalchemy import delete

from storefront_listing.domain.listing import category_url_key
from storefront_listing.infra.db.models.product import ProductRow
from storefront_listing.infra.db.session import write_session


# ==============================================================================
# Configuration
# ==============================================================================

RANDOM_SEED = 42
NUM_PRODUCTS = 130


# ==============================================================================
# Catalog Data
# ==============================================================================

# Category -> (price floor, price ceiling, product nouns)
CATEGORIES = {
    "Power Tools": (Decimal("49"), Decimal("399"), ["Drill", "Impact Driver", "Circular Saw", "Sander"]),
    "Hand Tools": (Decimal("5"), Decimal("89"), ["Hammer", "Wrench Set", "Screwdriver Kit", "Pliers"]),
    "Fasteners": (Decimal("2"), Decimal("39"), ["Wood Screws", "Anchors", "Bolts", "Rivets"]),
    "Safety": (Decimal("8"), Decimal("149"), ["Safety Glasses", "Work Gloves", "Ear Muffs", "Hard Hat"]),
}

MANUFACTURERS = ["Acme", "Globex", "Initech", "Umbrella", "Stark Industrial"]

ADJECTIVES = ["Compact", "Heavy-Duty", "Pro", "Cordless", "Precision", "Contractor"]


# ==============================================================================
# Seed Generation
# ==============================================================================


def generate_product(index: int) -> ProductRow:
    category = random.choice(list(CATEGORIES))
    floor, ceiling, nouns = CATEGORIES[category]
    manufacturer = random.choice(MANUFACTURERS)
    name = f"{manufacturer} {random.choice(ADJECTIVES)} {random.choice(nouns)}"

    cents = random.randint(int(floor * 100), int(ceiling * 100))
    price = (Decimal(cents) / 100).quantize(Decimal("0.01"))

    return ProductRow(
        sku=f"SKU-{index:05d}",
        name=name,
        description=f"{name} for everyday {category.lower()} jobs.",
        image_url=f"/media/products/sku-{index:05d}.jpg" if random.random() > 0.1 else None,
        price=price,
        currency="USD",
        in_stock=random.random() > 0.15,
        category=category,
        category_url_key=category_url_key(category),
        manufacturer=manufacturer,
    )


def seed_products(num_products: int = NUM_PRODUCTS, seed: int = RANDOM_SEED) -> None:
    random.seed(seed)

    print(f"Seeding database with {num_products} products (seed={seed})...")

    with write_session() as session:
        deleted_count = session.execute(delete(ProductRow)).rowcount
        print(f"   Deleted {deleted_count} existing products")

        products = [generate_product(index) for index in range(1, num_products + 1)]
        session.add_all(products)
        session.flush()

        print(f"Seeded {len(products)} products")
        for product in products[:5]:
            print(f"   {product.sku} {product.name} - ${product.price:,.2f} ({product.category})")
        if len(products) > 5:
            print(f"   ... and {len(products) - 5} more")


# ==============================================================================
# Main
# ==============================================================================


if __name__ == "__main__":
    try:
        seed_products()
    except Exception as e:
        print(f"Error seeding database: {e}", file=sys.stderr)
        sys.exit(1)
