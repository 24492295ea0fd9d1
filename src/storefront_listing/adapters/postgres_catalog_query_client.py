"""PostgreSQL implementation of CatalogQueryClient."""

from __future__ import annotations

import asyncio
import logging
from contextlib import AbstractContextManager
from decimal import Decimal
from typing import TYPE_CHECKING, Callable

from sqlalchemy import ColumnElement, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront_listing.domain.errors import CatalogQueryError
from storefront_listing.domain.listing import (
    CatalogQuery,
    Facet,
    FacetOption,
    ListingResult,
    ProductPrice,
    ProductSummary,
)
from storefront_listing.infra.db.models.product import ProductRow
from storefront_listing.infra.db.session import catalog_session
from storefront_listing.ports.catalog_query_client import CatalogQueryClient
from storefront_listing.use_cases.build_catalog_query import (
    CATEGORY_FILTER_KEY,
    PRICE_FILTER_KEY,
)

if TYPE_CHECKING:
    from sqlalchemy.sql import Select

logger = logging.getLogger(__name__)

# Facet key -> (title, column) for facets backed by a products column.
FACET_COLUMNS = {
    "manufacturer": ("Manufacturer", ProductRow.manufacturer),
    "product_category": ("Category", ProductRow.category),
}

_SORT_COLUMNS = {
    "PRICE": ProductRow.price,
    "NAME": ProductRow.name,
}


class PostgresCatalogQueryClient(CatalogQueryClient):
    """
    Catalog search over the local ``products`` table.

    - Phrase: case-insensitive substring over sku, name and description
    - Facets: OR within a facet, AND across facets; unknown facet keys are ignored
    - Returns total_count via COUNT(*) and facet counts over all matches
    - Runs blocking SQL in a worker thread, one session per search
    """

    def __init__(
        self,
        session_scope: Callable[[], AbstractContextManager[Session]] = catalog_session,
    ) -> None:
        self._session_scope = session_scope

    async def search(self, query: CatalogQuery) -> ListingResult:
        try:
            return await asyncio.to_thread(self._search, query)
        except SQLAlchemyError as exc:
            raise CatalogQueryError("Catalog database query failed", page=query.page) from exc

    def _search(self, query: CatalogQuery) -> ListingResult:
        with self._session_scope() as session:
            base = self._build_query(query)

            count_query = select(func.count()).select_from(base.subquery())
            total_count = session.execute(count_query).scalar() or 0

            page_query = (
                self._apply_sort(base, query)
                .offset((query.page - 1) * query.page_size)
                .limit(query.page_size)
            )
            rows = session.execute(page_query).scalars().all()

            facets = self._facets(session, base)

        return ListingResult(
            items=[self._to_domain(row) for row in rows],
            total_count=total_count,
            facets=facets,
        )

    def _build_query(self, query: CatalogQuery) -> Select[tuple[ProductRow]]:
        statement = select(ProductRow)

        if query.phrase:
            pattern = f"%{query.phrase}%"
            statement = statement.where(
                or_(
                    ProductRow.sku.ilike(pattern),
                    ProductRow.name.ilike(pattern),
                    ProductRow.description.ilike(pattern),
                )
            )

        for key, values in (query.filter or {}).items():
            if key == CATEGORY_FILTER_KEY:
                statement = statement.where(ProductRow.category_url_key.in_(values))
            elif key == PRICE_FILTER_KEY:
                statement = statement.where(or_(*(self._price_clause(token) for token in values)))
            elif key in FACET_COLUMNS:
                _, column = FACET_COLUMNS[key]
                statement = statement.where(column.in_(values))
            else:
                logger.warning("Ignoring unsupported facet filter", extra={"facet": key})

        return statement

    def _price_clause(self, token: str) -> ColumnElement[bool]:
        low, _, high = token.partition("-")
        return ProductRow.price.between(Decimal(low), Decimal(high))

    def _apply_sort(
        self, statement: Select[tuple[ProductRow]], query: CatalogQuery
    ) -> Select[tuple[ProductRow]]:
        # sku breaks ties so page boundaries stay stable
        if query.sort is None or query.sort.attribute not in _SORT_COLUMNS:
            return statement.order_by(ProductRow.sku)

        column = _SORT_COLUMNS[query.sort.attribute]
        ordered = column.desc() if query.sort.direction == "DESC" else column.asc()
        return statement.order_by(ordered, ProductRow.sku)

    def _facets(self, session: Session, base: Select[tuple[ProductRow]]) -> list[Facet]:
        matches = base.subquery()
        facets = []
        for key, (title, column) in FACET_COLUMNS.items():
            value = matches.c[column.key]
            facet_query = (
                select(value, func.count())
                .where(value.is_not(None))
                .group_by(value)
                .order_by(value)
            )
            options = tuple(
                FacetOption(id=option, name=option, count=count)
                for option, count in session.execute(facet_query).all()
            )
            facets.append(Facet(key=key, title=title, options=options))
        return facets

    def _to_domain(self, row: ProductRow) -> ProductSummary:
        attributes = {}
        if row.manufacturer:
            attributes["manufacturer"] = row.manufacturer
        if row.category:
            attributes["product_category"] = row.category

        return ProductSummary(
            sku=row.sku,
            name=row.name,
            description=row.description,
            image_url=row.image_url,
            price=ProductPrice(value=row.price, currency=row.currency),
            in_stock=row.in_stock,
            category=row.category,
            attributes=attributes,
        )
