from storefront_listing.infra.db.models.base import Base
from storefront_listing.infra.db.models.product import ProductRow

__all__ = ["Base", "ProductRow"]
