"""Product repository interface.

Extends ``IRepository[Product]`` with the SKU look-up behind the
uniqueness rule and the rating-annotated reads the catalog serves.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.products.models import Product


class IProductRepository(IRepository["Product"]):
    """Repository contract for the Product aggregate.

    Reads only ever see live (not soft-deleted) products.
    """

    @abstractmethod
    def get_by_sku(self, sku: str) -> Optional[Product]:
        """Retrieve a live product by SKU."""

    @abstractmethod
    def get_with_ratings(self, id: str) -> Optional[Product]:
        """Product annotated with ``average_rating`` / ``review_count``,
        its reviews and their authors prefetched."""

    @abstractmethod
    def list_with_ratings(self, filters: Optional[Dict[str, Any]] = None) -> List[Product]:
        """List products annotated with ``average_rating`` / ``review_count``."""
