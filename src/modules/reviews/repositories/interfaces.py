"""Review repository interface."""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, List, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.reviews.models import Review


class IReviewRepository(IRepository["Review"]):
    """Repository contract for product reviews."""

    @abstractmethod
    def get_by_user_and_product(self, user_id: str, product_id: str) -> Optional[Review]:
        """The user's review of the product, if any."""

    @abstractmethod
    def list_for_product(self, product_id: str) -> List[Review]:
        """Reviews of a product, newest first, authors populated."""

    @abstractmethod
    def delete_for_product(self, product_id: str) -> int:
        """Remove every review of a product; returns how many were removed."""
