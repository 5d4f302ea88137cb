"""Order repository interface.

Extends ``IRepository[Order]`` with what the lifecycle service needs:
atomic placement with line items, locked loads for read-modify-write,
the audit trail and the review-eligibility look-up.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, List, Optional
from uuid import UUID

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.orders.models import Order, OrderStatusHistory


class IOrderRepository(IRepository["Order"]):
    """Repository contract for the Order aggregate root.

    Implementations raise ``StoreFailure`` when the underlying store
    cannot complete a read or write.
    """

    @abstractmethod
    def create(self, data: Dict[str, Any]) -> Order:
        """Create an order and its line items in one transaction.

        ``data`` holds ``buyer_id``, ``shipping_address``,
        ``payment_method``, ``total_price`` and ``items`` (dicts with
        ``product_id``, ``name``, ``unit_price``, ``quantity``, ``image``).
        """

    @abstractmethod
    def get_for_update(self, id: str) -> Optional[Order]:
        """Load an order with a row-level lock; ``None`` when missing."""

    @abstractmethod
    def add_history(
        self,
        order: Order,
        old_status: Optional[str],
        notes: str = "",
        changed_by_id: Optional[UUID] = None,
    ) -> OrderStatusHistory:
        """Append the order's current status to its audit trail."""

    @abstractmethod
    def list_for_buyer(
        self, buyer_id: str, filters: Optional[Dict[str, Any]] = None
    ) -> List[Order]:
        """List one buyer's orders, newest first."""

    @abstractmethod
    def exists_with_product_and_status(
        self, buyer_id: str, product_id: str, status: str
    ) -> bool:
        """Whether the buyer has an order containing the product in *status*."""
