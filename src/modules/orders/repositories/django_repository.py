"""Django ORM implementation of the Order repository.

Writes are wrapped in ``transaction.atomic()`` so the aggregate, its
line items, its audit record and its outbox events land together or not
at all.  ``DatabaseError`` is translated into ``StoreFailure``.
"""

from __future__ import annotations

from functools import wraps
from typing import Any, Callable, Dict, List, Optional, TypeVar
from uuid import UUID

import structlog
from django.core.exceptions import ValidationError
from django.db import DatabaseError, transaction

from modules.core.models import OutboxEvent
from modules.orders.exceptions import StoreFailure
from modules.orders.models import Order, OrderItem, OrderStatusHistory
from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)

OUTBOX_TOPIC = "orders"

F = TypeVar("F", bound=Callable[..., Any])


def _store_errors(func: F) -> F:
    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except DatabaseError as exc:
            logger.error("order.store_failure", operation=func.__name__, error=str(exc))
            raise StoreFailure(f"Order store failed during {func.__name__}.") from exc

    return wrapper  # type: ignore[return-value]


class OrderDjangoRepository(IOrderRepository):
    """Concrete Order repository backed by Django ORM."""

    # ------------------------------------------------------------------
    # Create (aggregate root + children)
    # ------------------------------------------------------------------

    @_store_errors
    @transaction.atomic
    def create(self, data: Dict[str, Any]) -> Order:
        order = Order(
            buyer_id=data["buyer_id"],
            shipping_address=data["shipping_address"],
            payment_method=data["payment_method"],
            total_price=data["total_price"],
        )
        order.save()

        items = data.get("items", [])
        OrderItem.objects.bulk_create(
            [
                OrderItem(
                    order=order,
                    product_id=item["product_id"],
                    name=item["name"],
                    unit_price=item["unit_price"],
                    quantity=item["quantity"],
                    image=item.get("image", ""),
                    position=position,
                )
                for position, item in enumerate(items)
            ]
        )

        logger.info("order.persisted", order_id=str(order.id), item_count=len(items))
        return order

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def queryset(self):
        """Orders with buyer, products and history prefetched."""
        return Order.objects.select_related("buyer").prefetch_related(
            "items__product", "status_history"
        )

    @_store_errors
    def get_by_id(self, id: str) -> Optional[Order]:
        """Order with buyer, products and history populated.

        Returns ``None`` for unknown or malformed IDs.
        """
        try:
            return self.queryset().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    @_store_errors
    def get_for_update(self, id: str) -> Optional[Order]:
        """Must be called inside a transaction."""
        try:
            return Order.objects.select_for_update().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    @_store_errors
    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Order]:
        queryset = self.queryset()
        if filters:
            queryset = queryset.filter(**filters)
        return list(queryset)

    def list_for_buyer(
        self, buyer_id: str, filters: Optional[Dict[str, Any]] = None
    ) -> List[Order]:
        return self.list({**(filters or {}), "buyer_id": buyer_id})

    @_store_errors
    def exists_with_product_and_status(
        self, buyer_id: str, product_id: str, status: str
    ) -> bool:
        try:
            return Order.objects.filter(
                buyer_id=buyer_id,
                items__product_id=product_id,
                status=status,
            ).exists()
        except (ValueError, ValidationError):
            return False

    # ------------------------------------------------------------------
    # Save / Delete (IRepository contract)
    # ------------------------------------------------------------------

    @_store_errors
    @transaction.atomic
    def save(self, entity: Order) -> Order:
        """Persist the full aggregate and flush its events to the outbox."""
        entity.save()

        events = entity.domain_events
        OutboxEvent.objects.bulk_create(
            [
                OutboxEvent(
                    event_type=event.event_name,
                    aggregate_id=str(event.aggregate_id),
                    payload=event.to_payload(),
                    topic=OUTBOX_TOPIC,
                )
                for event in events
            ]
        )
        entity.clear_domain_events()

        logger.info("order.saved", order_id=str(entity.id), event_count=len(events))
        return entity

    def delete(self, id: str) -> bool:
        raise NotImplementedError("Orders are never deleted.")

    # ------------------------------------------------------------------
    # Audit trail
    # ------------------------------------------------------------------

    @_store_errors
    def add_history(
        self,
        order: Order,
        old_status: Optional[str],
        notes: str = "",
        changed_by_id: Optional[UUID] = None,
    ) -> OrderStatusHistory:
        history = OrderStatusHistory.objects.create(
            order=order,
            old_status=old_status,
            new_status=order.status,
            delivery_option=order.delivery_option,
            changed_by_id=changed_by_id,
            notes=notes,
        )
        logger.info(
            "order.history_added",
            order_id=str(order.id),
            old_status=old_status,
            new_status=order.status,
        )
        return history
