"""Order lifecycle service (Use Cases).

Orchestrates placement and every lifecycle transition.  Each command is
one read-modify-write inside ``transaction.atomic``: the order is loaded
with a row lock, the aggregate's guard decides, and on success the
aggregate, its audit record and its outbox event are written together.
A rejected transition raises before anything is written.

Also answers the review-eligibility query through ``ReviewEligibility``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Optional, Protocol
from uuid import UUID

import structlog
from django.db import transaction

from modules.orders.constants import TERMINAL_STATES, OrderScope, OrderStatus
from modules.orders.events import (
    OrderCancelled,
    OrderPlaced,
    OrderReceiptConfirmed,
    OrderUpdatedByAdmin,
)
from modules.orders.exceptions import OrderNotFound, OrderValidationError

if TYPE_CHECKING:
    from modules.orders.dtos import AdminOrderUpdateDTO, PlaceOrderDTO
    from modules.orders.models import Order
    from modules.orders.repositories.interfaces import IOrderRepository
    from modules.products.repositories.interfaces import IProductRepository
    from modules.users.repositories.interfaces import IUserRepository

logger = structlog.get_logger(__name__)


class ReviewEligibility(Protocol):
    """Capability the reviews module depends on to gate submissions."""

    def is_eligible_for_review(self, user_id: Any, product_id: Any) -> bool: ...


class OrderService:
    """Application service for the order lifecycle.

    Receives repositories via constructor injection (DIP).
    """

    def __init__(
        self,
        order_repository: IOrderRepository,
        user_repository: IUserRepository,
        product_repository: IProductRepository,
    ) -> None:
        self._order_repo = order_repository
        self._user_repo = user_repository
        self._product_repo = product_repository

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def place_order(self, dto: PlaceOrderDTO) -> Order:
        """Create a ``PENDING`` order at delivery stage 1.

        Line-item names and prices are stored as given; they are the
        snapshot shown to the buyer at checkout.

        Raises:
            OrderValidationError: unknown buyer or product reference.
            StoreFailure: the order could not be written.
        """
        log = logger.bind(buyer_id=str(dto.buyer_id), item_count=len(dto.items))
        log.info("order.placement_started")

        errors = []
        if not self._user_repo.get_by_id(str(dto.buyer_id)):
            errors.append(f"buyer_id: user {dto.buyer_id} does not exist.")
        for index, item in enumerate(dto.items):
            if not self._product_repo.get_by_id(str(item.product_id)):
                errors.append(
                    f"items.{index}.product_id: product {item.product_id} does not exist."
                )
        if errors:
            log.warning("order.placement_rejected", errors=errors)
            raise OrderValidationError(errors)

        order = self._order_repo.create(
            {
                "buyer_id": dto.buyer_id,
                "shipping_address": dto.shipping_address.model_dump(),
                "payment_method": dto.payment_method,
                "total_price": dto.total_price,
                "items": [
                    {
                        "product_id": item.product_id,
                        "name": item.name,
                        "unit_price": item.price,
                        "quantity": item.quantity,
                        "image": item.image,
                    }
                    for item in dto.items
                ],
            }
        )
        order.add_domain_event(
            OrderPlaced(aggregate_id=order.id, buyer_id=str(dto.buyer_id))
        )
        self._order_repo.save(order)
        self._order_repo.add_history(order, old_status=None, notes="Order placed")

        log.info("order.placed", order_id=str(order.id))
        return self._order_repo.get_by_id(str(order.id)) or order

    @transaction.atomic
    def apply_admin_update(
        self,
        order_id: UUID,
        dto: AdminOrderUpdateDTO,
        changed_by_id: Optional[UUID] = None,
    ) -> Order:
        """Overwrite status, delivery option and/or admin message.

        Raises:
            OrderNotFound: order does not exist.
            TerminalStateError: order is delivered-and-confirmed or cancelled.
        """
        order = self._load_for_update(order_id)
        log = logger.bind(order_id=str(order_id), current_status=order.status)

        old_status = order.status
        try:
            order.apply_admin_update(
                status=dto.status,
                delivery_option=dto.delivery_option,
                admin_message=dto.admin_message,
            )
        except Exception:
            log.warning("order.admin_update_rejected")
            raise

        order.add_domain_event(
            OrderUpdatedByAdmin(
                aggregate_id=order.id,
                old_status=old_status,
                new_status=order.status,
                delivery_option=order.delivery_option,
            )
        )
        self._order_repo.save(order)
        self._order_repo.add_history(
            order,
            old_status=old_status,
            notes=order.admin_message,
            changed_by_id=changed_by_id,
        )

        log.info(
            "order.admin_updated",
            new_status=order.status,
            delivery_option=order.delivery_option,
        )
        return self._order_repo.get_by_id(str(order_id)) or order

    @transaction.atomic
    def confirm_received(self, order_id: UUID, buyer_id: Optional[UUID] = None) -> Order:
        """Buyer confirms receipt; the order becomes ``DELIVERED_CONFIRMED``.

        Raises:
            OrderNotFound: order does not exist or belongs to someone else.
            TerminalStateError: already confirmed or cancelled.
        """
        order = self._load_for_update(order_id, buyer_id)
        log = logger.bind(order_id=str(order_id), current_status=order.status)

        old_status = order.status
        try:
            order.confirm_received()
        except Exception:
            log.warning("order.confirm_rejected")
            raise

        order.add_domain_event(
            OrderReceiptConfirmed(aggregate_id=order.id, buyer_id=str(order.buyer_id))
        )
        self._order_repo.save(order)
        self._order_repo.add_history(
            order,
            old_status=old_status,
            notes="Receipt confirmed by buyer",
            changed_by_id=buyer_id,
        )

        log.info("order.receipt_confirmed")
        return self._order_repo.get_by_id(str(order_id)) or order

    @transaction.atomic
    def cancel_order(self, order_id: UUID, buyer_id: Optional[UUID] = None) -> Order:
        """Buyer cancels the order while delivery is still far enough out.

        Raises:
            OrderNotFound: order does not exist or belongs to someone else.
            TerminalStateError: shipped, delivered or already closed.
            CancellationWindowClosedError: past the fulfilment cutoff.
        """
        order = self._load_for_update(order_id, buyer_id)
        log = logger.bind(
            order_id=str(order_id),
            current_status=order.status,
            delivery_option=order.delivery_option,
        )

        old_status = order.status
        try:
            order.cancel()
        except Exception:
            log.warning("order.cancel_rejected")
            raise

        order.add_domain_event(OrderCancelled(aggregate_id=order.id, old_status=old_status))
        self._order_repo.save(order)
        self._order_repo.add_history(
            order,
            old_status=old_status,
            notes="Cancelled by buyer",
            changed_by_id=buyer_id,
        )

        log.info("order.cancelled")
        return self._order_repo.get_by_id(str(order_id)) or order

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_order(self, order_id: str, buyer_id: Optional[UUID] = None) -> Order:
        """Order with buyer and products populated.

        Raises:
            OrderNotFound: order does not exist or belongs to someone else.
        """
        order = self._order_repo.get_by_id(str(order_id))
        if not order or (buyer_id is not None and str(order.buyer_id) != str(buyer_id)):
            raise OrderNotFound(f"Order {order_id} not found.")
        return order

    def list_orders(
        self,
        scope: Optional[str] = None,
        filters: Optional[Dict[str, Any]] = None,
    ) -> List[Order]:
        """All orders; ``scope`` narrows to open (active) or closed (history)."""
        return self._order_repo.list({**(filters or {}), **_scope_filters(scope)})

    def list_orders_for_buyer(
        self, buyer_id: UUID, scope: Optional[str] = None
    ) -> List[Order]:
        return self._order_repo.list_for_buyer(str(buyer_id), _scope_filters(scope))

    def is_eligible_for_review(self, user_id: Any, product_id: Any) -> bool:
        """True once the user has a confirmed delivery containing the product."""
        eligible = self._order_repo.exists_with_product_and_status(
            str(user_id), str(product_id), OrderStatus.DELIVERED_CONFIRMED
        )
        logger.info(
            "order.review_eligibility_checked",
            user_id=str(user_id),
            product_id=str(product_id),
            eligible=eligible,
        )
        return eligible

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _load_for_update(self, order_id: UUID, buyer_id: Optional[UUID] = None) -> Order:
        order = self._order_repo.get_for_update(str(order_id))
        if not order or (buyer_id is not None and str(order.buyer_id) != str(buyer_id)):
            logger.warning("order.not_found", order_id=str(order_id))
            raise OrderNotFound(f"Order {order_id} not found.")
        return order


def _scope_filters(scope: Optional[str]) -> Dict[str, Any]:
    if scope == OrderScope.HISTORY:
        return {"status__in": sorted(TERMINAL_STATES)}
    if scope == OrderScope.ACTIVE:
        return {"status__in": sorted(set(OrderStatus.values) - TERMINAL_STATES)}
    return {}
