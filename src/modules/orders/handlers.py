"""Subscribers for order lifecycle events relayed from the outbox."""

from __future__ import annotations

import structlog

from modules.orders.events import (
    OrderCancelled,
    OrderPlaced,
    OrderReceiptConfirmed,
    OrderUpdatedByAdmin,
)
from shared.domain.bus import IEventHandler

logger = structlog.get_logger(__name__)


class OrderPlacedHandler(IEventHandler[OrderPlaced]):
    def handle(self, event: OrderPlaced) -> None:
        logger.info(
            "order.event.placed",
            order_id=str(event.aggregate_id),
            buyer_id=event.buyer_id,
        )


class OrderUpdatedByAdminHandler(IEventHandler[OrderUpdatedByAdmin]):
    def handle(self, event: OrderUpdatedByAdmin) -> None:
        logger.info(
            "order.event.admin_updated",
            order_id=str(event.aggregate_id),
            old_status=event.old_status,
            new_status=event.new_status,
            delivery_option=event.delivery_option,
        )


class OrderReceiptConfirmedHandler(IEventHandler[OrderReceiptConfirmed]):
    def handle(self, event: OrderReceiptConfirmed) -> None:
        logger.info(
            "order.event.receipt_confirmed",
            order_id=str(event.aggregate_id),
            buyer_id=event.buyer_id,
        )


class OrderCancelledHandler(IEventHandler[OrderCancelled]):
    def handle(self, event: OrderCancelled) -> None:
        logger.info(
            "order.event.cancelled",
            order_id=str(event.aggregate_id),
            old_status=event.old_status,
        )


order_placed_handler = OrderPlacedHandler()
order_updated_by_admin_handler = OrderUpdatedByAdminHandler()
order_receipt_confirmed_handler = OrderReceiptConfirmedHandler()
order_cancelled_handler = OrderCancelledHandler()
