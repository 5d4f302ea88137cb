"""Integration tests for order write atomicity.

A failure anywhere in a lifecycle write surfaces as ``StoreFailure`` and
leaves the order, its history and its outbox exactly as they were.
"""

from __future__ import annotations

from unittest.mock import patch

import pytest
from django.db import DatabaseError

from modules.core.models import OutboxEvent
from modules.orders.constants import DeliveryOption, OrderStatus
from modules.orders.dtos import AdminOrderUpdateDTO, build_place_order_dto
from modules.orders.exceptions import StoreFailure
from modules.orders.models import Order, OrderItem, OrderStatusHistory

pytestmark = pytest.mark.integration


def failing(manager, method):
    return patch.object(manager, method, side_effect=DatabaseError("disk full"))


class TestLifecycleRollback:
    def test_cancel_keeps_prior_state_when_history_write_fails(
        self, order_service, pending_order, buyer
    ):
        with failing(OrderStatusHistory.objects, "create"):
            with pytest.raises(StoreFailure):
                order_service.cancel_order(pending_order.id, buyer_id=buyer.id)

        order = Order.objects.get(pk=pending_order.pk)
        assert order.status == OrderStatus.PENDING
        assert order.cancelled_at is None
        assert order.status_history.count() == 1
        assert list(OutboxEvent.objects.values_list("event_type", flat=True)) == [
            "OrderPlaced"
        ]

    def test_admin_update_rolls_back_when_outbox_write_fails(
        self, order_service, pending_order
    ):
        dto = AdminOrderUpdateDTO(
            status=OrderStatus.SHIPPED,
            delivery_option=DeliveryOption.STAGE_4,
            admin_message="Dispatched",
        )

        with failing(OutboxEvent.objects, "bulk_create"):
            with pytest.raises(StoreFailure):
                order_service.apply_admin_update(pending_order.id, dto)

        order = Order.objects.get(pk=pending_order.pk)
        assert order.status == OrderStatus.PENDING
        assert order.delivery_option == DeliveryOption.STAGE_1
        assert order.admin_message == ""
        assert order.status_history.count() == 1

    def test_confirm_keeps_prior_state_when_history_write_fails(
        self, order_service, pending_order, buyer
    ):
        with failing(OrderStatusHistory.objects, "create"):
            with pytest.raises(StoreFailure):
                order_service.confirm_received(pending_order.id, buyer_id=buyer.id)

        order = Order.objects.get(pk=pending_order.pk)
        assert order.status == OrderStatus.PENDING
        assert order.delivered_at is None

    def test_placement_leaves_nothing_when_items_fail(
        self, order_service, buyer, order_payload
    ):
        dto = build_place_order_dto(buyer.id, order_payload)

        with failing(OrderItem.objects, "bulk_create"):
            with pytest.raises(StoreFailure):
                order_service.place_order(dto)

        assert not Order.objects.exists()
        assert not OrderStatusHistory.objects.exists()
        assert not OutboxEvent.objects.exists()


class TestStoreUnavailableResponse:
    def test_cancel_maps_to_service_unavailable(self, buyer_client, pending_order):
        with failing(OrderStatusHistory.objects, "create"):
            response = buyer_client.post(f"/api/v1/orders/{pending_order.id}/cancel/")

        assert response.status_code == 503
        assert response.json()["code"] == "store_unavailable"
        assert Order.objects.get(pk=pending_order.pk).status == OrderStatus.PENDING

    def test_placement_maps_to_service_unavailable(self, buyer_client, order_payload):
        with failing(OrderItem.objects, "bulk_create"):
            response = buyer_client.post("/api/v1/orders/", order_payload, format="json")

        assert response.status_code == 503
        assert response.json()["code"] == "store_unavailable"
        assert not Order.objects.exists()
