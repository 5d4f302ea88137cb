"""Unit tests for OrderService with mocked repositories."""

from __future__ import annotations

from decimal import Decimal
from unittest.mock import MagicMock
from uuid import uuid4

import pytest

from modules.orders.constants import DeliveryOption, OrderScope, OrderStatus, PaymentMethod
from modules.orders.dtos import AdminOrderUpdateDTO, build_place_order_dto
from modules.orders.events import (
    OrderCancelled,
    OrderPlaced,
    OrderReceiptConfirmed,
    OrderUpdatedByAdmin,
)
from modules.orders.exceptions import (
    CancellationWindowClosedError,
    OrderNotFound,
    OrderValidationError,
    TerminalStateError,
)
from modules.orders.models import Order
from modules.orders.services import OrderService

pytestmark = pytest.mark.unit


@pytest.fixture()
def order_repo():
    return MagicMock()


@pytest.fixture()
def user_repo():
    repo = MagicMock()
    repo.get_by_id.return_value = MagicMock()
    return repo


@pytest.fixture()
def product_repo():
    repo = MagicMock()
    repo.get_by_id.return_value = MagicMock()
    return repo


@pytest.fixture()
def service(order_repo, user_repo, product_repo):
    return OrderService(
        order_repository=order_repo,
        user_repository=user_repo,
        product_repository=product_repo,
    )


@pytest.fixture()
def buyer_id():
    return uuid4()


def make_order(buyer_id, status=OrderStatus.PENDING, delivery_option=DeliveryOption.STAGE_1):
    return Order(
        id=uuid4(),
        buyer_id=buyer_id,
        shipping_address={},
        payment_method=PaymentMethod.CASH_ON_DELIVERY,
        total_price=Decimal("500.00"),
        status=status,
        delivery_option=delivery_option,
    )


def placement_dto(buyer_id, product_ids):
    return build_place_order_dto(
        buyer_id,
        {
            "items": [
                {"product_id": str(pid), "name": "Tee", "price": "100.00", "quantity": 1}
                for pid in product_ids
            ],
            "shipping_address": {
                "person_name": "Asha Rao",
                "mobile_number": "9876543210",
                "street_address": "12 MG Road",
                "postal_code": "560001",
                "state": "Karnataka",
            },
            "payment_method": "CASH_ON_DELIVERY",
            "total_price": str(Decimal("100.00") * len(product_ids)),
        },
    )


class TestPlaceOrder:
    def test_creates_order_and_records_placement(self, service, order_repo, buyer_id):
        created = make_order(buyer_id)
        order_repo.create.return_value = created
        captured = []
        order_repo.save.side_effect = lambda order: captured.extend(order.domain_events)
        product_id = uuid4()

        service.place_order(placement_dto(buyer_id, [product_id]))

        data = order_repo.create.call_args.args[0]
        assert data["buyer_id"] == buyer_id
        assert data["total_price"] == Decimal("100.00")
        assert data["items"][0]["product_id"] == product_id
        assert data["items"][0]["unit_price"] == Decimal("100.00")
        assert data["shipping_address"]["postal_code"] == "560001"
        assert [type(e) for e in captured] == [OrderPlaced]
        order_repo.add_history.assert_called_once_with(
            created, old_status=None, notes="Order placed"
        )

    def test_unknown_buyer_is_rejected(self, service, order_repo, user_repo, buyer_id):
        user_repo.get_by_id.return_value = None

        with pytest.raises(OrderValidationError) as exc_info:
            service.place_order(placement_dto(buyer_id, [uuid4()]))

        assert exc_info.value.errors[0].startswith("buyer_id")
        order_repo.create.assert_not_called()

    def test_unknown_products_are_each_reported(
        self, service, order_repo, product_repo, buyer_id
    ):
        product_repo.get_by_id.return_value = None

        with pytest.raises(OrderValidationError) as exc_info:
            service.place_order(placement_dto(buyer_id, [uuid4(), uuid4()]))

        assert [e.split(":")[0] for e in exc_info.value.errors] == [
            "items.0.product_id",
            "items.1.product_id",
        ]
        order_repo.create.assert_not_called()


class TestConfirmReceived:
    def test_confirms_and_records(self, service, order_repo, buyer_id):
        order = make_order(buyer_id, status=OrderStatus.SHIPPED)
        order_repo.get_for_update.return_value = order
        captured = []
        order_repo.save.side_effect = lambda o: captured.extend(o.domain_events)

        service.confirm_received(order.id, buyer_id=buyer_id)

        assert order.status == OrderStatus.DELIVERED_CONFIRMED
        assert order.delivered_at is not None
        assert [type(e) for e in captured] == [OrderReceiptConfirmed]
        order_repo.add_history.assert_called_once_with(
            order,
            old_status=OrderStatus.SHIPPED,
            notes="Receipt confirmed by buyer",
            changed_by_id=buyer_id,
        )

    def test_missing_order(self, service, order_repo):
        order_repo.get_for_update.return_value = None

        with pytest.raises(OrderNotFound):
            service.confirm_received(uuid4())

    def test_other_buyers_order_looks_missing(self, service, order_repo, buyer_id):
        order_repo.get_for_update.return_value = make_order(buyer_id)

        with pytest.raises(OrderNotFound):
            service.confirm_received(uuid4(), buyer_id=uuid4())

        order_repo.save.assert_not_called()

    def test_rejection_writes_nothing(self, service, order_repo, buyer_id):
        order = make_order(buyer_id, status=OrderStatus.CANCELLED)
        order_repo.get_for_update.return_value = order

        with pytest.raises(TerminalStateError):
            service.confirm_received(order.id, buyer_id=buyer_id)

        order_repo.save.assert_not_called()
        order_repo.add_history.assert_not_called()


class TestCancelOrder:
    def test_cancels_and_records(self, service, order_repo, buyer_id):
        order = make_order(buyer_id, delivery_option=DeliveryOption.STAGE_2)
        order_repo.get_for_update.return_value = order
        captured = []
        order_repo.save.side_effect = lambda o: captured.extend(o.domain_events)

        service.cancel_order(order.id, buyer_id=buyer_id)

        assert order.status == OrderStatus.CANCELLED
        assert order.cancelled_at is not None
        assert [type(e) for e in captured] == [OrderCancelled]
        assert captured[0].old_status == OrderStatus.PENDING

    def test_window_closed_writes_nothing(self, service, order_repo, buyer_id):
        order = make_order(
            buyer_id, status=OrderStatus.PROCESSING, delivery_option=DeliveryOption.STAGE_3
        )
        order_repo.get_for_update.return_value = order

        with pytest.raises(CancellationWindowClosedError):
            service.cancel_order(order.id, buyer_id=buyer_id)

        assert order.status == OrderStatus.PROCESSING
        order_repo.save.assert_not_called()

    def test_shipped_order_cannot_be_cancelled(self, service, order_repo, buyer_id):
        order_repo.get_for_update.return_value = make_order(
            buyer_id, status=OrderStatus.SHIPPED
        )

        with pytest.raises(TerminalStateError):
            service.cancel_order(uuid4(), buyer_id=buyer_id)


class TestApplyAdminUpdate:
    def test_updates_and_records_admin(self, service, order_repo, buyer_id):
        order = make_order(buyer_id)
        order_repo.get_for_update.return_value = order
        captured = []
        order_repo.save.side_effect = lambda o: captured.extend(o.domain_events)
        admin_id = uuid4()

        service.apply_admin_update(
            order.id,
            AdminOrderUpdateDTO(
                status=OrderStatus.SHIPPED,
                delivery_option=DeliveryOption.STAGE_4,
                admin_message="Out for delivery",
            ),
            changed_by_id=admin_id,
        )

        assert order.status == OrderStatus.SHIPPED
        assert order.delivery_option == DeliveryOption.STAGE_4
        event = captured[0]
        assert isinstance(event, OrderUpdatedByAdmin)
        assert (event.old_status, event.new_status) == (
            OrderStatus.PENDING,
            OrderStatus.SHIPPED,
        )
        order_repo.add_history.assert_called_once_with(
            order,
            old_status=OrderStatus.PENDING,
            notes="Out for delivery",
            changed_by_id=admin_id,
        )

    def test_terminal_order_is_left_alone(self, service, order_repo, buyer_id):
        order_repo.get_for_update.return_value = make_order(
            buyer_id, status=OrderStatus.DELIVERED_CONFIRMED
        )

        with pytest.raises(TerminalStateError):
            service.apply_admin_update(uuid4(), AdminOrderUpdateDTO(admin_message="x"))

        order_repo.save.assert_not_called()


class TestQueries:
    def test_get_order_hides_other_buyers_orders(self, service, order_repo, buyer_id):
        order_repo.get_by_id.return_value = make_order(buyer_id)

        with pytest.raises(OrderNotFound):
            service.get_order(str(uuid4()), buyer_id=uuid4())

    def test_get_order_without_buyer_scope(self, service, order_repo, buyer_id):
        order = make_order(buyer_id)
        order_repo.get_by_id.return_value = order

        assert service.get_order(str(order.id)) is order

    def test_active_scope_excludes_terminal_states(self, service, order_repo):
        service.list_orders(scope=OrderScope.ACTIVE)

        statuses = order_repo.list.call_args.args[0]["status__in"]
        assert OrderStatus.CANCELLED not in statuses
        assert OrderStatus.DELIVERED_CONFIRMED not in statuses
        assert OrderStatus.SHIPPED in statuses

    def test_history_scope_is_terminal_states(self, service, order_repo, buyer_id):
        service.list_orders_for_buyer(buyer_id, scope=OrderScope.HISTORY)

        order_repo.list_for_buyer.assert_called_once_with(
            str(buyer_id),
            {"status__in": sorted([OrderStatus.CANCELLED, OrderStatus.DELIVERED_CONFIRMED])},
        )

    def test_no_scope_passes_filters_through(self, service, order_repo):
        service.list_orders(filters={"payment_method": "CASH_ON_DELIVERY"})

        order_repo.list.assert_called_once_with({"payment_method": "CASH_ON_DELIVERY"})


class TestReviewEligibility:
    def test_delegates_to_confirmed_delivery_lookup(self, service, order_repo):
        user_id, product_id = uuid4(), uuid4()
        order_repo.exists_with_product_and_status.return_value = True

        assert service.is_eligible_for_review(user_id, product_id) is True
        order_repo.exists_with_product_and_status.assert_called_once_with(
            str(user_id), str(product_id), OrderStatus.DELIVERED_CONFIRMED
        )
