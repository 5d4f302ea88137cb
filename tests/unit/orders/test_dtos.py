from __future__ import annotations

from decimal import Decimal
from uuid import uuid4

import pytest
from pydantic import ValidationError

from modules.orders.constants import DeliveryOption, OrderStatus, PaymentMethod
from modules.orders.dtos import AdminOrderUpdateDTO, build_place_order_dto
from modules.orders.exceptions import OrderValidationError

pytestmark = pytest.mark.unit


@pytest.fixture()
def payload():
    return {
        "items": [
            {
                "product_id": str(uuid4()),
                "name": "Linen Shirt",
                "price": "250.00",
                "quantity": 2,
                "image": "/uploads/linen-shirt.jpg",
            }
        ],
        "shipping_address": {
            "person_name": "Asha Rao",
            "mobile_number": "9876543210",
            "street_address": "12 MG Road",
            "postal_code": "560001",
            "state": "Karnataka",
        },
        "payment_method": "DIGITAL_WALLET",
        "total_price": "500.00",
    }


class TestBuildPlaceOrderDTO:
    def test_valid_payload(self, payload):
        buyer_id = uuid4()

        dto = build_place_order_dto(buyer_id, payload)

        assert dto.buyer_id == buyer_id
        assert dto.payment_method == PaymentMethod.DIGITAL_WALLET
        assert dto.total_price == Decimal("500.00")
        assert dto.items[0].quantity == 2
        assert dto.shipping_address.postal_code == "560001"

    def test_dto_is_frozen(self, payload):
        dto = build_place_order_dto(uuid4(), payload)

        with pytest.raises(ValidationError):
            dto.total_price = Decimal("1.00")

    def test_empty_items_rejected(self, payload):
        payload["items"] = []

        with pytest.raises(OrderValidationError) as exc_info:
            build_place_order_dto(uuid4(), payload)

        assert any("at least one product" in e for e in exc_info.value.errors)

    def test_zero_quantity_rejected(self, payload):
        payload["items"][0]["quantity"] = 0

        with pytest.raises(OrderValidationError) as exc_info:
            build_place_order_dto(uuid4(), payload)

        assert any(e.startswith("items.0.quantity") for e in exc_info.value.errors)

    def test_non_positive_total_rejected(self, payload):
        payload["total_price"] = "0"

        with pytest.raises(OrderValidationError) as exc_info:
            build_place_order_dto(uuid4(), payload)

        assert any(e.startswith("total_price") for e in exc_info.value.errors)

    @pytest.mark.parametrize(
        "field, value",
        [
            ("mobile_number", "12345"),
            ("postal_code", "ABC123"),
            ("person_name", ""),
            ("state", "   "),
        ],
    )
    def test_bad_shipping_field_rejected(self, payload, field, value):
        payload["shipping_address"][field] = value

        with pytest.raises(OrderValidationError) as exc_info:
            build_place_order_dto(uuid4(), payload)

        assert any(f"shipping_address.{field}" in e for e in exc_info.value.errors)

    def test_missing_shipping_address_rejected(self, payload):
        del payload["shipping_address"]

        with pytest.raises(OrderValidationError):
            build_place_order_dto(uuid4(), payload)

    def test_unknown_payment_method_rejected(self, payload):
        payload["payment_method"] = "BARTER"

        with pytest.raises(OrderValidationError) as exc_info:
            build_place_order_dto(uuid4(), payload)

        assert any(e.startswith("payment_method") for e in exc_info.value.errors)

    def test_collects_every_failing_field(self, payload):
        payload["items"][0]["quantity"] = 0
        payload["total_price"] = "-1"

        with pytest.raises(OrderValidationError) as exc_info:
            build_place_order_dto(uuid4(), payload)

        assert len(exc_info.value.errors) == 2

    @pytest.mark.parametrize("quantity", [True, "2", 1.5])
    def test_quantity_must_be_an_integer(self, payload, quantity):
        payload["items"][0]["quantity"] = quantity

        with pytest.raises(OrderValidationError) as exc_info:
            build_place_order_dto(uuid4(), payload)

        assert any(e.startswith("items.0.quantity") for e in exc_info.value.errors)

    @pytest.mark.parametrize("body", [[1, 2], "items", None])
    def test_non_object_body_rejected(self, body):
        with pytest.raises(OrderValidationError) as exc_info:
            build_place_order_dto(uuid4(), body)

        assert exc_info.value.errors == ["Request body must be a JSON object."]


class TestAdminOrderUpdateDTO:
    def test_empty_payload_leaves_everything_unset(self):
        dto = AdminOrderUpdateDTO.from_payload({})

        assert dto.status is None
        assert dto.delivery_option is None
        assert dto.admin_message is None

    def test_parses_known_values(self):
        dto = AdminOrderUpdateDTO.from_payload(
            {"status": "SHIPPED", "delivery_option": "STAGE_3", "admin_message": "On its way"}
        )

        assert dto.status == OrderStatus.SHIPPED
        assert dto.delivery_option == DeliveryOption.STAGE_3
        assert dto.admin_message == "On its way"

    def test_blank_status_means_unchanged(self):
        dto = AdminOrderUpdateDTO.from_payload({"status": ""})

        assert dto.status is None

    def test_unknown_values_rejected(self):
        with pytest.raises(OrderValidationError) as exc_info:
            AdminOrderUpdateDTO.from_payload({"status": "LOST", "delivery_option": "STAGE_9"})

        assert len(exc_info.value.errors) == 2

    def test_non_object_body_rejected(self):
        with pytest.raises(OrderValidationError):
            AdminOrderUpdateDTO.from_payload(["SHIPPED"])
