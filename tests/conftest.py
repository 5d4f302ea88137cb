from __future__ import annotations

from decimal import Decimal
from itertools import count

import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from modules.orders.dtos import build_place_order_dto
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.services import OrderService
from modules.products.models import Product
from modules.products.repositories.django_repository import ProductDjangoRepository
from modules.users.repositories.django_repository import UserDjangoRepository

User = get_user_model()

_mobile_numbers = count(9000000001)


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


@pytest.fixture()
def api_client():
    """DRF APIClient for testing API endpoints."""
    return APIClient()


@pytest.fixture()
def api_client_with_correlation(api_client):
    """APIClient pre-configured with a known correlation ID header."""
    cid = "test-correlation-id-fixture"
    api_client.defaults["HTTP_X_REQUEST_ID"] = cid
    return api_client, cid


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


@pytest.fixture()
def make_user():
    def _make(username: str, is_staff: bool = False, **extra):
        return User.objects.create_user(
            username=username,
            password="testpass123",
            mobile_number=extra.pop("mobile_number", str(next(_mobile_numbers))),
            age=extra.pop("age", 30),
            is_staff=is_staff,
            **extra,
        )

    return _make


@pytest.fixture()
def buyer(make_user):
    return make_user("buyer")


@pytest.fixture()
def other_buyer(make_user):
    return make_user("other-buyer")


@pytest.fixture()
def staff_user(make_user):
    return make_user("store-admin", is_staff=True)


@pytest.fixture()
def buyer_client(buyer):
    client = APIClient()
    client.force_authenticate(user=buyer)
    return client


@pytest.fixture()
def other_buyer_client(other_buyer):
    client = APIClient()
    client.force_authenticate(user=other_buyer)
    return client


@pytest.fixture()
def staff_client(staff_user):
    client = APIClient()
    client.force_authenticate(user=staff_user)
    return client


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


@pytest.fixture()
def make_product():
    def _make(name: str = "Linen Shirt", **fields):
        defaults = {
            "description": f"{name} description",
            "category": "Shirts",
            "price": Decimal("250.00"),
            "stock": 10,
        }
        defaults.update(fields)
        return Product.objects.create(name=name, **defaults)

    return _make


@pytest.fixture()
def product(make_product):
    return make_product("Linen Shirt", sku="SHIRT-001")


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------


@pytest.fixture()
def shipping_address():
    return {
        "person_name": "Asha Rao",
        "mobile_number": "9876543210",
        "street_address": "12 MG Road",
        "postal_code": "560001",
        "state": "Karnataka",
    }


@pytest.fixture()
def order_payload(product, shipping_address):
    """Placement payload: one line item, quantity 2, total 500."""
    return {
        "items": [
            {
                "product_id": str(product.id),
                "name": product.name,
                "price": "250.00",
                "quantity": 2,
                "image": "/uploads/linen-shirt.jpg",
            }
        ],
        "shipping_address": shipping_address,
        "payment_method": "CASH_ON_DELIVERY",
        "total_price": "500.00",
    }


@pytest.fixture()
def order_service():
    return OrderService(
        order_repository=OrderDjangoRepository(),
        user_repository=UserDjangoRepository(),
        product_repository=ProductDjangoRepository(),
    )


@pytest.fixture()
def place_order(order_service, buyer, order_payload):
    """Place an order through the service; defaults to ``buyer`` and
    ``order_payload``."""

    def _place(user=None, payload=None):
        dto = build_place_order_dto((user or buyer).id, payload or order_payload)
        return order_service.place_order(dto)

    return _place


@pytest.fixture()
def pending_order(place_order):
    return place_order()
