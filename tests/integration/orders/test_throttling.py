"""Scoped throttling on the order endpoints.

Test settings disable throttling globally; these tests switch the
scoped throttle back on for ``OrderViewSet`` with small rates.
"""

from __future__ import annotations

import pytest
from django.core.cache import cache
from rest_framework.throttling import ScopedRateThrottle

from modules.orders.views import OrderViewSet

pytestmark = pytest.mark.integration


@pytest.fixture(autouse=True)
def _scoped_throttle(monkeypatch):
    cache.clear()
    monkeypatch.setattr(OrderViewSet, "throttle_classes", [ScopedRateThrottle])
    monkeypatch.setattr(
        ScopedRateThrottle,
        "THROTTLE_RATES",
        {"order_creation": "3/minute", "order_listing": "10/minute"},
    )
    yield
    cache.clear()


def test_order_creation_is_throttled(buyer_client, order_payload):
    for _ in range(3):
        response = buyer_client.post("/api/v1/orders/", order_payload, format="json")
        assert response.status_code == 201

    response = buyer_client.post("/api/v1/orders/", order_payload, format="json")
    assert response.status_code == 429


def test_order_listing_has_higher_limit(buyer_client):
    for _ in range(5):
        response = buyer_client.get("/api/v1/orders/mine/")
        assert response.status_code == 200


def test_lifecycle_actions_are_not_throttled(buyer_client, place_order):
    orders = [place_order() for _ in range(4)]

    for order in orders:
        response = buyer_client.post(f"/api/v1/orders/{order.id}/cancel/")
        assert response.status_code == 200
