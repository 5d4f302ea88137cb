"""Order DRF serializers for API output.

Input is validated by the pydantic DTOs in ``dtos.py``; the serializers
here only render aggregates, with the buyer and products populated.
"""

from __future__ import annotations

from rest_framework import serializers

from modules.orders.models import Order, OrderItem, OrderStatusHistory

# ---------------------------------------------------------------------------
# Output Serializers (Read)
# ---------------------------------------------------------------------------


class BuyerSummarySerializer(serializers.Serializer):
    id = serializers.UUIDField(read_only=True)
    username = serializers.CharField(read_only=True)


class ProductSummarySerializer(serializers.Serializer):
    id = serializers.UUIDField(read_only=True)
    name = serializers.CharField(read_only=True)
    sku = serializers.CharField(read_only=True, allow_null=True)
    image = serializers.CharField(read_only=True)
    is_deleted = serializers.BooleanField(read_only=True)


class OrderItemSerializer(serializers.ModelSerializer):
    """Line item: the checkout snapshot plus the live product reference."""

    product = ProductSummarySerializer(read_only=True)
    subtotal = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)

    class Meta:
        model = OrderItem
        fields = [
            "id",
            "product",
            "name",
            "unit_price",
            "quantity",
            "image",
            "subtotal",
        ]
        read_only_fields = fields


class StatusHistorySerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderStatusHistory
        fields = [
            "id",
            "old_status",
            "new_status",
            "delivery_option",
            "changed_by_id",
            "notes",
            "created_at",
        ]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    """Read serializer for orders with nested items and history."""

    buyer = BuyerSummarySerializer(read_only=True)
    items = OrderItemSerializer(many=True, read_only=True)
    status_history = StatusHistorySerializer(many=True, read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "buyer",
            "items",
            "shipping_address",
            "payment_method",
            "total_price",
            "status",
            "delivery_option",
            "admin_message",
            "created_at",
            "updated_at",
            "delivered_at",
            "cancelled_at",
            "status_history",
        ]
        read_only_fields = fields


class OrderListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for order lists (no history)."""

    buyer = BuyerSummarySerializer(read_only=True)
    items = OrderItemSerializer(many=True, read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "buyer",
            "items",
            "total_price",
            "payment_method",
            "status",
            "delivery_option",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields
