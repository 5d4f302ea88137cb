"""Order lifecycle constants.

Statuses, delivery stages and payment methods, plus the sets the
aggregate's guards are built from.
"""

from django.db import models


class OrderStatus(models.TextChoices):
    PENDING = "PENDING", "Pending"
    CONFIRMED = "CONFIRMED", "Confirmed"
    PROCESSING = "PROCESSING", "Processing"
    SHIPPED = "SHIPPED", "Shipped"
    DELIVERED = "DELIVERED", "Delivered"
    CANCELLED = "CANCELLED", "Cancelled"
    DELIVERED_CONFIRMED = "DELIVERED_CONFIRMED", "Delivered & Confirmed"


class DeliveryOption(models.TextChoices):
    """Delivery progress, ordered from furthest to closest."""

    STAGE_1 = "STAGE_1", "Option 1 - 5 days to delivery"
    STAGE_2 = "STAGE_2", "Option 2 - 3 days to delivery"
    STAGE_3 = "STAGE_3", "Option 3 - 2 days to delivery"
    STAGE_4 = "STAGE_4", "Option 4 - 1 day to delivery"
    STAGE_5 = "STAGE_5", "Option 5 - Arriving Today"


class PaymentMethod(models.TextChoices):
    CASH_ON_DELIVERY = "CASH_ON_DELIVERY", "Cash on Delivery"
    DIGITAL_WALLET = "DIGITAL_WALLET", "Digital Wallet"


# Absorbing states: no transition leaves them.
TERMINAL_STATES: frozenset[str] = frozenset(
    {OrderStatus.DELIVERED_CONFIRMED, OrderStatus.CANCELLED}
)

# Past these statuses the parcel has left the warehouse.
NON_CANCELLABLE_STATES: frozenset[str] = TERMINAL_STATES | {
    OrderStatus.DELIVERED,
    OrderStatus.SHIPPED,
}

# Fulfilment cutoff: delivery must still be at least 3 days out.
CANCELLABLE_DELIVERY_OPTIONS: frozenset[str] = frozenset(
    {DeliveryOption.STAGE_1, DeliveryOption.STAGE_2}
)


class OrderScope(models.TextChoices):
    """List filter splitting open orders from closed ones."""

    ACTIVE = "active", "Active"
    HISTORY = "history", "History"
