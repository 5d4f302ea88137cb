"""Order aggregate, its line items and the status audit trail.

The ``Order`` model owns the lifecycle state machine.  Each transition
method checks its guard first and raises before touching any field, so a
rejected request leaves the instance exactly as it was loaded.

Invariants:
- ``delivered_at`` is set iff ``status == DELIVERED_CONFIRMED``.
- ``cancelled_at`` is set iff ``status == CANCELLED``.
- Line items carry name / price / image snapshots taken at placement.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

from modules.core.models import BaseModel
from modules.orders.constants import (
    CANCELLABLE_DELIVERY_OPTIONS,
    NON_CANCELLABLE_STATES,
    TERMINAL_STATES,
    DeliveryOption,
    OrderStatus,
    PaymentMethod,
)
from modules.orders.exceptions import (
    CancellationWindowClosedError,
    OrderValidationError,
    TerminalStateError,
)
from shared.domain.events import DomainEventMixin


class Order(DomainEventMixin, BaseModel):
    """Order aggregate root."""

    buyer: models.ForeignKey = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="orders",
    )
    shipping_address: models.JSONField = models.JSONField()
    payment_method: models.CharField = models.CharField(
        max_length=20,
        choices=PaymentMethod.choices,
    )
    total_price: models.DecimalField = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
    )
    status: models.CharField = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
        default=OrderStatus.PENDING,
    )
    delivery_option: models.CharField = models.CharField(
        max_length=10,
        choices=DeliveryOption.choices,
        default=DeliveryOption.STAGE_1,
    )
    admin_message: models.TextField = models.TextField(blank=True, default="")
    delivered_at: models.DateTimeField = models.DateTimeField(
        null=True, blank=True, default=None
    )
    cancelled_at: models.DateTimeField = models.DateTimeField(
        null=True, blank=True, default=None
    )

    class Meta:
        db_table = "orders"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status"], name="orders_status_idx"),
            models.Index(fields=["buyer", "status"], name="orders_buyer_status_idx"),
            models.Index(fields=["-created_at"], name="orders_created_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(total_price__gt=0),
                name="orders_total_price_positive",
            ),
        ]

    # ------------------------------------------------------------------
    # State machine
    # ------------------------------------------------------------------

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATES

    @property
    def can_be_cancelled(self) -> bool:
        return (
            self.status not in NON_CANCELLABLE_STATES
            and self.delivery_option in CANCELLABLE_DELIVERY_OPTIONS
        )

    def apply_admin_update(
        self,
        status: Optional[str] = None,
        delivery_option: Optional[str] = None,
        admin_message: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> None:
        """Overwrite whichever of status, delivery option and message is given.

        Status and delivery option move independently of each other.
        Moving into a terminal status stamps its timestamp.

        Raises:
            TerminalStateError: the order is already closed.
            OrderValidationError: unknown status or delivery option.
        """
        if self.is_terminal:
            raise TerminalStateError(
                f"Cannot update an order in status {self.status}."
            )

        errors = []
        if status is not None and status not in OrderStatus.values:
            errors.append(f"status: '{status}' is not a valid order status.")
        if delivery_option is not None and delivery_option not in DeliveryOption.values:
            errors.append(
                f"delivery_option: '{delivery_option}' is not a valid delivery option."
            )
        if errors:
            raise OrderValidationError(errors)

        now = now or timezone.now()
        if status is not None:
            self.status = status
            if status == OrderStatus.CANCELLED:
                self.cancelled_at = now
            elif status == OrderStatus.DELIVERED_CONFIRMED:
                self.delivered_at = now
        if delivery_option is not None:
            self.delivery_option = delivery_option
        if admin_message is not None:
            self.admin_message = admin_message.strip()
        self.updated_at = now

    def confirm_received(self, now: Optional[datetime] = None) -> None:
        """Buyer confirms the parcel arrived.

        Raises:
            TerminalStateError: already confirmed or cancelled.
        """
        if self.is_terminal:
            raise TerminalStateError(
                f"Order cannot be confirmed in status {self.status}."
            )
        now = now or timezone.now()
        self.status = OrderStatus.DELIVERED_CONFIRMED
        self.delivered_at = now
        self.updated_at = now

    def cancel(self, now: Optional[datetime] = None) -> None:
        """Buyer cancels the order.

        Raises:
            TerminalStateError: shipped, delivered or already closed.
            CancellationWindowClosedError: delivery is under 3 days out.
        """
        if self.status in NON_CANCELLABLE_STATES:
            raise TerminalStateError(
                f"Cannot cancel order in status {self.status}."
            )
        if self.delivery_option not in CANCELLABLE_DELIVERY_OPTIONS:
            raise CancellationWindowClosedError(
                f"Cannot cancel order at delivery stage {self.delivery_option}."
            )
        now = now or timezone.now()
        self.status = OrderStatus.CANCELLED
        self.cancelled_at = now
        self.updated_at = now

    def __str__(self) -> str:
        return f"Order {self.id} ({self.status})"


class OrderItem(BaseModel):
    """Line item with the product's name, price and image frozen at placement."""

    order: models.ForeignKey = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="items",
    )
    product: models.ForeignKey = models.ForeignKey(
        "products.Product",
        on_delete=models.PROTECT,
        related_name="order_items",
    )
    name: models.CharField = models.CharField(max_length=255)
    unit_price: models.DecimalField = models.DecimalField(
        max_digits=10,
        decimal_places=2,
    )
    quantity: models.PositiveIntegerField = models.PositiveIntegerField(
        validators=[MinValueValidator(1)],
    )
    image: models.CharField = models.CharField(max_length=255, blank=True, default="")
    position: models.PositiveSmallIntegerField = models.PositiveSmallIntegerField(
        default=0
    )

    class Meta:
        db_table = "order_items"
        ordering = ["position"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gte=1),
                name="order_items_quantity_positive",
            ),
        ]

    @property
    def subtotal(self) -> Decimal:
        return self.unit_price * self.quantity

    def __str__(self) -> str:
        return f"{self.name} x{self.quantity}"


class OrderStatusHistory(BaseModel):
    """Append-only record of one lifecycle mutation.

    ``changed_by`` is ``None`` when the change was not attributed to a
    user (e.g. service calls from management commands).
    """

    order: models.ForeignKey = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="status_history",
    )
    old_status: models.CharField = models.CharField(  # noqa: DJ01
        max_length=20,
        choices=OrderStatus.choices,
        null=True,
        blank=True,
    )
    new_status: models.CharField = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
    )
    delivery_option: models.CharField = models.CharField(
        max_length=10,
        choices=DeliveryOption.choices,
    )
    changed_by: models.ForeignKey = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    notes: models.TextField = models.TextField(blank=True, default="")

    class Meta:
        db_table = "order_status_history"
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(fields=["order", "created_at"], name="osh_order_created_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.order_id}: {self.old_status} -> {self.new_status}"
