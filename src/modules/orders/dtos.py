"""Order DTOs for the Service Layer.

Pydantic v2 contracts between the API views and ``OrderService``.
DTOs are immutable (``frozen=True``).

- ``OrderLineItemDTO`` / ``ShippingAddressDTO`` / ``PlaceOrderDTO``:
  placement input.
- ``AdminOrderUpdateDTO``: partial admin update input.
- ``build_place_order_dto``: turns a raw payload into a DTO, collapsing
  pydantic errors into ``OrderValidationError`` field messages.
"""

from __future__ import annotations

from collections.abc import Mapping
from decimal import Decimal
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from modules.orders.constants import DeliveryOption, OrderStatus, PaymentMethod
from modules.orders.exceptions import OrderValidationError

MOBILE_NUMBER_PATTERN = r"^\d{10}$"
POSTAL_CODE_PATTERN = r"^\d{6}$"


# ---------------------------------------------------------------------------
# Placement
# ---------------------------------------------------------------------------


class OrderLineItemDTO(BaseModel):
    """One purchased product with the name / price / image shown at checkout."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    product_id: UUID
    name: str = Field(min_length=1)
    price: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    quantity: int = Field(ge=1, strict=True)
    image: str = ""


class ShippingAddressDTO(BaseModel):
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    person_name: str = Field(min_length=1)
    mobile_number: str = Field(pattern=MOBILE_NUMBER_PATTERN)
    street_address: str = Field(min_length=1)
    postal_code: str = Field(pattern=POSTAL_CODE_PATTERN)
    state: str = Field(min_length=1)


class PlaceOrderDTO(BaseModel):
    """Validates:
    - at least one line item, each with quantity >= 1;
    - every shipping field present and well formed;
    - ``total_price`` strictly positive.
    """

    model_config = ConfigDict(frozen=True)

    buyer_id: UUID
    items: List[OrderLineItemDTO]
    shipping_address: ShippingAddressDTO
    payment_method: PaymentMethod
    total_price: Decimal = Field(max_digits=12, decimal_places=2)

    @field_validator("items")
    @classmethod
    def items_must_not_be_empty(cls, v: List[OrderLineItemDTO]) -> List[OrderLineItemDTO]:
        if not v:
            raise ValueError("Order must contain at least one product.")
        return v

    @field_validator("total_price")
    @classmethod
    def total_price_must_be_positive(cls, v: Decimal) -> Decimal:
        if v <= 0:
            raise ValueError("Total price must be greater than zero.")
        return v


def build_place_order_dto(buyer_id: Any, payload: Dict[str, Any]) -> PlaceOrderDTO:
    """Validate a raw placement payload.

    Raises:
        OrderValidationError: one message per failing field.
    """
    _require_object(payload)
    try:
        return PlaceOrderDTO(
            buyer_id=buyer_id,
            items=payload.get("items"),
            shipping_address=payload.get("shipping_address"),
            payment_method=payload.get("payment_method"),
            total_price=payload.get("total_price"),
        )
    except ValidationError as exc:
        raise OrderValidationError(_format_errors(exc)) from exc


def _require_object(payload: Any) -> None:
    if not isinstance(payload, Mapping):
        raise OrderValidationError(["Request body must be a JSON object."])


def _format_errors(exc: ValidationError) -> List[str]:
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"])
        messages.append(f"{location}: {error['msg']}" if location else error["msg"])
    return messages


# ---------------------------------------------------------------------------
# Admin update
# ---------------------------------------------------------------------------


class AdminOrderUpdateDTO(BaseModel):
    """Partial update; ``None`` means "leave as is"."""

    model_config = ConfigDict(frozen=True)

    status: Optional[OrderStatus] = None
    delivery_option: Optional[DeliveryOption] = None
    admin_message: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> AdminOrderUpdateDTO:
        """Raises:
        OrderValidationError: unknown status or delivery option.
        """
        _require_object(payload)
        try:
            return cls(
                status=payload.get("status") or None,
                delivery_option=payload.get("delivery_option") or None,
                admin_message=payload.get("admin_message"),
            )
        except ValidationError as exc:
            raise OrderValidationError(_format_errors(exc)) from exc
