"""Product DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.
DTOs are immutable (``frozen=True``).

- ``CreateProductDTO``: input for product creation.
- ``UpdateProductDTO``: input for partial product updates.
- ``build_product_dto``: turns a raw payload into either DTO, collapsing
  pydantic errors into ``InvalidProductData`` field messages.
"""

from __future__ import annotations

from collections.abc import Mapping
from decimal import Decimal
from typing import Any, Dict, List, Optional, Type, TypeVar

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from modules.products.exceptions import InvalidProductData

D = TypeVar("D", bound=BaseModel)


def _as_list(value: Any) -> Any:
    """Accept a list or a comma-separated string for list fields."""
    if value is None:
        return []
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    return value


def _normalise_sku(value: Optional[str]) -> Optional[str]:
    if value is None or not value.strip():
        return None
    return value.strip().upper()


# ---------------------------------------------------------------------------
# Input DTOs
# ---------------------------------------------------------------------------


class CreateProductDTO(BaseModel):
    """Immutable DTO for product creation requests.

    Validates:
    - ``name``, ``description`` and ``category`` are non-blank.
    - ``price`` is greater than zero; ``sale_price`` is below it.
    - ``stock`` and dimensions are non-negative.
    """

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=1)
    more_description: List[str] = Field(default_factory=list)
    price: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    sale_price: Optional[Decimal] = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    category: str = Field(min_length=1, max_length=100)
    sizes: List[str] = Field(default_factory=list)
    colors: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    image: str = ""
    stock: int = Field(default=0, ge=0)
    sku: Optional[str] = None
    brand: str = ""
    material: str = ""
    weight: Decimal = Field(default=Decimal("0"), ge=0)
    length: Decimal = Field(default=Decimal("0"), ge=0)
    width: Decimal = Field(default=Decimal("0"), ge=0)
    height: Decimal = Field(default=Decimal("0"), ge=0)

    @field_validator("more_description", "sizes", "colors", "tags", mode="before")
    @classmethod
    def split_lists(cls, v: Any) -> Any:
        return _as_list(v)

    @field_validator("sku")
    @classmethod
    def normalise_sku(cls, v: Optional[str]) -> Optional[str]:
        return _normalise_sku(v)

    @model_validator(mode="after")
    def sale_price_below_price(self) -> CreateProductDTO:
        if self.sale_price is not None and self.sale_price >= self.price:
            raise ValueError("Sale price must be lower than the original price.")
        return self


class UpdateProductDTO(BaseModel):
    """Immutable DTO for product update requests.

    All fields are optional; only supplied fields will be updated.  The
    sale-price rule is checked by the service against the merged values.
    """

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, min_length=1)
    more_description: Optional[List[str]] = None
    price: Optional[Decimal] = Field(default=None, gt=0, max_digits=10, decimal_places=2)
    sale_price: Optional[Decimal] = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    category: Optional[str] = Field(default=None, min_length=1, max_length=100)
    sizes: Optional[List[str]] = None
    colors: Optional[List[str]] = None
    tags: Optional[List[str]] = None
    image: Optional[str] = None
    stock: Optional[int] = Field(default=None, ge=0)
    sku: Optional[str] = None
    brand: Optional[str] = None
    material: Optional[str] = None
    weight: Optional[Decimal] = Field(default=None, ge=0)
    length: Optional[Decimal] = Field(default=None, ge=0)
    width: Optional[Decimal] = Field(default=None, ge=0)
    height: Optional[Decimal] = Field(default=None, ge=0)

    @field_validator("more_description", "sizes", "colors", "tags", mode="before")
    @classmethod
    def split_lists(cls, v: Any) -> Any:
        return None if v is None else _as_list(v)

    @field_validator("sku")
    @classmethod
    def normalise_sku(cls, v: Optional[str]) -> Optional[str]:
        return _normalise_sku(v)

    def changes(self) -> Dict[str, Any]:
        """Fields explicitly present in the payload (``sale_price`` may be cleared)."""
        return self.model_dump(exclude_unset=True)


def build_product_dto(dto_class: Type[D], payload: Dict[str, Any]) -> D:
    """Validate a raw product payload against *dto_class*.

    Raises:
        InvalidProductData: one message per failing field.
    """
    if not isinstance(payload, Mapping):
        raise InvalidProductData(["Request body must be a JSON object."])
    fields = dto_class.model_fields
    data = {key: value for key, value in payload.items() if key in fields}
    try:
        return dto_class(**data)
    except ValidationError as exc:
        messages = []
        for error in exc.errors():
            location = ".".join(str(part) for part in error["loc"])
            messages.append(f"{location}: {error['msg']}" if location else error["msg"])
        raise InvalidProductData(messages) from exc
