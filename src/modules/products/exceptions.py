"""Product domain exceptions.

Raised by the Service Layer when business rules are violated.
The API layer (Views) catches these and translates them into
appropriate HTTP responses.
"""

from __future__ import annotations

from typing import Iterable, List


class ProductAlreadyExists(Exception):
    """A live product with the same SKU already exists."""


class ProductNotFound(Exception):
    """The requested product does not exist or has been soft-deleted."""


class InvalidProductData(Exception):
    """Product payload failed validation, carrying field-level messages."""

    def __init__(self, errors: Iterable[str]) -> None:
        self.errors: List[str] = list(errors)
        super().__init__("; ".join(self.errors) or "Invalid product data.")
