"""Order domain exceptions.

Raised by the aggregate and the service layer.  Views catch them and
translate each one into its own HTTP response; none of them is fatal.
"""

from __future__ import annotations

from typing import Iterable, List


class OrderError(Exception):
    """Base class for order lifecycle failures."""


class OrderValidationError(OrderError):
    """Malformed or missing input, carrying field-level messages."""

    def __init__(self, errors: Iterable[str]) -> None:
        self.errors: List[str] = list(errors)
        super().__init__("; ".join(self.errors) or "Invalid order data.")


class OrderNotFound(OrderError):
    """No order with that identifier is visible to the caller."""


class TerminalStateError(OrderError):
    """A transition was attempted from a state that forbids it."""


class CancellationWindowClosedError(OrderError):
    """Delivery has progressed past the cancellation cutoff."""


class StoreFailure(OrderError):
    """The order store could not complete a read or write."""
