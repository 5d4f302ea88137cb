"""User domain exceptions.

Raised by the Service Layer when business rules are violated.
The API layer (Views) catches these and translates them into
appropriate HTTP responses.
"""

from __future__ import annotations

from typing import Iterable, List


class UserAlreadyExists(Exception):
    """The username or mobile number is already registered."""


class UserNotFound(Exception):
    """The requested user does not exist."""


class UserHasOrders(Exception):
    """The user cannot be removed while orders reference them."""


class InvalidUserData(Exception):
    """Signup payload failed validation, carrying field-level messages."""

    def __init__(self, errors: Iterable[str]) -> None:
        self.errors: List[str] = list(errors)
        super().__init__("; ".join(self.errors) or "Invalid user data.")
