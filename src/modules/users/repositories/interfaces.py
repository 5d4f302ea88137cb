"""User repository interface."""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.users.dtos import SignupDTO
    from modules.users.models import User


class IUserRepository(IRepository["User"]):
    """Repository contract for users.

    ``delete`` raises ``UserHasOrders`` when orders still reference the user.
    """

    @abstractmethod
    def create_user(self, dto: SignupDTO) -> User:
        """Create a user with a hashed password."""

    @abstractmethod
    def get_by_username(self, username: str) -> Optional[User]:
        """Case-insensitive username look-up."""

    @abstractmethod
    def get_by_mobile_number(self, mobile_number: str) -> Optional[User]:
        """Retrieve a user by mobile number."""
