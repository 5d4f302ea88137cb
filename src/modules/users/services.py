"""User service layer (Use Cases).

Business rules enforced here:
- Username must be unique (case-insensitive).
- Mobile number must be unique.
- A user referenced by orders cannot be deleted.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Optional

import structlog
from django.db import transaction

from modules.users.exceptions import UserAlreadyExists, UserNotFound

if TYPE_CHECKING:
    from modules.users.dtos import SignupDTO
    from modules.users.models import User
    from modules.users.repositories.interfaces import IUserRepository

logger = structlog.get_logger(__name__)


class UserService:
    """Application service for User use-cases.

    Receives an ``IUserRepository`` via constructor injection (DIP).
    """

    def __init__(self, repository: IUserRepository) -> None:
        self._repo = repository

    @transaction.atomic
    def register(self, dto: SignupDTO) -> User:
        """Create a new user after enforcing uniqueness rules.

        Raises:
            UserAlreadyExists: if username or mobile number is taken.
        """
        log = logger.bind(username=dto.username, mobile_number=dto.mobile_number)

        if self._repo.get_by_username(dto.username):
            log.warning("user.duplicate_username")
            raise UserAlreadyExists("Username already exists.")

        if self._repo.get_by_mobile_number(dto.mobile_number):
            log.warning("user.duplicate_mobile_number")
            raise UserAlreadyExists("Mobile number already registered.")

        user = self._repo.create_user(dto)
        log.info("user.registered", user_id=str(user.id))
        return user

    def list_users(self, filters: Optional[Dict[str, Any]] = None) -> List[User]:
        return self._repo.list(filters)

    def get_user(self, id: str) -> User:
        """Raises:
        UserNotFound: if the user does not exist.
        """
        user = self._repo.get_by_id(id)
        if not user:
            raise UserNotFound(f"User {id} not found.")
        return user

    @transaction.atomic
    def delete_user(self, id: str) -> None:
        """Raises:
        UserNotFound: if the user does not exist.
        UserHasOrders: orders still reference the user.
        """
        if not self._repo.delete(id):
            raise UserNotFound(f"User {id} not found.")
        logger.info("user.deleted", user_id=str(id))
