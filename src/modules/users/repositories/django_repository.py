"""Django ORM implementation of the User repository.

Look-ups return ``None`` for missing or malformed IDs; the Service Layer
decides how to translate a missing user into an API response.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Optional

import structlog
from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import ProtectedError

from modules.users.exceptions import UserHasOrders
from modules.users.repositories.interfaces import IUserRepository

if TYPE_CHECKING:
    from modules.users.dtos import SignupDTO
    from modules.users.models import User

logger = structlog.get_logger(__name__)


class UserDjangoRepository(IUserRepository):
    """Concrete User repository backed by Django ORM."""

    @property
    def model(self):
        return get_user_model()

    def get_by_id(self, id: str) -> Optional[User]:
        try:
            return self.model.objects.filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_by_username(self, username: str) -> Optional[User]:
        return self.model.objects.filter(username__iexact=username).first()

    def get_by_mobile_number(self, mobile_number: str) -> Optional[User]:
        return self.model.objects.filter(mobile_number=mobile_number).first()

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[User]:
        queryset = self.model.objects.all()
        if filters:
            queryset = queryset.filter(**filters)
        return list(queryset)

    @transaction.atomic
    def create_user(self, dto: SignupDTO) -> User:
        user = self.model.objects.create_user(
            username=dto.username,
            password=dto.password,
            email=dto.email,
            age=dto.age,
            mobile_number=dto.mobile_number,
        )
        logger.info("user.saved", user_id=str(user.id))
        return user

    @transaction.atomic
    def save(self, entity: User) -> User:
        entity.save()
        logger.info("user.saved", user_id=str(entity.id))
        return entity

    @transaction.atomic
    def delete(self, id: str) -> bool:
        """Remove a user; their reviews stay and show as "Deleted User".

        Raises:
            UserHasOrders: orders still reference the user.
        """
        user = self.get_by_id(id)
        if not user:
            return False
        try:
            user.delete()
        except ProtectedError as exc:
            raise UserHasOrders(f"User {id} has orders and cannot be deleted.") from exc
        return True
