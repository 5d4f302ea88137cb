"""Django ORM implementation of the Review repository."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction

from modules.reviews.models import Review
from modules.reviews.repositories.interfaces import IReviewRepository

logger = structlog.get_logger(__name__)


class ReviewDjangoRepository(IReviewRepository):
    """Concrete Review repository backed by Django ORM."""

    def get_by_id(self, id: str) -> Optional[Review]:
        try:
            return Review.objects.select_related("user").filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_by_user_and_product(self, user_id: str, product_id: str) -> Optional[Review]:
        try:
            return Review.objects.filter(user_id=user_id, product_id=product_id).first()
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Review]:
        queryset = Review.objects.select_related("user")
        if filters:
            queryset = queryset.filter(**filters)
        return list(queryset)

    def list_for_product(self, product_id: str) -> List[Review]:
        try:
            return self.list({"product_id": product_id})
        except (ValueError, ValidationError):
            return []

    @transaction.atomic
    def save(self, entity: Review) -> Review:
        entity.save()
        logger.info(
            "review.saved",
            review_id=str(entity.id),
            product_id=str(entity.product_id),
        )
        return entity

    @transaction.atomic
    def delete(self, id: str) -> bool:
        review = self.get_by_id(id)
        if not review:
            return False
        review.delete()
        return True

    @transaction.atomic
    def delete_for_product(self, product_id: str) -> int:
        deleted, _ = Review.objects.filter(product_id=product_id).delete()
        return deleted
