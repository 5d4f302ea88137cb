"""Review service layer (Use Cases).

A review is accepted only from a buyer who has confirmed receipt of an
order containing the product.  The check is delegated to a
``ReviewEligibility`` implementation (the order lifecycle service) so
this module never reads orders itself.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List

import structlog
from django.db import IntegrityError, transaction

from modules.products.exceptions import ProductNotFound
from modules.reviews.exceptions import NotEligibleForReview, ReviewAlreadyExists
from modules.reviews.models import Review

if TYPE_CHECKING:
    from modules.orders.services import ReviewEligibility
    from modules.products.repositories.interfaces import IProductRepository
    from modules.reviews.dtos import SubmitReviewDTO
    from modules.reviews.repositories.interfaces import IReviewRepository

logger = structlog.get_logger(__name__)


class ReviewService:
    def __init__(
        self,
        repository: IReviewRepository,
        product_repository: IProductRepository,
        eligibility: ReviewEligibility,
    ) -> None:
        self._repo = repository
        self._product_repo = product_repository
        self._eligibility = eligibility

    @transaction.atomic
    def submit_review(self, dto: SubmitReviewDTO) -> Review:
        """Record a rating (1-5) and comment for a product.

        Raises:
            ProductNotFound: unknown or deleted product.
            ReviewAlreadyExists: the user already reviewed the product.
            NotEligibleForReview: no confirmed delivery of the product.
        """
        user_id, product_id = str(dto.user_id), str(dto.product_id)
        log = logger.bind(user_id=user_id, product_id=product_id, rating=dto.rating)

        if not self._product_repo.get_by_id(product_id):
            raise ProductNotFound(f"Product {product_id} not found.")

        if self._repo.get_by_user_and_product(user_id, product_id):
            log.warning("review.duplicate")
            raise ReviewAlreadyExists("You have already submitted a review for this product.")

        if not self._eligibility.is_eligible_for_review(user_id, product_id):
            log.warning("review.not_eligible")
            raise NotEligibleForReview(
                "You can only review products you have purchased and confirmed receipt of."
            )

        review = Review(
            user_id=dto.user_id,
            product_id=dto.product_id,
            rating=dto.rating,
            comment=dto.comment,
        )
        try:
            with transaction.atomic():
                self._repo.save(review)
        except IntegrityError as exc:
            # lost a race against a concurrent submission
            raise ReviewAlreadyExists(
                "You have already submitted a review for this product."
            ) from exc

        log.info("review.submitted", review_id=str(review.id))
        return review

    def list_reviews(self, product_id: str) -> List[Review]:
        """Reviews of a product, newest first, each with its author."""
        return self._repo.list_for_product(product_id)
