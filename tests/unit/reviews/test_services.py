from __future__ import annotations

from unittest.mock import MagicMock
from uuid import uuid4

import pytest
from django.db import IntegrityError

from modules.products.exceptions import ProductNotFound
from modules.reviews.dtos import SubmitReviewDTO, build_submit_review_dto
from modules.reviews.exceptions import (
    InvalidReviewData,
    NotEligibleForReview,
    ReviewAlreadyExists,
)
from modules.reviews.services import ReviewService

pytestmark = pytest.mark.unit


@pytest.fixture()
def review_repo():
    repo = MagicMock()
    repo.get_by_user_and_product.return_value = None
    return repo


@pytest.fixture()
def product_repo():
    repo = MagicMock()
    repo.get_by_id.return_value = MagicMock()
    return repo


@pytest.fixture()
def eligibility():
    checker = MagicMock()
    checker.is_eligible_for_review.return_value = True
    return checker


@pytest.fixture()
def service(review_repo, product_repo, eligibility):
    return ReviewService(
        repository=review_repo,
        product_repository=product_repo,
        eligibility=eligibility,
    )


@pytest.fixture()
def dto():
    return SubmitReviewDTO(user_id=uuid4(), product_id=uuid4(), rating=4, comment="Fits well")


class TestSubmitReview:
    def test_eligible_buyer_can_review(self, service, review_repo, eligibility, dto):
        review = service.submit_review(dto)

        assert review.rating == 4
        assert review.comment == "Fits well"
        review_repo.save.assert_called_once_with(review)
        eligibility.is_eligible_for_review.assert_called_once_with(
            str(dto.user_id), str(dto.product_id)
        )

    def test_unknown_product(self, service, product_repo, review_repo, dto):
        product_repo.get_by_id.return_value = None

        with pytest.raises(ProductNotFound):
            service.submit_review(dto)

        review_repo.save.assert_not_called()

    def test_duplicate_review_is_checked_before_eligibility(
        self, service, review_repo, eligibility, dto
    ):
        review_repo.get_by_user_and_product.return_value = MagicMock()

        with pytest.raises(ReviewAlreadyExists):
            service.submit_review(dto)

        eligibility.is_eligible_for_review.assert_not_called()

    def test_ineligible_buyer_is_refused(self, service, review_repo, eligibility, dto):
        eligibility.is_eligible_for_review.return_value = False

        with pytest.raises(NotEligibleForReview):
            service.submit_review(dto)

        review_repo.save.assert_not_called()

    def test_concurrent_duplicate_surfaces_as_already_exists(self, service, review_repo, dto):
        review_repo.save.side_effect = IntegrityError("unique")

        with pytest.raises(ReviewAlreadyExists):
            service.submit_review(dto)


class TestBuildSubmitReviewDTO:
    def test_valid_payload(self):
        dto = build_submit_review_dto(
            uuid4(), {"product_id": str(uuid4()), "rating": "5", "comment": "  Great  "}
        )

        assert dto.rating == 5
        assert dto.comment == "Great"

    @pytest.mark.parametrize("rating", [0, 6, None])
    def test_rating_out_of_range(self, rating):
        with pytest.raises(InvalidReviewData) as exc_info:
            build_submit_review_dto(uuid4(), {"product_id": str(uuid4()), "rating": rating})

        assert any(e.startswith("rating") for e in exc_info.value.errors)

    def test_missing_product(self):
        with pytest.raises(InvalidReviewData) as exc_info:
            build_submit_review_dto(uuid4(), {"rating": 3})

        assert any(e.startswith("product_id") for e in exc_info.value.errors)

    def test_non_object_body_rejected(self):
        with pytest.raises(InvalidReviewData) as exc_info:
            build_submit_review_dto(uuid4(), [1, 2])

        assert exc_info.value.errors == ["Request body must be a JSON object."]
