"""Review domain exceptions."""

from __future__ import annotations

from typing import Iterable, List


class ReviewAlreadyExists(Exception):
    """The user has already reviewed this product."""


class NotEligibleForReview(Exception):
    """The user has no confirmed delivery containing the product."""


class InvalidReviewData(Exception):
    def __init__(self, errors: Iterable[str]) -> None:
        self.errors: List[str] = list(errors)
        super().__init__("; ".join(self.errors) or "Invalid review data.")
