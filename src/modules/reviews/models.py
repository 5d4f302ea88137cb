"""Product review model.

One review per (product, user).  Reviews outlive their author: deleting
the user nulls the reference and the API shows "Deleted User".
Reviews are removed together with their product.
"""

from __future__ import annotations

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from modules.core.models import BaseModel

MIN_RATING = 1
MAX_RATING = 5


class Review(BaseModel):
    product = models.ForeignKey(
        "products.Product",
        on_delete=models.CASCADE,
        related_name="reviews",
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="reviews",
    )
    rating = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(MIN_RATING), MaxValueValidator(MAX_RATING)]
    )
    comment = models.TextField(blank=True, default="")

    class Meta:
        db_table = "reviews"
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["product", "user"],
                name="reviews_one_per_user_and_product",
            ),
            models.CheckConstraint(
                condition=models.Q(rating__gte=MIN_RATING, rating__lte=MAX_RATING),
                name="reviews_rating_range",
            ),
        ]

    @property
    def author_name(self) -> str:
        return self.user.username if self.user_id else "Deleted User"

    def __str__(self) -> str:
        return f"{self.rating}/5 for {self.product_id}"
