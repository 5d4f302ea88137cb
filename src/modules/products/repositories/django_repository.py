"""Django ORM implementation of the Product repository.

Satisfies ``IProductRepository`` using Django's QuerySet API.
Error handling follows the Null Object pattern: methods return ``None``
instead of raising HTTP-level exceptions; the Service Layer decides
how to translate a missing entity into an API response.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Avg, Count, FloatField, Prefetch, Value
from django.db.models.functions import Coalesce

from modules.products.models import Product
from modules.products.repositories.interfaces import IProductRepository
from modules.reviews.models import Review

logger = structlog.get_logger(__name__)


class ProductDjangoRepository(IProductRepository):
    """Concrete Product repository backed by Django ORM."""

    def queryset(self):
        """Live products with rating aggregates."""
        return Product.objects.alive().annotate(
            average_rating=Coalesce(
                Avg("reviews__rating", output_field=FloatField()),
                Value(0.0),
                output_field=FloatField(),
            ),
            review_count=Count("reviews", distinct=True),
        )

    def get_by_id(self, id: str) -> Optional[Product]:
        """Retrieve a live product by primary key.

        Returns ``None`` for non-existent, deleted or invalid IDs.
        """
        try:
            return Product.objects.alive().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_with_ratings(self, id: str) -> Optional[Product]:
        try:
            return (
                self.queryset()
                .prefetch_related(
                    Prefetch(
                        "reviews",
                        queryset=Review.objects.select_related("user").order_by("-created_at"),
                    )
                )
                .filter(id=id)
                .first()
            )
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Product]:
        """List live products with optional Django ORM look-ups.

        Examples of valid filters::

            {"category": "Shirts"}
            {"name__icontains": "linen"}
        """
        queryset = Product.objects.alive()
        if filters:
            queryset = queryset.filter(**filters)
        return list(queryset)

    def list_with_ratings(self, filters: Optional[Dict[str, Any]] = None) -> List[Product]:
        queryset = self.queryset()
        if filters:
            queryset = queryset.filter(**filters)
        return list(queryset)

    @transaction.atomic
    def save(self, entity: Product) -> Product:
        """Persist (create or update) a product."""
        entity.save()
        logger.info(
            "product.saved",
            product_id=str(entity.id),
            sku=entity.sku,
        )
        return entity

    @transaction.atomic
    def delete(self, id: str) -> bool:
        """Soft-delete a product by ID.

        Returns ``True`` if the product was found and soft-deleted,
        ``False`` if no live product exists with the given ID.
        """
        product = self.get_by_id(id)
        if not product:
            return False
        product.delete()
        return True

    def get_by_sku(self, sku: str) -> Optional[Product]:
        """Retrieve a live product by SKU (case-insensitive via upper normalisation)."""
        normalised = Product.normalise_sku(sku)
        if normalised is None:
            return None
        return Product.objects.alive().filter(sku=normalised).first()
