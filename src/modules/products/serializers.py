"""Product DRF serializers for API output.

Input is validated by the pydantic DTOs in ``dtos.py``.
"""

from __future__ import annotations

from rest_framework import serializers

from modules.products.models import Product
from modules.reviews.serializers import ReviewSerializer

PRODUCT_FIELDS = [
    "id",
    "sku",
    "name",
    "description",
    "more_description",
    "price",
    "sale_price",
    "category",
    "sizes",
    "colors",
    "tags",
    "image",
    "stock",
    "brand",
    "material",
    "weight",
    "length",
    "width",
    "height",
    "average_rating",
    "review_count",
    "created_at",
    "updated_at",
]


class ProductSerializer(serializers.ModelSerializer):
    """Catalog entry with its rating summary."""

    average_rating = serializers.SerializerMethodField()
    review_count = serializers.IntegerField(read_only=True, default=0)

    class Meta:
        model = Product
        fields = PRODUCT_FIELDS
        read_only_fields = fields

    def get_average_rating(self, obj: Product) -> float:
        return round(float(getattr(obj, "average_rating", 0) or 0), 1)


class ProductDetailSerializer(ProductSerializer):
    """Catalog entry with every review and its author."""

    reviews = ReviewSerializer(many=True, read_only=True)

    class Meta(ProductSerializer.Meta):
        fields = [*PRODUCT_FIELDS, "reviews"]
        read_only_fields = fields
