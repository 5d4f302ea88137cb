"""Review DRF serializers for API output."""

from __future__ import annotations

from rest_framework import serializers

from modules.reviews.models import Review


class ReviewSerializer(serializers.ModelSerializer):
    """Review with its author's username ("Deleted User" once removed)."""

    username = serializers.CharField(source="author_name", read_only=True)

    class Meta:
        model = Review
        fields = [
            "id",
            "product_id",
            "user_id",
            "username",
            "rating",
            "comment",
            "created_at",
        ]
        read_only_fields = fields
