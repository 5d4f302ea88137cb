"""User DRF serializers for API output."""

from __future__ import annotations

from django.contrib.auth import get_user_model
from rest_framework import serializers


class UserSerializer(serializers.ModelSerializer):
    """Public profile; the password hash is never rendered."""

    class Meta:
        model = get_user_model()
        fields = [
            "id",
            "username",
            "email",
            "mobile_number",
            "age",
            "is_staff",
            "date_joined",
        ]
        read_only_fields = fields
