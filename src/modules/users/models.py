"""Storefront user model.

Extends Django's ``AbstractUser`` so authentication, password hashing
and staff flags come from ``django.contrib.auth``.  Staff users are the
store administrators.

Business rules implemented:
- Username is unique (inherited).
- Mobile number is exactly 10 digits and unique.
- Age is at least 1.
"""

from __future__ import annotations

import uuid6
from django.contrib.auth.models import AbstractUser
from django.core.validators import MinValueValidator, RegexValidator
from django.db import models

MOBILE_NUMBER_VALIDATOR = RegexValidator(
    regex=r"^\d{10}$",
    message="Mobile number must be exactly 10 digits.",
)


class User(AbstractUser):
    id = models.UUIDField(
        primary_key=True,
        default=uuid6.uuid7,
        editable=False,
    )
    mobile_number = models.CharField(
        max_length=10,
        unique=True,
        validators=[MOBILE_NUMBER_VALIDATOR],
    )
    age = models.PositiveSmallIntegerField(validators=[MinValueValidator(1)])
    updated_at = models.DateTimeField(auto_now=True)

    REQUIRED_FIELDS = ["email", "mobile_number", "age"]

    class Meta:
        db_table = "users"
        ordering = ["username"]

    def __str__(self) -> str:
        return self.username
