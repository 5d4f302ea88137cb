"""Product catalog model.

Business rules implemented:
- SKU is optional; when present it is unique among live products.
- Price must be greater than zero.
- Sale price, when set, must be strictly lower than price.
- Stock and physical dimensions cannot be negative.
- Soft delete via ``deleted_at`` (inherited from SoftDeleteModel), so
  order line items keep resolving their product.
"""

from __future__ import annotations

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models

from modules.core.models import SoftDeleteModel


class Product(SoftDeleteModel):
    """Catalog entry.

    ``sku`` is normalised to uppercase on save to prevent visual duplicates
    (e.g. "sku-01" vs "SKU-01"); a blank SKU is stored as NULL.
    """

    name = models.CharField(max_length=255)
    description = models.TextField()
    more_description = models.JSONField(default=list, blank=True)
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
    )
    sale_price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        default=None,
        validators=[MinValueValidator(Decimal("0"))],
    )
    category = models.CharField(max_length=100)
    sizes = models.JSONField(default=list, blank=True)
    colors = models.JSONField(default=list, blank=True)
    tags = models.JSONField(default=list, blank=True)
    image = models.CharField(max_length=255, blank=True, default="")
    stock = models.PositiveIntegerField(default=0)
    sku = models.CharField(max_length=64, null=True, blank=True, default=None)  # noqa: DJ01
    brand = models.CharField(max_length=100, blank=True, default="")
    material = models.CharField(max_length=100, blank=True, default="")
    weight = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0"))
    length = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0"))
    width = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0"))
    height = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0"))

    class Meta:
        db_table = "products"
        ordering = ["name"]
        indexes = [
            models.Index(fields=["category"], name="products_category_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(price__gt=0),
                name="products_price_positive",
            ),
            models.CheckConstraint(
                condition=models.Q(sale_price__isnull=True)
                | models.Q(sale_price__lt=models.F("price")),
                name="products_sale_price_below_price",
            ),
            models.UniqueConstraint(
                fields=["sku"],
                condition=models.Q(deleted_at__isnull=True),
                name="products_live_sku_unique",
            ),
        ]

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def clean(self) -> None:
        super().clean()
        self.sku = self.normalise_sku(self.sku)
        if self.price is not None and self.price <= 0:
            raise ValidationError({"price": "Price must be greater than zero."})
        if (
            self.sale_price is not None
            and self.price is not None
            and self.sale_price >= self.price
        ):
            raise ValidationError(
                {"sale_price": "Sale price must be lower than the original price."}
            )

    @staticmethod
    def normalise_sku(sku: str | None) -> str | None:
        if sku is None or not sku.strip():
            return None
        return sku.strip().upper()

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def save(self, *args, **kwargs) -> None:
        self.sku = self.normalise_sku(self.sku)
        super().save(*args, **kwargs)

    @property
    def effective_price(self) -> Decimal:
        return self.sale_price if self.sale_price is not None else self.price

    def __str__(self) -> str:
        return f"{self.sku or '-'} - {self.name}"
