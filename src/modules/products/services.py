"""Product service layer (Use Cases).

Orchestrates business logic for the Product aggregate, delegating
persistence to the injected ``IProductRepository``.

Business rules enforced here:
- SKU must be unique among live products.
- Sale price must stay below price after a partial update.
- Deleting a product soft-deletes it and removes its reviews.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Optional

import structlog
from django.db import transaction

from modules.products.exceptions import (
    InvalidProductData,
    ProductAlreadyExists,
    ProductNotFound,
)
from modules.products.models import Product

if TYPE_CHECKING:
    from modules.products.dtos import CreateProductDTO, UpdateProductDTO
    from modules.products.repositories.interfaces import IProductRepository
    from modules.reviews.repositories.interfaces import IReviewRepository

logger = structlog.get_logger(__name__)


class ProductService:
    """Application service for Product use-cases.

    Receives its repositories via constructor injection (DIP).
    """

    def __init__(
        self,
        repository: IProductRepository,
        review_repository: IReviewRepository,
    ) -> None:
        self._repo = repository
        self._review_repo = review_repository

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_product(self, dto: CreateProductDTO) -> Product:
        """Create a new product after enforcing uniqueness rules.

        Raises:
            ProductAlreadyExists: if SKU is already taken.
        """
        log = logger.bind(sku=dto.sku, name=dto.name)

        if dto.sku and self._repo.get_by_sku(dto.sku):
            log.warning("product.duplicate_sku")
            raise ProductAlreadyExists(f"Product with SKU '{dto.sku}' already exists.")

        product = self._repo.save(Product(**dto.model_dump()))
        log.info("product.created", product_id=str(product.id))
        return self._repo.get_with_ratings(str(product.id)) or product

    @transaction.atomic
    def update_product(self, id: str, dto: UpdateProductDTO) -> Product:
        """Update an existing product with the supplied fields.

        Raises:
            ProductNotFound: if the product does not exist.
            ProductAlreadyExists: if the new SKU belongs to another product.
            InvalidProductData: merged sale price is not below price.
        """
        product = self._repo.get_by_id(id)
        if not product:
            raise ProductNotFound(f"Product {id} not found.")

        log = logger.bind(product_id=str(id))
        changes = dto.changes()

        new_sku = changes.get("sku")
        if new_sku and new_sku != product.sku:
            other = self._repo.get_by_sku(new_sku)
            if other and other.id != product.id:
                log.warning("product.duplicate_sku", sku=new_sku)
                raise ProductAlreadyExists(f"Product with SKU '{new_sku}' already exists.")

        for field, value in changes.items():
            if value is None and field not in {"sale_price", "sku"}:
                continue
            setattr(product, field, value)

        if product.sale_price is not None and product.sale_price >= product.price:
            log.warning("product.invalid_sale_price")
            raise InvalidProductData(
                ["sale_price: Sale price must be lower than the original price."]
            )

        self._repo.save(product)
        log.info("product.updated", fields=sorted(changes))
        return self._repo.get_with_ratings(str(id)) or product

    @transaction.atomic
    def delete_product(self, id: str) -> None:
        """Soft-delete a product and remove its reviews.

        Raises:
            ProductNotFound: if the product does not exist.
        """
        if not self._repo.delete(id):
            raise ProductNotFound(f"Product {id} not found.")
        removed = self._review_repo.delete_for_product(id)
        logger.info("product.soft_deleted", product_id=str(id), reviews_removed=removed)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_products(self, filters: Optional[Dict[str, Any]] = None) -> List[Product]:
        """Return live products with ``average_rating`` and ``review_count``."""
        return self._repo.list_with_ratings(filters)

    def get_product(self, id: str) -> Product:
        """Retrieve a single product with its rating summary and reviews.

        Raises:
            ProductNotFound: if the product does not exist.
        """
        product = self._repo.get_with_ratings(id)
        if not product:
            raise ProductNotFound(f"Product {id} not found.")
        logger.info("product.retrieved", product_id=str(id))
        return product
