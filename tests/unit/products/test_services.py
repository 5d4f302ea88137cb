from __future__ import annotations

from decimal import Decimal
from uuid import uuid4

import pytest

from modules.products.dtos import CreateProductDTO, UpdateProductDTO
from modules.products.exceptions import (
    InvalidProductData,
    ProductAlreadyExists,
    ProductNotFound,
)
from modules.products.models import Product
from modules.products.repositories.django_repository import ProductDjangoRepository
from modules.products.services import ProductService
from modules.reviews.models import Review
from modules.reviews.repositories.django_repository import ReviewDjangoRepository

pytestmark = pytest.mark.unit


@pytest.fixture()
def service():
    return ProductService(
        repository=ProductDjangoRepository(),
        review_repository=ReviewDjangoRepository(),
    )


def create_dto(**overrides):
    data = {
        "name": "Oxford Shirt",
        "description": "Button-down oxford.",
        "category": "Shirts",
        "price": Decimal("1799.00"),
        "sku": "shirt-002",
    }
    data.update(overrides)
    return CreateProductDTO(**data)


class TestCreateProduct:
    def test_creates_with_empty_rating_summary(self, service):
        product = service.create_product(create_dto())

        assert product.sku == "SHIRT-002"
        assert product.average_rating == 0.0
        assert product.review_count == 0

    def test_duplicate_sku_is_rejected(self, service):
        service.create_product(create_dto())

        with pytest.raises(ProductAlreadyExists):
            service.create_product(create_dto(name="Copy", sku="SHIRT-002"))

    def test_sku_of_deleted_product_can_be_reused(self, service):
        first = service.create_product(create_dto())
        service.delete_product(str(first.id))

        second = service.create_product(create_dto())

        assert second.id != first.id

    def test_products_without_sku_do_not_collide(self, service):
        service.create_product(create_dto(sku=None))
        service.create_product(create_dto(sku=None, name="Another"))

        assert Product.objects.alive().filter(sku__isnull=True).count() == 2


class TestUpdateProduct:
    def test_partial_update(self, service, product):
        updated = service.update_product(
            str(product.id), UpdateProductDTO(stock=3, brand="Loomcraft")
        )

        assert updated.stock == 3
        assert updated.brand == "Loomcraft"
        assert updated.name == product.name

    def test_sale_price_is_checked_against_merged_price(self, service, product):
        with pytest.raises(InvalidProductData):
            service.update_product(str(product.id), UpdateProductDTO(sale_price=Decimal("300")))

        product.refresh_from_db()
        assert product.sale_price is None

    def test_sale_price_can_be_cleared(self, service, make_product):
        product = make_product(sale_price=Decimal("199.00"))

        updated = service.update_product(str(product.id), UpdateProductDTO(sale_price=None))

        assert updated.sale_price is None

    def test_sku_taken_by_another_product(self, service, product, make_product):
        other = make_product("Tee", sku="TEE-001")

        with pytest.raises(ProductAlreadyExists):
            service.update_product(str(other.id), UpdateProductDTO(sku="shirt-001"))

    def test_unknown_product(self, service):
        with pytest.raises(ProductNotFound):
            service.update_product(str(uuid4()), UpdateProductDTO(stock=1))


class TestDeleteProduct:
    def test_soft_deletes_and_removes_reviews(self, service, product, buyer):
        Review.objects.create(product=product, user=buyer, rating=5, comment="Great")

        service.delete_product(str(product.id))

        product.refresh_from_db()
        assert product.is_deleted
        assert not Review.objects.filter(product=product).exists()

    def test_deleted_product_is_hidden(self, service, product):
        service.delete_product(str(product.id))

        with pytest.raises(ProductNotFound):
            service.get_product(str(product.id))
        assert service.list_products() == []

    def test_deleting_twice_reports_not_found(self, service, product):
        service.delete_product(str(product.id))

        with pytest.raises(ProductNotFound):
            service.delete_product(str(product.id))


class TestRatings:
    def test_average_and_count(self, service, product, make_user):
        for rating, name in [(5, "r1"), (4, "r2"), (4, "r3")]:
            Review.objects.create(product=product, user=make_user(name), rating=rating)

        found = service.get_product(str(product.id))

        assert found.review_count == 3
        assert found.average_rating == pytest.approx(13 / 3)
