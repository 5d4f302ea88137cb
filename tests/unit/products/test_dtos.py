from __future__ import annotations

from decimal import Decimal

import pytest

from modules.products.dtos import CreateProductDTO, UpdateProductDTO, build_product_dto
from modules.products.exceptions import InvalidProductData

pytestmark = pytest.mark.unit


@pytest.fixture()
def payload():
    return {
        "name": "Linen Shirt",
        "description": "Breathable summer shirt.",
        "category": "Shirts",
        "price": "1499.00",
        "sale_price": "1199.00",
        "sizes": "S, M ,L,",
        "colors": ["White", "Sand"],
        "sku": "  shirt-001 ",
        "stock": 40,
    }


class TestCreateProductDTO:
    def test_valid_payload(self, payload):
        dto = build_product_dto(CreateProductDTO, payload)

        assert dto.price == Decimal("1499.00")
        assert dto.sale_price == Decimal("1199.00")
        assert dto.sizes == ["S", "M", "L"]
        assert dto.colors == ["White", "Sand"]
        assert dto.sku == "SHIRT-001"

    def test_unknown_keys_are_ignored(self, payload):
        payload["average_rating"] = 5

        dto = build_product_dto(CreateProductDTO, payload)

        assert not hasattr(dto, "average_rating")

    def test_blank_sku_becomes_none(self, payload):
        payload["sku"] = "   "
        assert build_product_dto(CreateProductDTO, payload).sku is None

    def test_sale_price_must_be_below_price(self, payload):
        payload["sale_price"] = "1499.00"

        with pytest.raises(InvalidProductData) as exc_info:
            build_product_dto(CreateProductDTO, payload)

        assert "lower than the original price" in exc_info.value.errors[0]

    @pytest.mark.parametrize(
        "field, value",
        [("price", "0"), ("name", ""), ("category", "  "), ("stock", -1)],
    )
    def test_invalid_field(self, payload, field, value):
        payload[field] = value

        with pytest.raises(InvalidProductData) as exc_info:
            build_product_dto(CreateProductDTO, payload)

        assert any(e.startswith(field) for e in exc_info.value.errors)

    def test_missing_required_fields_are_all_reported(self):
        with pytest.raises(InvalidProductData) as exc_info:
            build_product_dto(CreateProductDTO, {})

        reported = {e.split(":")[0] for e in exc_info.value.errors}
        assert {"name", "description", "price", "category"} <= reported


class TestUpdateProductDTO:
    def test_changes_only_contains_supplied_fields(self):
        dto = build_product_dto(UpdateProductDTO, {"stock": 5, "tags": "new,summer"})

        assert dto.changes() == {"stock": 5, "tags": ["new", "summer"]}

    def test_explicit_null_sale_price_is_kept(self):
        dto = build_product_dto(UpdateProductDTO, {"sale_price": None})

        assert dto.changes() == {"sale_price": None}

    def test_invalid_price(self):
        with pytest.raises(InvalidProductData):
            build_product_dto(UpdateProductDTO, {"price": "-5"})

    def test_non_object_body_rejected(self):
        with pytest.raises(InvalidProductData) as exc_info:
            build_product_dto(UpdateProductDTO, ["price"])

        assert exc_info.value.errors == ["Request body must be a JSON object."]
