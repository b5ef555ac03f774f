"""
Tests para la normalización de registros del catálogo.
"""

import pytest

from app.core.exceptions import CatalogValidationError
from app.utils.product_snapshot import (
    build_product_snapshot,
    expand_catalog_records,
    extract_product_id,
    placeholder_image_url,
)


class TestExtractProductId:
    """Tests para la detección del product id."""

    @pytest.mark.parametrize("record,expected", [
        ({"id": "gid://shopify/Product/1"}, "gid://shopify/Product/1"),
        ({"product_id": "p-2"}, "p-2"),
        ({"productId": "p-3"}, "p-3"),
        ({"id": "  ", "productId": "p-4"}, "p-4"),
        ({"id": 123}, "123"),
    ])
    def test_probes_fields_in_priority_order(self, record, expected):
        assert extract_product_id(record) == expected

    @pytest.mark.parametrize("record", [{}, {"id": ""}, {"title": "Sin id"}, "no-es-un-dict", None])
    def test_returns_none_when_missing(self, record):
        assert extract_product_id(record) is None


class TestBuildProductSnapshot:
    """Tests para el snapshot canónico."""

    def test_record_without_id_raises(self):
        with pytest.raises(CatalogValidationError):
            build_product_snapshot({"title": "Zapatillas"})

    def test_title_falls_back_to_product_id(self):
        snapshot = build_product_snapshot({"id": "p-1"})
        assert snapshot["title"] == "Product p-1"

    def test_placeholder_image_when_no_image_resolves(self):
        snapshot = build_product_snapshot({"id": "p-1", "title": "Gorra", "images": []})

        assert len(snapshot["images"]) == 1
        assert snapshot["images"][0]["url"] == placeholder_image_url("p-1")
        assert "p-1" in snapshot["images"][0]["url"]

    def test_placeholder_is_deterministic_per_product(self):
        first = build_product_snapshot({"id": "p-9"})
        second = build_product_snapshot({"id": "p-9", "title": "Otro título"})
        assert first["images"][0]["url"] == second["images"][0]["url"]

    def test_images_list_accepts_url_src_and_strings(self):
        snapshot = build_product_snapshot({
            "id": "p-1",
            "title": "Bolso",
            "images": [
                {"url": "https://cdn/a.jpg", "altText": "Frente"},
                {"src": "https://cdn/b.jpg"},
                "https://cdn/c.jpg",
                {"alt": "sin url"},
            ],
        })

        urls = [image["url"] for image in snapshot["images"]]
        assert urls == ["https://cdn/a.jpg", "https://cdn/b.jpg", "https://cdn/c.jpg"]
        assert snapshot["images"][0]["alt_text"] == "Frente"
        assert snapshot["images"][1]["alt_text"] == "Bolso"

    def test_featured_image_used_when_images_empty(self):
        snapshot = build_product_snapshot({
            "id": "p-1",
            "images": [],
            "featuredImage": {"url": "https://cdn/featured.jpg"},
            "image": {"url": "https://cdn/image.jpg"},
        })
        assert snapshot["images"][0]["url"] == "https://cdn/featured.jpg"

    def test_price_from_price_range(self):
        snapshot = build_product_snapshot({
            "id": "p-1",
            "priceRange": {"minVariantPrice": {"amount": "19.99", "currencyCode": "EUR"}},
        })
        assert snapshot["price"] == {"amount": "19.99", "currency_code": "EUR"}

    def test_price_defaults(self):
        snapshot = build_product_snapshot({"id": "p-1", "price": {}})
        assert snapshot["price"] == {"amount": "0.00", "currency_code": "USD"}

    def test_scalar_price(self):
        snapshot = build_product_snapshot({"id": "p-1", "minPrice": 25})
        assert snapshot["price"]["amount"] == "25"
        assert snapshot["price"]["currency_code"] == "USD"

    def test_no_price_is_none(self):
        assert build_product_snapshot({"id": "p-1"})["price"] is None

    def test_shop_reference(self):
        snapshot = build_product_snapshot({"id": "p-1", "shop": {"id": "s-1", "name": "Tienda"}})
        assert snapshot["shop"] == {"id": "s-1", "name": "Tienda"}


class TestExpandCatalogRecords:
    """Tests para el aplanado de registros tipo tienda."""

    def test_shop_records_expand_into_products(self):
        records = [
            {"id": "shop-1", "products": [{"id": "p-1"}, {"id": "p-2"}]},
            {"id": "p-3"},
        ]
        assert [r["id"] for r in expand_catalog_records(records)] == ["p-1", "p-2", "p-3"]

    def test_none_is_empty(self):
        assert list(expand_catalog_records(None)) == []
