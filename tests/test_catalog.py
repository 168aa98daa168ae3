"""Tests for catalog loading, field extraction and product projection."""

import sys
from pathlib import Path

import pytest

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from zidrec.recommender.catalog import Catalog, Product, project
from zidrec.recommender.fields import (
    extract_category_ids,
    extract_order_product_ids,
    to_int,
)


@pytest.mark.parametrize(
    "value, expected",
    [
        (5, 5),
        ("12", 12),
        (" 7 ", 7),
        (3.0, 3),
        (3.5, None),
        ("abc", None),
        (None, None),
        (True, None),
        ([1], None),
    ],
)
def test_to_int(value, expected):
    """Test coercion of upstream identifiers."""
    assert to_int(value) == expected


def test_category_ids_from_all_shapes():
    """Test that category_id and categories (objects or ints) are merged."""
    product = {
        "id": 1,
        "category_id": "4",
        "categories": [{"id": 4}, {"id": 9}, 11, "12", {"name": "no id"}],
    }

    assert extract_category_ids(product) == (4, 9, 11)


def test_category_ids_missing():
    """Test that a product without category data has no categories."""
    assert extract_category_ids({"id": 1}) == ()
    assert extract_category_ids({"id": 1, "categories": None}) == ()


def test_order_product_ids_dedupe_keeps_first_seen_order():
    """Test per-order de-duplication of product ids."""
    order = {"items": [{"product_id": 3}, {"productId": 1}, {"product_id": 3}]}

    assert extract_order_product_ids(order) == [3, 1]


def test_projection_prefers_primary_fields():
    """Test title, image and price precedence."""
    product = Product.from_record(
        {
            "id": 10,
            "title": "Primary",
            "name": "Secondary",
            "main_image": "main.jpg",
            "image": "generic.jpg",
            "images": ["first.jpg"],
            "price": 99.5,
            "price_after_discount": 80,
        }
    )

    assert project(product) == {
        "id": 10,
        "title": "Primary",
        "image": "main.jpg",
        "price": 99.5,
    }


def test_projection_fallbacks():
    """Test secondary fields: name, image list, discounted price."""
    product = Product.from_record(
        {
            "id": 11,
            "name": "Named",
            "main_image": "",
            "images": ["first.jpg", "second.jpg"],
            "price_after_discount": 15,
        }
    )

    assert project(product) == {
        "id": 11,
        "title": "Named",
        "image": "first.jpg",
        "price": 15,
    }


def test_projection_image_objects_and_generic_image():
    """Test image lists of objects and the generic image field."""
    with_objects = Product.from_record(
        {"id": 1, "images": [{"url": "https://cdn/1.jpg"}]}
    )
    with_generic = Product.from_record({"id": 2, "image": "generic.jpg"})

    assert project(with_objects)["image"] == "https://cdn/1.jpg"
    assert project(with_generic)["image"] == "generic.jpg"


def test_projection_defaults():
    """Test defaults when nothing is present."""
    assert project(Product.from_record({"id": 3})) == {
        "id": 3,
        "title": "",
        "image": "",
        "price": 0,
    }


def test_projection_missing_id_is_none():
    """Test that a record without id projects an explicit None."""
    product = Product(id=4, raw={"title": "orphan"})

    assert project(product)["id"] is None


def test_catalog_skips_records_without_id():
    """Test that records without a usable id are not admitted."""
    catalog = Catalog.from_records(
        [{"id": 1}, {"title": "no id"}, {"id": "abc"}, "junk", {"id": "2"}]
    )

    assert list(catalog) == [1, 2]
    assert 2 in catalog
    assert "2" not in catalog


def test_catalog_records_are_read_only_and_round_trip():
    """Test that raw records are preserved but cannot be mutated."""
    record = {"id": 1, "name": "A", "categories": [{"id": 3}]}
    catalog = Catalog.from_records([record])

    with pytest.raises(TypeError):
        catalog[1].raw["name"] = "B"

    assert catalog.records() == [record]
    assert catalog[1].categories == (3,)


def test_product_shares_category():
    """Test category overlap against any of the given ids."""
    product = Product.from_record({"id": 1, "categories": [{"id": 3}, 5]})

    assert product.shares_category([5, 9])
    assert not product.shares_category([4])
    assert not product.shares_category([])
