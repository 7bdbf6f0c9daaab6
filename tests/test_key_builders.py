import pytest

from catalog_service.cache.key_builders import product_detail_key, product_list_key
from catalog_service.schemas import ProductFilterParams


def make_params(**overrides):
    values = {
        "user_id": 1,
        "min_price": 1.0,
        "max_price": 50.0,
        "product_name": "widget",
        "page": 1,
        "page_size": 10,
    }
    values.update(overrides)
    return ProductFilterParams(**values).normalized()


class TestProductDetailKey:

    def test_key_depends_only_on_id(self):
        assert product_detail_key(42) == product_detail_key(42)
        assert product_detail_key(42) != product_detail_key(43)

    def test_key_is_namespaced(self):
        assert product_detail_key(7) == "product-cache:product:7"


class TestProductListKey:

    def test_identical_filters_share_a_key(self):
        assert product_list_key(make_params()) == product_list_key(make_params())

    @pytest.mark.parametrize("field, value", [
        ("user_id", 2),
        ("min_price", 2.0),
        ("max_price", 60.0),
        ("product_name", "gadget"),
        ("page", 2),
        ("page_size", 20),
    ])
    def test_any_differing_field_changes_the_key(self, field, value):
        assert product_list_key(make_params(**{field: value})) != product_list_key(make_params())

    def test_unset_price_differs_from_zero(self):
        """A missing bound must not collide with an explicit 0"""
        assert product_list_key(make_params(min_price=None)) != product_list_key(make_params(min_price=0.0))

    def test_separator_in_name_does_not_collide(self):
        first = make_params(product_name="a:page=1")
        second = make_params(product_name="a")
        assert product_list_key(first) != product_list_key(second)
        assert "a%3Apage%3D1" in product_list_key(first)

    def test_normalized_paging_shares_a_key(self):
        """page=0/page_size=0 is the same query as the defaults"""
        assert product_list_key(make_params(page=0, page_size=0)) == product_list_key(make_params(page=1, page_size=10))

    def test_empty_name_same_as_no_name(self):
        assert product_list_key(make_params(product_name="")) == product_list_key(make_params(product_name=None))
