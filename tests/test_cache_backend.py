from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
import redis

from catalog_service.cache.backend import ProductCache
from catalog_service.cache.invalidation import invalidate_product
from catalog_service.cache.key_builders import product_detail_key
from catalog_service.schemas import Product


@pytest.fixture
def product():
    now = datetime(2024, 1, 1, tzinfo=timezone.utc)
    return Product(
        id=1,
        user_id=1,
        product_name="Widget",
        product_description=None,
        product_price=9.99,
        product_images=["a.jpg", "b.jpg"],
        compressed_product_images=[],
        created_at=now,
        updated_at=now,
    )


class TestProductEntries:

    def test_set_then_get_returns_same_product(self, cache, product):
        assert cache.set_product("k", product, 3600) is True
        assert cache.get_product("k") == product

    def test_set_uses_ttl(self, cache, redis_client, product):
        cache.set_product("k", product, 3600)
        assert redis_client.ttls["k"] == 3600

    def test_missing_key_is_a_miss(self, cache):
        assert cache.get_product("absent") is None

    def test_unreadable_payload_is_a_miss(self, cache, redis_client):
        redis_client.store["k"] = b"{not json"
        assert cache.get_product("k") is None

    def test_wrong_shape_payload_is_a_miss(self, cache, redis_client):
        redis_client.store["k"] = b'{"id": "x"}'
        assert cache.get_product("k") is None

    def test_transport_error_is_a_miss(self, product):
        client = MagicMock()
        client.get.side_effect = redis.ConnectionError("Connection refused")
        assert ProductCache(client).get_product("k") is None

    def test_timeout_is_a_miss(self):
        client = MagicMock()
        client.get.side_effect = redis.TimeoutError("Timeout reading from socket")
        assert ProductCache(client).get_product("k") is None

    def test_set_failure_is_not_raised(self, product):
        client = MagicMock()
        client.set.side_effect = redis.ConnectionError("Connection refused")
        assert ProductCache(client).set_product("k", product, 60) is False


class TestListEntries:

    def test_set_then_get_returns_page_and_count(self, cache, redis_client, product):
        cache.set_list("list", [product], 7, 1800)

        products, total = cache.get_list("list")

        assert products == [product]
        assert total == 7
        assert redis_client.ttls["list"] == 1800

    def test_empty_page_is_a_hit(self, cache):
        """An empty result is still a cached answer, not a miss"""
        cache.set_list("list", [], 0, 1800)
        assert cache.get_list("list") == ([], 0)

    def test_unreadable_list_is_a_miss(self, cache, redis_client):
        redis_client.store["list"] = b'{"products": 3}'
        assert cache.get_list("list") is None


class TestDelete:

    def test_delete_missing_key_is_not_an_error(self, cache):
        assert cache.delete("absent") is True

    def test_delete_failure_is_not_raised(self):
        client = MagicMock()
        client.delete.side_effect = redis.ConnectionError("Connection refused")
        assert ProductCache(client).delete("k") is False

    def test_invalidate_product_removes_detail_only(self, cache, redis_client, product):
        cache.set_product(product_detail_key(1), product, 3600)
        cache.set_list("product-cache:product:list:user_id=1", [product], 1, 1800)

        invalidate_product(cache, 1)

        assert cache.get_product(product_detail_key(1)) is None
        assert cache.get_list("product-cache:product:list:user_id=1") is not None


class TestPing:

    def test_ping_failure_reports_false(self):
        client = MagicMock()
        client.ping.side_effect = redis.ConnectionError("down")
        assert ProductCache(client).ping() is False
