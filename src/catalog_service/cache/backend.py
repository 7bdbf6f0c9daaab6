import logging
from typing import List, Optional, Tuple

import redis
from pydantic import ValidationError as PydanticValidationError

from ..core.errors import SerializationError
from ..schemas import Product, ProductPage

CACHE_NAMESPACE = "product-cache"


class ProductCache:
    """
    Redis-backed snapshot store for products and product pages.

    Reads never raise: transport errors, timeouts and undecodable payloads all
    come back as a miss. Writes and deletes are best-effort and only logged.
    """

    def __init__(self, client: redis.Redis, logger: Optional[logging.Logger] = None):
        self.client = client
        self.logger = logger or logging.getLogger(__name__)

    # ------------------------------
    # SINGLE PRODUCT
    # ------------------------------

    def get_product(self, key: str) -> Optional[Product]:
        raw = self._get(key)
        if raw is None:
            return None
        try:
            return self._decode(Product, raw)
        except SerializationError as e:
            self.logger.warning(f"[CACHE] unreadable product entry {key}: {e}")
            return None

    def set_product(self, key: str, product: Product, ttl: int) -> bool:
        return self._set(key, product.model_dump_json(), ttl)

    # ------------------------------
    # PRODUCT PAGES
    # ------------------------------

    def get_list(self, key: str) -> Optional[Tuple[List[Product], int]]:
        raw = self._get(key)
        if raw is None:
            return None
        try:
            page = self._decode(ProductPage, raw)
        except SerializationError as e:
            self.logger.warning(f"[CACHE] unreadable list entry {key}: {e}")
            return None
        return page.products, page.total_count

    def set_list(self, key: str, products: List[Product], total_count: int, ttl: int) -> bool:
        page = ProductPage(products=products, total_count=total_count)
        return self._set(key, page.model_dump_json(), ttl)

    def delete(self, key: str) -> bool:
        try:
            self.client.delete(key)
        except redis.RedisError as e:
            self.logger.error(f"[CACHE] failed to delete {key}: {e}")
            return False
        self.logger.debug(f"[CACHE] deleted {key}")
        return True

    def ping(self) -> bool:
        try:
            return bool(self.client.ping())
        except redis.RedisError:
            return False

    def _get(self, key: str) -> Optional[bytes]:
        try:
            raw = self.client.get(key)
        except redis.RedisError as e:
            self.logger.warning(f"[CACHE] get {key} failed, treating as miss: {e}")
            return None
        self.logger.debug(f"[CACHE] {'HIT' if raw is not None else 'MISS'} {key}")
        return raw

    def _set(self, key: str, payload: str, ttl: int) -> bool:
        try:
            self.client.set(key, payload, ex=ttl)
        except redis.RedisError as e:
            self.logger.error(f"[CACHE] failed to store {key}: {e}")
            return False
        return True

    @staticmethod
    def _decode(model, raw):
        try:
            return model.model_validate_json(raw)
        except PydanticValidationError as e:
            raise SerializationError(str(e)) from e


def init_cache(redis_url: str, timeout: float, logger: Optional[logging.Logger] = None) -> ProductCache:
    """
    Build the cache with bounded socket timeouts so a slow Redis degrades to a
    miss instead of stalling the request.
    """
    client = redis.Redis.from_url(
        redis_url,
        socket_timeout=timeout,
        socket_connect_timeout=timeout,
    )
    return ProductCache(client, logger=logger)
