from .backend import CACHE_NAMESPACE, ProductCache, init_cache
from .invalidation import invalidate_product
from .key_builders import product_detail_key, product_list_key

__all__ = [
    "CACHE_NAMESPACE",
    "ProductCache",
    "init_cache",
    "invalidate_product",
    "product_detail_key",
    "product_list_key",
]
