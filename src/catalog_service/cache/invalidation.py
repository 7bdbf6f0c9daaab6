from .backend import ProductCache
from .key_builders import product_detail_key

# ------------------------------
# PRODUCT INVALIDATION
# ------------------------------

def invalidate_product(cache: ProductCache, product_id: int) -> bool:
    # List pages are left to expire through their TTL.
    return cache.delete(product_detail_key(product_id))
