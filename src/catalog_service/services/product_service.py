import logging
from typing import Callable, List, Optional, Tuple, Union

from pydantic import ValidationError as PydanticValidationError

from ..cache.backend import ProductCache
from ..cache.invalidation import invalidate_product
from ..cache.key_builders import product_detail_key, product_list_key
from ..core.errors import TransientInfraError, ValidationError
from ..repositories.product import ProductRepository
from ..schemas import Product, ProductCreate, ProductFilterParams
from .image_compression import compress_image

PRODUCT_CACHE_TTL = 60 * 60
PRODUCT_LIST_CACHE_TTL = 30 * 60


class ProductService:
    """
    Orchestrates the store, the cache and the image task queue.

    Only the store is authoritative. Cache reads fall back to the store, cache
    writes are best-effort, and a failed task publish never fails a create.
    Holds no state beyond the injected handles.
    """

    def __init__(
        self,
        repository: ProductRepository,
        cache: Optional[ProductCache] = None,
        publisher=None,
        logger: Optional[logging.Logger] = None,
        compressor: Callable[[str], str] = compress_image,
        product_ttl: int = PRODUCT_CACHE_TTL,
        list_ttl: int = PRODUCT_LIST_CACHE_TTL,
    ):
        self.repository = repository
        self.cache = cache
        self.publisher = publisher
        self.logger = logger or logging.getLogger(__name__)
        self.compressor = compressor
        self.product_ttl = product_ttl
        self.list_ttl = list_ttl

    def create_product(self, request: Union[ProductCreate, dict]) -> Product:
        try:
            data = ProductCreate.model_validate(request)
        except PydanticValidationError as e:
            raise ValidationError(f"validation error: {e}") from e

        product = Product.model_validate(self.repository.create(data))
        self.logger.info(f"Created product {product.id} for user {product.user_id}")

        self._enqueue_image_processing(product)
        return product

    def _enqueue_image_processing(self, product: Product) -> None:
        if self.publisher is None:
            self.logger.warning(f"No task publisher configured; product {product.id} images will not be compressed")
            return
        try:
            self.publisher.publish_image_processing_task(product.id, product.product_images)
        except TransientInfraError as e:
            self.logger.error(f"Failed to publish image processing task for product {product.id}: {e}")
        except Exception:
            self.logger.exception(f"Unexpected error publishing image processing task for product {product.id}")

    def get_product_by_id(self, product_id: int) -> Product:
        cache_key = product_detail_key(product_id)

        if self.cache is not None:
            cached = self.cache.get_product(cache_key)
            if cached is not None:
                return cached

        product = Product.model_validate(self.repository.get(product_id))

        if self.cache is not None and not self.cache.set_product(cache_key, product, self.product_ttl):
            self.logger.error(f"Failed to cache product {product_id}")

        return product

    def list_products(self, params: Union[ProductFilterParams, dict]) -> Tuple[List[Product], int]:
        try:
            params = ProductFilterParams.model_validate(params).normalized()
        except PydanticValidationError as e:
            raise ValidationError(f"validation error: {e}") from e

        cache_key = product_list_key(params)

        if self.cache is not None:
            cached = self.cache.get_list(cache_key)
            if cached is not None:
                products, total_count = cached
                return products, total_count

        products, total_count = self._load_page(params)

        if self.cache is not None and not self.cache.set_list(cache_key, products, total_count, self.list_ttl):
            self.logger.error(f"Failed to cache product list {cache_key}")

        return products, total_count

    def _load_page(self, params: ProductFilterParams) -> Tuple[List[Product], int]:
        rows, total_count = self.repository.find_by_user(params)
        return [Product.model_validate(row) for row in rows], total_count

    def process_product_images(self, product_id: int, image_urls: List[str]) -> List[str]:
        """
        Recompute every compressed image and overwrite the stored list, then
        drop the product's cache entry. Running it twice leaves the same state.
        """
        compressed_images = [self.compressor(url) for url in image_urls]

        self.repository.update_compressed_images(product_id, compressed_images)

        if self.cache is not None and not invalidate_product(self.cache, product_id):
            self.logger.error(f"Failed to invalidate product cache for {product_id}")

        return compressed_images
