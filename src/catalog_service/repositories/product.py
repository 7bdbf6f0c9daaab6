import logging
from typing import List, Optional, Tuple

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.errors import NotFoundError, TransientInfraError
from ..models import Product
from ..schemas import ProductCreate, ProductFilterParams


class ProductRepository:
    """Store access for the products table. Every write is one transaction."""

    def __init__(self, db: Session, logger: Optional[logging.Logger] = None):
        self.db_session = db
        self.logger = logger or logging.getLogger(__name__)

    def create(self, data: ProductCreate) -> Product:
        product = Product(
            user_id=data.user_id,
            product_name=data.product_name,
            product_description=data.product_description,
            product_price=data.product_price,
            product_images=list(data.product_images),
            compressed_product_images=[],
        )
        try:
            self.db_session.add(product)
            self.db_session.commit()
            self.db_session.refresh(product)
        except SQLAlchemyError as e:
            self.db_session.rollback()
            self.logger.error(f"Failed to create product: {e}")
            raise TransientInfraError(f"failed to create product: {e}") from e
        return product

    def get(self, product_id: int) -> Product:
        try:
            product = self.db_session.get(Product, product_id)
        except SQLAlchemyError as e:
            self.logger.error(f"Failed to find product {product_id}: {e}")
            raise TransientInfraError(f"failed to retrieve product: {e}") from e

        if product is None:
            raise NotFoundError(f"product {product_id} not found")
        return product

    def find_by_user(self, params: ProductFilterParams) -> Tuple[List[Product], int]:
        """Return one page of a user's products plus the total number of matches"""
        conditions = [Product.user_id == params.user_id]
        if params.min_price is not None:
            conditions.append(Product.product_price >= params.min_price)
        if params.max_price is not None:
            conditions.append(Product.product_price <= params.max_price)
        if params.product_name:
            conditions.append(Product.product_name.ilike(f"%{params.product_name}%"))

        count_query = select(func.count()).select_from(Product).where(*conditions)
        page_query = (
            select(Product)
            .where(*conditions)
            .order_by(Product.id)
            .offset(params.offset)
            .limit(params.page_size)
        )

        try:
            total_count = self.db_session.execute(count_query).scalar_one()
            products = list(self.db_session.execute(page_query).scalars().all())
        except SQLAlchemyError as e:
            self.logger.error(f"Failed to list products for user {params.user_id}: {e}")
            raise TransientInfraError(f"failed to retrieve products: {e}") from e

        return products, total_count

    def update_compressed_images(self, product_id: int, compressed_images: List[str]) -> None:
        """Overwrite the compressed image list and bump updated_at"""
        statement = (
            update(Product)
            .where(Product.id == product_id)
            .values(compressed_product_images=list(compressed_images), updated_at=func.now())
            .execution_options(synchronize_session=False)
        )
        try:
            result = self.db_session.execute(statement)
            if result.rowcount == 0:
                self.db_session.rollback()
                raise NotFoundError(f"product {product_id} not found")
            self.db_session.commit()
        except SQLAlchemyError as e:
            self.db_session.rollback()
            self.logger.error(f"Failed to update compressed images for product {product_id}: {e}")
            raise TransientInfraError(f"failed to update compressed images: {e}") from e

        # drop any stale copy held by this session's identity map
        self.db_session.expire_all()
