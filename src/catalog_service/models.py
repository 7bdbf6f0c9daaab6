from sqlalchemy import Column, BigInteger, Integer, String, Text, Numeric, DateTime, JSON, func

from .core.db import Base


class Product(Base):
    __tablename__ = "products"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    user_id = Column(BigInteger, nullable=False, index=True)
    product_name = Column(String(255), nullable=False)
    product_description = Column(Text, nullable=True)
    product_price = Column(Numeric(12, 2, asdecimal=False), nullable=False)
    product_images = Column(JSON, nullable=False, default=list)
    compressed_product_images = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    def __repr__(self):
        return f"<Product id={self.id} user_id={self.user_id} name={self.product_name!r}>"
