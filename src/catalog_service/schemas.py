from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100
# NUMERIC(12, 2) column bound
MAX_PRICE = 10 ** 10


class ProductCreate(BaseModel):
    user_id: int = Field(..., gt=0)
    product_name: str = Field(..., min_length=1, max_length=255)
    product_description: Optional[str] = None
    product_price: float = Field(..., ge=0, lt=MAX_PRICE, allow_inf_nan=False)
    product_images: List[str] = Field(..., min_length=1)

    @field_validator("product_name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("product_name must not be blank")
        return value


class Product(BaseModel):
    id: int
    user_id: int
    product_name: str
    product_description: Optional[str] = None
    product_price: float
    product_images: List[str]
    compressed_product_images: List[str] = []
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_validator("compressed_product_images", mode="before")
    @classmethod
    def none_as_empty(cls, value):
        return value or []


class ProductFilterParams(BaseModel):
    user_id: int
    min_price: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    max_price: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    product_name: Optional[str] = None
    page: int = DEFAULT_PAGE
    page_size: int = DEFAULT_PAGE_SIZE

    @model_validator(mode="after")
    def check_price_range(self):
        if self.min_price is not None and self.max_price is not None and self.min_price > self.max_price:
            raise ValueError("min_price must not exceed max_price")
        return self

    def normalized(self) -> "ProductFilterParams":
        """Return a copy with paging defaults applied and an empty name dropped"""
        page = self.page if self.page >= 1 else DEFAULT_PAGE
        page_size = self.page_size if self.page_size >= 1 else DEFAULT_PAGE_SIZE
        return self.model_copy(update={
            "page": page,
            "page_size": min(page_size, MAX_PAGE_SIZE),
            "product_name": self.product_name or None,
        })

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


class ProductPage(BaseModel):
    """Snapshot of one list query, as stored in the cache"""
    products: List[Product]
    total_count: int


class ProductListResponse(BaseModel):
    products: List[Product]
    total_count: int
    page: int
    page_size: int


class ImageProcessingTask(BaseModel):
    """Message published to the image processing queue"""
    product_id: int
    image_urls: List[str]
