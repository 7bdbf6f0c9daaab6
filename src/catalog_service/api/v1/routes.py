import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import ValidationError as PydanticValidationError

from ...core.errors import NotFoundError, TransientInfraError, ValidationError
from ...schemas import Product, ProductCreate, ProductFilterParams, ProductListResponse
from ...services.product_service import ProductService
from ..deps import get_product_service

logger = logging.getLogger("catalog_service.api")

router = APIRouter()


# Endpoints for Product
@router.post("/products", response_model=Product, status_code=status.HTTP_201_CREATED)
def create_product(product: ProductCreate, service: ProductService = Depends(get_product_service)):
    try:
        return service.create_product(product)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except TransientInfraError as e:
        logger.error(f"Product creation failed: {e}")
        raise HTTPException(status_code=500, detail="Failed to create product")


@router.get("/products/{product_id}", response_model=Product)
def read_product(product_id: int, service: ProductService = Depends(get_product_service)):
    try:
        return service.get_product_by_id(product_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Product not found")
    except TransientInfraError as e:
        logger.error(f"Product retrieval failed: {e}")
        raise HTTPException(status_code=404, detail="Product could not be retrieved")


@router.get("/products", response_model=ProductListResponse)
def read_products(
    user_id: int,
    min_price: Optional[float] = None,
    max_price: Optional[float] = None,
    product_name: Optional[str] = None,
    page: int = 1,
    page_size: int = 10,
    service: ProductService = Depends(get_product_service),
):
    try:
        params = ProductFilterParams(
            user_id=user_id,
            min_price=min_price,
            max_price=max_price,
            product_name=product_name,
            page=page,
            page_size=page_size,
        ).normalized()
    except PydanticValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    try:
        products, total_count = service.list_products(params)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except TransientInfraError as e:
        logger.error(f"Products listing failed: {e}")
        raise HTTPException(status_code=500, detail="Failed to list products")

    return ProductListResponse(
        products=products,
        total_count=total_count,
        page=params.page,
        page_size=params.page_size,
    )
