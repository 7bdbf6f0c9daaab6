from typing import Optional
from urllib.parse import quote

from .backend import CACHE_NAMESPACE
from ..schemas import ProductFilterParams


# ---------------------------------------------------
# PRODUCT KEY BUILDERS
# ---------------------------------------------------

def product_detail_key(product_id: int, namespace: str = CACHE_NAMESPACE) -> str:
    return f"{namespace}:product:{product_id}"


def _price(value: Optional[float]) -> str:
    return "any" if value is None else repr(float(value))


def product_list_key(params: ProductFilterParams, namespace: str = CACHE_NAMESPACE) -> str:
    """Key for one list query; expects params already normalized"""
    name = quote(params.product_name or "", safe="")
    return (
        f"{namespace}:product:list:"
        f"user_id={params.user_id}:"
        f"min_price={_price(params.min_price)}:"
        f"max_price={_price(params.max_price)}:"
        f"name={name}:"
        f"page={params.page}:"
        f"page_size={params.page_size}"
    )
