import logging

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from ..core.db import get_db
from ..repositories.product import ProductRepository
from ..services.product_service import ProductService

logger = logging.getLogger("catalog_service.api")


def get_product_service(request: Request, db: Session = Depends(get_db)) -> ProductService:
    state = request.app.state
    return ProductService(
        repository=ProductRepository(db, logger=logger),
        cache=getattr(state, "cache", None),
        publisher=getattr(state, "publisher", None),
        logger=logger,
        product_ttl=getattr(state, "product_ttl", 3600),
        list_ttl=getattr(state, "list_ttl", 1800),
    )
