from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder

from .api.v1.routes import router
from .cache.backend import init_cache
from .core.config import settings
from .core.db import Base, engine
from .core.logging import setup_logging
from .messaging import ImageTaskPublisher, build_connection_parameters
from . import models  # noqa: F401  registers tables on Base

app = FastAPI(
    title="Product Catalog Service",
    version="1.0.0",
    description="Creates, fetches and lists products; image compression runs in a background worker.",
)

app.include_router(router, prefix="/api/v1")


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})


@app.on_event("startup")
def startup_event():
    """Wire logging, tables, cache and task publisher onto app.state."""
    logger = setup_logging(level=settings.log_level, fmt=settings.log_format, log_file=settings.log_file)

    Base.metadata.create_all(bind=engine)

    app.state.cache = init_cache(settings.redis_url, settings.redis_timeout, logger=logger)
    app.state.publisher = ImageTaskPublisher(
        build_connection_parameters(
            settings.rabbitmq_host,
            settings.rabbitmq_port,
            settings.rabbitmq_user,
            settings.rabbitmq_pass,
            timeout=settings.rabbitmq_timeout,
        ),
        settings.image_processing_queue,
        logger=logger,
    )
    app.state.product_ttl = settings.product_cache_ttl
    app.state.list_ttl = settings.product_list_cache_ttl
    logger.info("Product Catalog Service started")


@app.on_event("shutdown")
def shutdown_event():
    publisher = getattr(app.state, "publisher", None)
    if publisher is not None:
        publisher.close()


@app.get("/")
def read_root():
    return {"message": "Product Catalog Service is running 🚀"}


@app.get("/health")
def health():
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(timespec="seconds"),
    }
