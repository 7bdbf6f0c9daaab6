import signal
import sys
from typing import List

from .cache.backend import init_cache
from .core.config import settings
from .core.db import SessionLocal
from .core.logging import setup_logging
from .messaging import ImageTaskConsumer, build_connection_parameters
from .repositories.product import ProductRepository
from .services.product_service import ProductService


def make_image_handler(session_factory, cache, logger):
    """Build the per-task handler; each task runs on its own DB session."""

    def handle(product_id: int, image_urls: List[str]):
        db = session_factory()
        try:
            service = ProductService(
                repository=ProductRepository(db, logger=logger),
                cache=cache,
                logger=logger,
            )
            logger.info(f"Processing images for product {product_id}")
            return service.process_product_images(product_id, image_urls)
        finally:
            db.close()

    return handle


def install_signal_handlers(consumer, logger):
    """Stop the consumer on SIGINT and SIGTERM once the current task is done."""

    def handle_signal(signum, frame):
        logger.info(f"🛑 Received {signal.Signals(signum).name}, shutting down...")
        consumer.stop()

    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)


def main():
    logger = setup_logging(level=settings.log_level, fmt=settings.log_format, log_file=settings.log_file)
    logger.info("🎧 Starting image processing worker...")

    try:
        cache = init_cache(settings.redis_url, settings.redis_timeout, logger=logger)
        consumer = ImageTaskConsumer(
            build_connection_parameters(
                settings.rabbitmq_host,
                settings.rabbitmq_port,
                settings.rabbitmq_user,
                settings.rabbitmq_pass,
                timeout=settings.rabbitmq_timeout,
            ),
            settings.image_processing_queue,
            handler=make_image_handler(SessionLocal, cache, logger),
            logger=logger,
        )
        install_signal_handlers(consumer, logger)
        consumer.start_consuming()
    except Exception as e:
        logger.error(f"❌ Image processing worker failed: {e}")
        sys.exit(1)

    logger.info("Image processing worker stopped")


if __name__ == "__main__":
    main()
