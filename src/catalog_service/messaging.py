import logging
import threading
import time
from typing import Callable, List, Optional

import pika
from pika.exceptions import AMQPError
from pydantic import ValidationError as PydanticValidationError

from .core.errors import NotFoundError, TransientInfraError
from .schemas import ImageProcessingTask


def build_connection_parameters(host, port, user, password, timeout=5.0):
    credentials = pika.PlainCredentials(user, password)
    return pika.ConnectionParameters(
        host=host,
        port=port,
        credentials=credentials,
        heartbeat=600,
        blocked_connection_timeout=300,
        socket_timeout=timeout,
        stack_timeout=timeout,
    )


class ImageTaskPublisher:
    """
    Publishes image processing tasks to a durable queue.
    Keeps one connection open and reconnects when it has been closed.
    Shared between request threads, so all connection use happens under
    one lock.
    """

    def __init__(self, parameters: pika.ConnectionParameters, queue_name: str,
                 logger: Optional[logging.Logger] = None):
        self.parameters = parameters
        self.queue_name = queue_name
        self.logger = logger or logging.getLogger(__name__)
        self.connection: Optional[pika.BlockingConnection] = None
        self.channel = None
        self._lock = threading.Lock()

    def _connect(self):
        self.connection = pika.BlockingConnection(self.parameters)
        self.channel = self.connection.channel()
        self.channel.queue_declare(queue=self.queue_name, durable=True)
        self.logger.info("✅ Connected to RabbitMQ")

    def _ensure_channel(self):
        # caller holds self._lock
        if not self.connection or self.connection.is_closed:
            self._connect()
        elif not self.channel or self.channel.is_closed:
            self.channel = self.connection.channel()
            self.channel.queue_declare(queue=self.queue_name, durable=True)
        return self.channel

    def publish_image_processing_task(self, product_id: int, image_urls: List[str]) -> None:
        task = ImageProcessingTask(product_id=product_id, image_urls=image_urls)
        with self._lock:
            try:
                channel = self._ensure_channel()
                channel.basic_publish(
                    exchange='',
                    routing_key=self.queue_name,
                    body=task.model_dump_json(),
                    properties=pika.BasicProperties(
                        delivery_mode=2,  # persistent
                        content_type='application/json'
                    )
                )
            except (AMQPError, OSError) as e:
                # next publish starts from a fresh connection
                self.connection = None
                self.channel = None
                raise TransientInfraError(f"failed to publish image processing task: {e}") from e

        self.logger.info(f"📤 Published image processing task for product {product_id} ({len(image_urls)} images)")

    def close(self):
        with self._lock:
            try:
                if self.connection and not self.connection.is_closed:
                    self.connection.close()
                    self.logger.info("🔌 RabbitMQ connection closed")
            except AMQPError as e:
                self.logger.error(f"Error closing RabbitMQ connection: {e}")
            finally:
                self.connection = None
                self.channel = None


TaskHandler = Callable[[int, List[str]], object]


class ImageTaskConsumer:
    """
    Drains the image processing queue one message at a time.

    Acknowledgement policy:
      - handled             -> ack
      - malformed message   -> reject, no requeue
      - product not found   -> ack (redelivery cannot help)
      - transient failure   -> reject and requeue
      - anything else       -> reject, no requeue
    """

    def __init__(self, parameters: pika.ConnectionParameters, queue_name: str,
                 handler: TaskHandler, logger: Optional[logging.Logger] = None,
                 retry_delay: float = 5.0):
        self.parameters = parameters
        self.queue_name = queue_name
        self.handler = handler
        self.logger = logger or logging.getLogger(__name__)
        self.retry_delay = retry_delay
        self._stopping = False
        self._connection = None
        self._channel = None

    def get_connection(self):
        return pika.BlockingConnection(self.parameters)

    def handle_task(self, task: ImageProcessingTask) -> bool:
        """Run the handler; returns True to ack, False to requeue. Raises on poison."""
        try:
            self.handler(task.product_id, task.image_urls)
            self.logger.info(f"✅ Processed images for product {task.product_id}")
            return True
        except NotFoundError as e:
            self.logger.warning(f"⚠️ Dropping task for product {task.product_id}: {e}")
            return True
        except TransientInfraError as e:
            self.logger.error(f"❌ Transient failure for product {task.product_id}, requeueing: {e}")
            return False

    def callback(self, ch, method, properties, body):
        """Handle incoming messages from RabbitMQ"""
        try:
            task = ImageProcessingTask.model_validate_json(body)
        except PydanticValidationError as e:
            self.logger.error(f"❌ Invalid image processing message: {e}")
            ch.basic_nack(delivery_tag=method.delivery_tag, requeue=False)
            return

        self.logger.info(f"📨 Received image processing task for product {task.product_id}")

        try:
            acked = self.handle_task(task)
        except Exception:
            self.logger.exception(f"❌ Error processing images for product {task.product_id}")
            ch.basic_nack(delivery_tag=method.delivery_tag, requeue=False)
            return

        if acked:
            ch.basic_ack(delivery_tag=method.delivery_tag)
        else:
            ch.basic_nack(delivery_tag=method.delivery_tag, requeue=True)

    def start_consuming(self):
        while not self._stopping:
            connection = None
            try:
                connection = self.get_connection()
                channel = connection.channel()
                channel.queue_declare(queue=self.queue_name, durable=True)
                channel.basic_qos(prefetch_count=1)
                channel.basic_consume(
                    queue=self.queue_name,
                    on_message_callback=self.callback
                )
                self._connection, self._channel = connection, channel

                if self._stopping:
                    break
                self.logger.info(f"🎧 Waiting for image processing tasks on '{self.queue_name}'. Press CTRL+C to exit")
                channel.start_consuming()

            except KeyboardInterrupt:
                self.logger.info("🛑 Stopping consumer...")
                self._stopping = True
            except (AMQPError, OSError) as e:
                self.logger.error(f"❌ Connection error: {e}")
                if not self._stopping:
                    self.logger.info(f"⏳ Retrying in {self.retry_delay} seconds...")
                    time.sleep(self.retry_delay)
            finally:
                self._connection, self._channel = None, None
                self._close(connection)

        self.logger.info("🛑 Image task consumer stopped")

    def stop(self):
        """
        Ask the consume loop to finish. Safe to call from a signal handler:
        the current message completes, then the loop exits and closes its
        connection.
        """
        self._stopping = True
        connection, channel = self._connection, self._channel
        if connection is not None and channel is not None and connection.is_open:
            connection.add_callback_threadsafe(channel.stop_consuming)

    def _close(self, connection):
        if connection is None:
            return
        try:
            if connection.is_open:
                connection.close()
        except AMQPError as e:
            self.logger.error(f"Error closing RabbitMQ connection: {e}")
