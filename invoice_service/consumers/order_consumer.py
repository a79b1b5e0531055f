"""
RabbitMQ Consumer for OrderCreated events

Delivery is at-least-once. A redelivered event simply renders another
artifact under a new key and overwrites the order's invoice pointer, so no
deduplication is done here.
"""
import pika
import json
import logging
import sys

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

from invoice_service.config import settings
from invoice_service.database import SessionLocal
from invoice_service.logging_config import setup_logging
from invoice_service.schemas.order import OrderCreatedEvent
from invoice_service.services.errors import NotFoundError
from invoice_service.services.invoice_service import InvoiceService
from invoice_service.storage.artifact_store import get_artifact_store

logger = logging.getLogger(__name__)


def callback(ch, method, properties, body):
    """
    Callback function to process OrderCreated events

    Args:
        ch: Channel
        method: Method
        properties: Properties
        body: Message body (JSON string)
    """
    try:
        event = OrderCreatedEvent.model_validate(json.loads(body))
    except json.JSONDecodeError as e:
        logger.error("✗ Invalid JSON: %s", e)
        ch.basic_nack(delivery_tag=method.delivery_tag, requeue=False)
        return
    except ValidationError as e:
        logger.error("✗ Invalid OrderCreated event: %s", e)
        ch.basic_nack(delivery_tag=method.delivery_tag, requeue=False)
        return

    order_id = event.data.id
    logger.info("Received event: %s (ID: %s, order %s)", event.event_type, event.event_id, order_id)

    db = SessionLocal()
    try:
        service = InvoiceService(db, get_artifact_store())
        result = service.process_order_created(order_id)
    except NotFoundError as e:
        logger.error("✗ %s", e.message)
        ch.basic_nack(delivery_tag=method.delivery_tag, requeue=False)
        return
    except SQLAlchemyError as e:
        logger.error("✗ Order repository unavailable for order %s: %s", order_id, e)
        ch.basic_nack(delivery_tag=method.delivery_tag, requeue=settings.REQUEUE_ON_INFRASTRUCTURE_ERROR)
        return
    except Exception:
        logger.exception("✗ Error processing event %s", event.event_id)
        ch.basic_nack(delivery_tag=method.delivery_tag, requeue=False)
        return
    finally:
        db.close()

    # Recorded failures are acked too: the outcome lives on the order record
    ch.basic_ack(delivery_tag=method.delivery_tag)
    if result:
        logger.info("✓ Event %s processed: %s", event.event_id, result.invoice_id)
    else:
        logger.info("✓ Event %s processed with recorded failure", event.event_id)


@retry(
    stop=stop_after_attempt(settings.MAX_RETRIES),
    wait=wait_exponential(multiplier=settings.RETRY_DELAY, min=1, max=10),
    retry=retry_if_exception_type(pika.exceptions.AMQPConnectionError),
    reraise=True
)
def connect() -> pika.BlockingConnection:
    """Open a blocking connection to RabbitMQ, retrying on connection errors"""
    logger.info("Connecting to RabbitMQ: %s", settings.RABBITMQ_URL)
    return pika.BlockingConnection(pika.URLParameters(settings.RABBITMQ_URL))


def declare_topology(channel) -> None:
    """Declare exchange and queue, and bind the queue to OrderCreated"""
    channel.exchange_declare(
        exchange=settings.RABBITMQ_EXCHANGE,
        exchange_type='topic',
        durable=True
    )
    logger.info("✓ Exchange declared: %s", settings.RABBITMQ_EXCHANGE)

    channel.queue_declare(
        queue=settings.RABBITMQ_QUEUE,
        durable=True
    )
    logger.info("✓ Queue declared: %s", settings.RABBITMQ_QUEUE)

    channel.queue_bind(
        exchange=settings.RABBITMQ_EXCHANGE,
        queue=settings.RABBITMQ_QUEUE,
        routing_key=settings.RABBITMQ_ROUTING_KEY
    )
    logger.info("✓ Queue bound to exchange with routing key: %s", settings.RABBITMQ_ROUTING_KEY)


def start_consumer():
    """
    Start RabbitMQ consumer

    Connects to RabbitMQ and starts consuming OrderCreated events
    """
    setup_logging()
    connection = None
    try:
        connection = connect()
        channel = connection.channel()
        declare_topology(channel)

        # Set prefetch count (QoS)
        channel.basic_qos(prefetch_count=settings.RABBITMQ_PREFETCH_COUNT)

        channel.basic_consume(
            queue=settings.RABBITMQ_QUEUE,
            on_message_callback=callback,
            auto_ack=False  # Manual acknowledgement
        )

        logger.info("✓ %s consumer started", settings.SERVICE_NAME)
        logger.info("✓ Waiting for OrderCreated events on queue: %s", settings.RABBITMQ_QUEUE)
        channel.start_consuming()

    except KeyboardInterrupt:
        logger.info("Consumer stopped by user")
        if connection is not None and connection.is_open:
            connection.close()
        sys.exit(0)
    except pika.exceptions.AMQPError as e:
        logger.error("✗ Error starting consumer: %s", e)
        sys.exit(1)


if __name__ == "__main__":
    start_consumer()
