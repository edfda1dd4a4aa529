# orders/publisher.py
import json
import logging

import pika
from pika.exceptions import AMQPError
from django.conf import settings

logger = logging.getLogger(__name__)


def _connection_parameters() -> pika.ConnectionParameters:
    """Parameters with short timeouts and retries.
    A slow or unreachable broker must not hold up the request."""
    return pika.ConnectionParameters(
        host=settings.RABBIT_HOST,
        port=settings.RABBIT_PORT,
        virtual_host=settings.RABBIT_VHOST,
        credentials=pika.PlainCredentials(settings.RABBIT_USER, settings.RABBIT_PASS),
        heartbeat=30,
        blocked_connection_timeout=5,
        socket_timeout=5,
        connection_attempts=3,
        retry_delay=2.0,
    )


def _publish(routing_key: str, payload: dict) -> None:
    """Publish without failing the request if the broker does."""
    if not settings.RABBIT_HOST:
        logger.debug("RABBIT_HOST not set; skipping %s", routing_key)
        return
    conn = None
    try:
        conn = pika.BlockingConnection(_connection_parameters())
        ch = conn.channel()
        ch.exchange_declare(exchange=settings.RABBIT_EXCHANGE, exchange_type="topic", durable=True)
        ch.basic_publish(
            exchange=settings.RABBIT_EXCHANGE,
            routing_key=routing_key,
            body=json.dumps(payload).encode("utf-8"),
            properties=pika.BasicProperties(
                content_type="application/json",
                delivery_mode=2,  # persistent if the queue is durable
            ),
        )
    except (AMQPError, OSError) as e:
        logger.warning("Failed to publish %s: %s", routing_key, e)
    finally:
        if conn is not None and conn.is_open:
            conn.close()


def publish_order_created(order_id: str, status: str, version: int) -> None:
    _publish("order.created", {"order_id": order_id, "status": status, "version": int(version)})


def publish_order_updated(order_id: str, status: str, version: int, changed: list[str]) -> None:
    _publish("order.updated", {
        "order_id": order_id, "status": status, "version": int(version), "changed": list(changed),
    })


def publish_order_status_updated(order_id: str, status: str, version: int) -> None:
    _publish("order.status.updated", {"order_id": order_id, "new_status": status, "version": int(version)})


def publish_order_canceled(order_id: str, version: int) -> None:
    _publish("order.canceled", {"order_id": order_id, "status": "canceled", "version": int(version)})


def publish_order_deleted(order_id: str) -> None:
    _publish("order.deleted", {"order_id": order_id})
