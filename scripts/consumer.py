# scripts/consumer.py
import os, pika

RABBIT_HOST   = os.getenv("RABBIT_HOST", "127.0.0.1")
RABBIT_PORT   = int(os.getenv("RABBIT_PORT", "5672"))
RABBIT_USER   = os.getenv("RABBIT_USER", "guest")
RABBIT_PASS   = os.getenv("RABBIT_PASS", "guest")
RABBIT_VHOST  = os.getenv("RABBIT_VHOST", "/")
EXCHANGE      = os.getenv("RABBIT_EXCHANGE", "order_events")

BIND_KEYS = os.getenv("BIND_KEYS", "order.#").split(",")


def format_event(routing_key: str, body: bytes) -> str:
    return f"[x] {routing_key} {body.decode('utf-8', errors='replace')}"


def main():
    creds = pika.PlainCredentials(RABBIT_USER, RABBIT_PASS)
    params = pika.ConnectionParameters(
        host=RABBIT_HOST, port=RABBIT_PORT, virtual_host=RABBIT_VHOST,
        credentials=creds, heartbeat=30, blocked_connection_timeout=10
    )
    conn = pika.BlockingConnection(params)
    ch = conn.channel()
    ch.exchange_declare(exchange=EXCHANGE, exchange_type="topic", durable=True)

    # exclusive auto-delete queue, for inspection only
    q = ch.queue_declare(queue="", exclusive=True, auto_delete=True)
    qname = q.method.queue

    for key in BIND_KEYS:
        ch.queue_bind(exchange=EXCHANGE, queue=qname, routing_key=key.strip())

    print(f"Listening for {BIND_KEYS} on {EXCHANGE} (queue {qname}). Ctrl+C to quit.")
    def on_msg(ch_, method, props, body):
        print(format_event(method.routing_key, body))
        ch_.basic_ack(delivery_tag=method.delivery_tag)

    ch.basic_consume(queue=qname, on_message_callback=on_msg, auto_ack=False)
    try:
        ch.start_consuming()
    except KeyboardInterrupt:
        print("\nClosing...")
        ch.stop_consuming()
        conn.close()

if __name__ == "__main__":
    main()
