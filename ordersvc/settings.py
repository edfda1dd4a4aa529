"""
Django settings for the order lifecycle service.

Everything is read from environment variables; nothing is hardcoded for a
particular deployment. There is no database: orders live in process memory.
"""
import os

SECRET_KEY = os.getenv("DJANGO_SECRET_KEY", "dev-only-not-secret")
DEBUG = os.getenv("DJANGO_DEBUG", "false").lower() in ("1", "true", "yes")
ALLOWED_HOSTS = [
    h.strip() for h in os.getenv("DJANGO_ALLOWED_HOSTS", "localhost,127.0.0.1,testserver").split(",") if h.strip()
]

INSTALLED_APPS = [
    "orders.apps.OrdersConfig",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.middleware.common.CommonMiddleware",
]

ROOT_URLCONF = "ordersvc.urls"
WSGI_APPLICATION = "ordersvc.wsgi.application"

DATABASES = {}

APPEND_SLASH = False
USE_TZ = True
TIME_ZONE = "UTC"

# ── Orders ──────────────────────────────────────────────────────────
ORDER_ID_PREFIX = os.getenv("ORDER_ID_PREFIX", "o_")

# ── RabbitMQ (order events) ─────────────────────────────────────────
# Events are skipped when RABBIT_HOST is empty.
RABBIT_HOST = os.getenv("RABBIT_HOST", "")
RABBIT_PORT = int(os.getenv("RABBIT_PORT", "5672"))
RABBIT_VHOST = os.getenv("RABBIT_VHOST", "/")
RABBIT_USER = os.getenv("RABBIT_USER", "guest")
RABBIT_PASS = os.getenv("RABBIT_PASS", "guest")
RABBIT_EXCHANGE = os.getenv("RABBIT_EXCHANGE", "order_events")

# ── Logging ─────────────────────────────────────────────────────────
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "default": {"format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"},
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "default"},
    },
    "root": {"handlers": ["console"], "level": "WARNING"},
    "loggers": {
        "orders": {"level": LOG_LEVEL},
    },
}
