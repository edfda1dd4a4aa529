from django.apps import AppConfig
from django.conf import settings


class OrdersConfig(AppConfig):
    name = "orders"

    def ready(self):
        from .services import OrderService
        from .store import OrderStore

        # The app config owns the one store for this process.
        self.service = OrderService(OrderStore(id_prefix=settings.ORDER_ID_PREFIX))
