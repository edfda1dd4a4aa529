from django.urls import path
from .views import cancel_order, health, order_detail, orders_collection

urlpatterns = [
    path("orders", orders_collection),
    path("orders/<str:order_id>", order_detail),
    path("orders/<str:order_id>/cancel", cancel_order),
    path("health", health),
]
