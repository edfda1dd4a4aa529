from django.urls import include, path

urlpatterns = [
    path("", include("orders.urls")),
]

handler404 = "orders.views.not_found"
handler500 = "orders.views.server_error"
