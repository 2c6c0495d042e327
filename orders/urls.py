# orders/urls.py
from django.urls import path

from .views import CancelOrderView, OrderReceivedView

app_name = "orders"

urlpatterns = [
    path("<str:order_id>/received/", OrderReceivedView.as_view(), name="received"),
    path("<str:order_id>/cancel/", CancelOrderView.as_view(), name="cancel"),
]
