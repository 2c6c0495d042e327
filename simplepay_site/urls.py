# simplepay_site/urls.py
from __future__ import annotations

from django.contrib import admin
from django.urls import include, path

# ======================================================
# URLPATTERNS
# ======================================================
urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/orders/", include(("orders.urls", "orders"), namespace="orders")),
    path("api/payments/", include(("payments.urls", "payments"), namespace="payments")),
]
