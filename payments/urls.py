# payments/urls.py
# -*- coding: utf-8 -*-
from django.urls import path

from .views import CheckoutView, PayPageView, payment_callback

app_name = "payments"

urlpatterns = [
    path("checkout/<str:order_id>/", CheckoutView.as_view(), name="checkout"),
    path("pay/<str:order_id>/", PayPageView.as_view(), name="pay"),
    path("callback/", payment_callback, name="callback"),
]
