# orders/views.py
# -*- coding: utf-8 -*-
from __future__ import annotations

import logging

from django.conf import settings
from django.contrib import messages
from django.http import HttpResponseRedirect
from rest_framework import permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from .models import Order
from .store import order_store

log = logging.getLogger("orders")


def _cart_url():
    return (getattr(settings, "PAYMENTS", {}) or {}).get("CART_URL") or "/"


def load_order_for_key(order_id, key):
    try:
        order = order_store.load(order_id)
    except Order.DoesNotExist:
        return None, Response({"detail": "Order not found."}, status=status.HTTP_404_NOT_FOUND)
    if not order_store.key_is_valid(order, key):
        log.warning("ORDER_KEY_MISMATCH order=%s", order.pk)
        return None, Response({"detail": "Invalid order key."}, status=status.HTTP_403_FORBIDDEN)
    return order, None


class OrderReceivedView(APIView):
    """Thank-you page payload."""

    permission_classes = [permissions.AllowAny]

    def get(self, request, order_id):
        order, err = load_order_for_key(order_id, request.GET.get("key"))
        if err:
            return err

        notices = [
            {"level": m.level_tag, "message": str(m)}
            for m in messages.get_messages(request._request)
        ]
        return Response(
            {
                "order_id": order.pk,
                "status": order.status,
                "is_paid": order.is_paid,
                "total": order.amount_str,
                "currency": order.currency,
                "transaction_id": order.transaction_id,
                "notes": [n.text for n in order.notes.all()],
                "messages": notices,
            }
        )


class CancelOrderView(APIView):
    permission_classes = [permissions.AllowAny]

    def get(self, request, order_id):
        order, err = load_order_for_key(order_id, request.GET.get("key"))
        if err:
            return err

        if order.cancel():
            messages.info(request._request, "Your order was cancelled.", fail_silently=True)
        else:
            log.info("ORDER_CANCEL_REFUSED order=%s status=%s", order.pk, order.status)
            messages.error(
                request._request,
                "Your order can no longer be cancelled.",
                fail_silently=True,
            )
        return HttpResponseRedirect(_cart_url())
