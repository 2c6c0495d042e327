# orders/store.py
from __future__ import annotations

from urllib.parse import urlencode

from django.urls import reverse

from .models import Order


def _with_query(url: str, **params) -> str:
    sep = "&" if "?" in (url or "") else "?"
    return f"{url}{sep}{urlencode(params)}"


class DjangoOrderStore:
    """Order persistence and order URLs, backed by the ``orders`` models."""

    def load(self, order_id) -> Order:
        try:
            pk = int(str(order_id).strip())
        except (TypeError, ValueError):
            raise Order.DoesNotExist(f"invalid order id: {order_id!r}")
        return Order.objects.get(pk=pk)

    def mark_on_hold(self, order: Order, reason: str) -> None:
        order.update_status(Order.STATUS_ON_HOLD, reason)

    def mark_paid(self, order: Order, transaction_id: str = "") -> bool:
        return order.mark_paid(transaction_id=transaction_id)

    def add_note(self, order: Order, text: str) -> None:
        order.add_note(text)

    def key_is_valid(self, order: Order, key) -> bool:
        return order.key_is_valid(key)

    def cancel_url(self, order: Order) -> str:
        return _with_query(reverse("orders:cancel", args=[order.pk]), key=order.order_key)

    def return_url(self, order: Order) -> str:
        return _with_query(reverse("orders:received", args=[order.pk]), key=order.order_key)

    def pay_page_url(self, order: Order) -> str:
        return _with_query(reverse("payments:pay", args=[order.pk]), key=order.order_key)


order_store = DjangoOrderStore()
