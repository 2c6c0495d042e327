# payments/gateways/__init__.py
from django.conf import settings

from orders.store import order_store
from .fake import FakeGateway
from .simplepay import SimplePayGateway


def get_gateway(name=None, store=None):
    cfg = getattr(settings, "PAYMENTS", {}) or {}
    name = (name or cfg.get("DEFAULT_GATEWAY") or "simplepay").strip().lower()
    store = store or order_store

    if name == "fake":
        return FakeGateway(cfg.get("FAKE") or {}, store=store)
    if name == "simplepay":
        return SimplePayGateway(store=store)

    raise ValueError(f"Unknown gateway: {name}")
