# payments/gateways/fake.py
from ..reconciliation import reconcile
from ..status import Success


class FakeGateway:
    """Local development gateway: every token is issued and every payment authorised."""

    name = "fake"

    def __init__(self, config=None, store=None):
        self.config = config or {}
        self.store = store

    def issue_token(self, order):
        return f"FAKE-{order.pk}-{order.order_key[-8:].upper()}"

    def check_status(self, token):
        return Success(transaction_id=f"TEST-{token}", message="Fake gateway")

    def reconcile(self, order, token):
        return reconcile(order, token, checker=self, store=self.store)

    def form_url(self):
        return self.config.get("FORM_URL", "")

    @property
    def accepted_brands(self):
        return list(self.config.get("ACCEPTED_BRANDS") or ["VISA", "MASTER"])
