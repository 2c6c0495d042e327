# payments/gateways/simplepay.py
import logging

from .. import simplepay_service as sp
from ..exceptions import PaymentError
from ..reconciliation import reconcile

log = logging.getLogger("payments")


class SimplePayGateway:
    name = "simplepay"

    def __init__(self, config=None, store=None):
        self.config = config or sp.get_cfg()
        self.store = store

    def issue_token(self, order):
        try:
            return sp.request_token(
                order_id=order.pk,
                amount=order.amount_str,
                currency=order.currency,
                cfg=self.config,
            )
        except PaymentError as e:
            log.error("TOKEN_REQUEST_FAILED order=%s kind=%s err=%s", order.pk, type(e).__name__, e)
            return None

    def check_status(self, token):
        return sp.fetch_status(token, cfg=self.config)

    def reconcile(self, order, token):
        return reconcile(order, token, checker=self, store=self.store)

    def form_url(self):
        return sp.form_url(self.config)

    @property
    def accepted_brands(self):
        return list(self.config.accepted_brands)
