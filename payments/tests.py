import json
from decimal import Decimal
from io import StringIO
from unittest.mock import MagicMock, patch

import requests
from django.core.management import call_command
from django.test import Client, TestCase, override_settings
from django.urls import reverse
from rest_framework.test import APIClient

from orders.models import Order
from orders.signals import order_paid
from orders.store import order_store

from . import simplepay_service as sp
from .exceptions import (
    AuthorizationFailure,
    ProcessorDeclined,
    ProcessorUnknown,
    TransportFailure,
)
from .gateways import FakeGateway, SimplePayGateway, get_gateway
from .gateways.base import OrderStore, Reconciler, StatusChecker, TokenIssuer
from .models import PaymentToken
from .reconciliation import Outcome, reconcile, reconcile_callback
from .redirects import target_for
from .status import Declined, Error, Success, Unknown, parse_status

ACK_BODY = {
    "transaction": {
        "processing": {"result": "ACK", "return": {"message": "OK"}},
        "identification": {"uniqueId": "TX123"},
    }
}

SIMPLEPAY_SETTINGS = {
    "DEFAULT_GATEWAY": "simplepay",
    "CURRENCY": "AUD",
    "TOKEN_TTL_MINUTES": 10,
    "CART_URL": "/cart/",
    "SIMPLEPAY": {
        "TEST_MODE": True,
        "SECURITY_SENDER": "sender-1",
        "TRANSACTION_CHANNEL": "channel-1",
        "TRANSACTION_MODE": "INTEGRATOR_TEST",
        "USER_LOGIN": "login-1",
        "USER_PWD": "secret-pwd",
        "PAYMENT_TYPE": "DB",
        "ACCEPTED_BRANDS": ["VISA", "MASTER", "BOGUS"],
        "TOKEN_TIMEOUT": 60,
        "STATUS_TIMEOUT": 30,
    },
}


def _response(body=None, text=None, status_code=200):
    r = MagicMock()
    r.status_code = status_code
    r.text = text if text is not None else json.dumps(body)
    r.json.side_effect = lambda: json.loads(r.text)
    if status_code >= 400:
        r.raise_for_status.side_effect = requests.HTTPError(f"{status_code} error")
    return r


class StubChecker:
    def __init__(self, result=None, exc=None):
        self.result = result
        self.exc = exc
        self.calls = []

    def check_status(self, token):
        self.calls.append(token)
        if self.exc:
            raise self.exc
        return self.result

    def reconcile(self, order, token):
        return reconcile(order, token, checker=self, store=order_store)


class ParseStatusTest(TestCase):
    def test_ack_is_success(self):
        res = parse_status(ACK_BODY)
        self.assertEqual(res, Success(transaction_id="TX123", message="OK"))

    def test_error_message_wins_over_ack(self):
        body = dict(ACK_BODY, errorMessage="Card expired")
        self.assertEqual(parse_status(body), Error(message="Card expired"))

    def test_nok_is_declined_with_return_message(self):
        body = {"transaction": {"processing": {"result": "NOK", "return": {"message": "Insufficient funds"}}}}
        self.assertEqual(parse_status(body), Declined(message="Insufficient funds"))

    def test_nok_without_message(self):
        self.assertEqual(parse_status({"transaction": {"processing": {"result": "NOK"}}}), Declined(message=""))

    def test_ack_without_identification(self):
        body = {"transaction": {"processing": {"result": "ACK"}}}
        self.assertEqual(parse_status(body), Success(transaction_id="", message=""))

    def test_other_shapes_are_unknown(self):
        for payload in ({}, {"transaction": {}}, {"transaction": "x"},
                        {"transaction": {"processing": {"result": "PENDING"}}}, None, [1, 2]):
            with self.subTest(payload=payload):
                self.assertIsInstance(parse_status(payload), Unknown)


@override_settings(PAYMENTS=SIMPLEPAY_SETTINGS)
class SimplePayServiceTest(TestCase):
    def test_config_from_settings(self):
        cfg = sp.get_cfg()
        self.assertEqual(cfg.security_sender, "sender-1")
        self.assertTrue(cfg.test_mode)
        self.assertEqual(cfg.accepted_brands, ["VISA", "MASTER"])
        self.assertEqual(cfg.token_timeout, 60)
        self.assertEqual(cfg.status_timeout, 30)

    def test_urls_follow_test_mode(self):
        cfg = sp.get_cfg()
        self.assertEqual(sp.token_url(cfg), sp.TOKEN_TEST_URL)
        self.assertEqual(sp.form_url(cfg), sp.FORM_TEST_URL)
        self.assertEqual(sp.status_url("abc", cfg), sp.STATUS_TEST_URL + "abc")

        live = dict(SIMPLEPAY_SETTINGS, SIMPLEPAY=dict(SIMPLEPAY_SETTINGS["SIMPLEPAY"], TEST_MODE=False))
        with self.settings(PAYMENTS=live):
            cfg = sp.get_cfg()
            self.assertEqual(sp.token_url(cfg), sp.TOKEN_URL)
            self.assertEqual(sp.status_url("abc", cfg), "https://simplepays.com/frontend/GetStatus;jsessionid=abc")

    @patch("payments.simplepay_service.requests.post")
    def test_request_token_posts_form_fields(self, post):
        post.return_value = _response({"transaction": {"token": "TOK-1"}})

        token = sp.request_token(order_id=42, amount="49.95", currency="AUD")

        self.assertEqual(token, "TOK-1")
        args, kwargs = post.call_args
        self.assertEqual(args[0], sp.TOKEN_TEST_URL)
        self.assertEqual(kwargs["timeout"], 60)
        self.assertEqual(kwargs["headers"]["Content-Type"], "application/x-www-form-urlencoded")
        self.assertEqual(
            kwargs["data"],
            {
                "SECURITY.SENDER": "sender-1",
                "TRANSACTION.CHANNEL": "channel-1",
                "TRANSACTION.MODE": "INTEGRATOR_TEST",
                "USER.LOGIN": "login-1",
                "USER.PWD": "secret-pwd",
                "PAYMENT.TYPE": "DB",
                "PRESENTATION.AMOUNT": "49.95",
                "PRESENTATION.CURRENCY": "AUD",
                "IDENTIFICATION.INVOICEID": "42",
            },
        )

    @patch("payments.simplepay_service.requests.post")
    def test_request_token_failures(self, post):
        cases = [
            (requests.ConnectionError("down"), TransportFailure),
            (requests.Timeout("slow"), TransportFailure),
            (_response(status_code=500, text="oops"), TransportFailure),
            (_response(text="<html>"), ProcessorUnknown),
            (_response({"transaction": {}}), ProcessorUnknown),
            (_response(["token"]), ProcessorUnknown),
            (_response({"errorMessage": "bad login"}), ProcessorDeclined),
        ]
        for outcome, exc in cases:
            with self.subTest(exc=exc.__name__, outcome=outcome):
                if isinstance(outcome, Exception):
                    post.side_effect, post.return_value = outcome, None
                else:
                    post.side_effect, post.return_value = None, outcome
                with self.assertRaises(exc):
                    sp.request_token(order_id=1, amount="1.00", currency="AUD")

    @patch("payments.simplepay_service.requests.get")
    def test_fetch_status(self, get):
        get.return_value = _response(ACK_BODY)

        res = sp.fetch_status("TOK-9")

        self.assertEqual(res, Success(transaction_id="TX123", message="OK"))
        get.assert_called_once_with(sp.STATUS_TEST_URL + "TOK-9", timeout=30, allow_redirects=True)

    @patch("payments.simplepay_service.requests.get")
    def test_fetch_status_transport_errors_raise(self, get):
        for side_effect in (requests.ConnectionError("down"), requests.Timeout("slow")):
            get.side_effect = side_effect
            with self.assertRaises(TransportFailure):
                sp.fetch_status("TOK")

        get.side_effect = None
        get.return_value = _response(status_code=503, text="")
        with self.assertRaises(TransportFailure):
            sp.fetch_status("TOK")

    @patch("payments.simplepay_service.requests.get")
    def test_fetch_status_non_json_is_unknown(self, get):
        get.return_value = _response(text="<html>maintenance</html>")
        self.assertEqual(sp.fetch_status("TOK"), Unknown(raw="<html>maintenance</html>"))


@override_settings(PAYMENTS=SIMPLEPAY_SETTINGS)
class GatewayTest(TestCase):
    def setUp(self):
        self.order = Order.objects.create(total=Decimal("20.00"), currency="AUD")

    def test_get_gateway(self):
        self.assertIsInstance(get_gateway(), SimplePayGateway)
        self.assertIsInstance(get_gateway("fake"), FakeGateway)
        with self.assertRaises(ValueError):
            get_gateway("paypal")

    def test_gateways_provide_capabilities(self):
        for gw in (get_gateway(), get_gateway("fake")):
            with self.subTest(gateway=gw.name):
                self.assertIsInstance(gw, TokenIssuer)
                self.assertIsInstance(gw, StatusChecker)
                self.assertIsInstance(gw, Reconciler)
        self.assertIsInstance(order_store, OrderStore)

    @patch("payments.simplepay_service.requests.post")
    def test_issue_token_never_raises(self, post):
        post.side_effect = requests.ConnectionError("down")
        self.assertIsNone(get_gateway().issue_token(self.order))

        post.side_effect = None
        post.return_value = _response({"errorMessage": "bad login"})
        self.assertIsNone(get_gateway().issue_token(self.order))

    def test_fake_gateway_pays(self):
        gw = get_gateway("fake")
        token = gw.issue_token(self.order)
        self.assertTrue(token.startswith("FAKE-"))
        with self.captureOnCommitCallbacks(execute=True):
            rec = gw.reconcile(self.order, token)
        self.assertEqual(rec.outcome, Outcome.PAID)
        self.order.refresh_from_db()
        self.assertTrue(self.order.is_paid)


class ReconcileTest(TestCase):
    def setUp(self):
        self.order = Order.objects.create(total=Decimal("49.95"), currency="AUD")
        self.fulfilled = []
        order_paid.connect(self._on_paid)

    def tearDown(self):
        order_paid.disconnect(self._on_paid)

    def _on_paid(self, sender, order, transaction_id, **kwargs):
        self.fulfilled.append((order.pk, transaction_id))

    def _reconcile(self, checker):
        with self.captureOnCommitCallbacks(execute=True):
            rec = reconcile(self.order, "TOK", checker=checker, store=order_store)
        self.order.refresh_from_db()
        return rec

    def _notes(self):
        return [n.text for n in self.order.notes.all()]

    def test_success(self):
        rec = self._reconcile(StubChecker(Success(transaction_id="TX123", message="OK")))
        self.assertEqual(rec.outcome, Outcome.PAID)
        self.assertEqual(rec.notice, "")
        self.assertEqual(self.order.status, Order.STATUS_PROCESSING)
        self.assertEqual(self.order.transaction_id, "TX123")
        notes = self._notes()
        self.assertEqual(len(notes), 1)
        self.assertIn("TX123", notes[0])
        self.assertIn("OK", notes[0])
        self.assertEqual(self.fulfilled, [(self.order.pk, "TX123")])

    def test_error_message_declines(self):
        rec = self._reconcile(StubChecker(Error(message="Card expired")))
        self.assertEqual(rec.outcome, Outcome.DECLINED)
        self.assertIn("Card expired", rec.notice)
        self.assertEqual(self.order.status, Order.STATUS_PENDING)
        self.assertEqual(self._notes(), ["Payment unsuccessful.\nError: Card expired"])
        self.assertEqual(self.fulfilled, [])

    def test_nok_declines(self):
        rec = self._reconcile(StubChecker(Declined(message="")))
        self.assertEqual(rec.outcome, Outcome.DECLINED)
        self.assertEqual(self._notes(), ["Payment unsuccessful."])

    def test_transport_failure_holds_for_review(self):
        rec = self._reconcile(StubChecker(exc=TransportFailure("timeout")))
        self.assertEqual(rec.outcome, Outcome.HELD_FOR_REVIEW)
        self.assertEqual(self.order.status, Order.STATUS_ON_HOLD)
        self.assertEqual(self._notes(), ["Could not check payment status."])

    def test_unknown_holds(self):
        rec = self._reconcile(StubChecker(Unknown(raw={"foo": 1})))
        self.assertEqual(rec.outcome, Outcome.UNKNOWN)
        self.assertEqual(rec.notice, "Could not determine payment status.")
        self.assertEqual(self.order.status, Order.STATUS_ON_HOLD)
        self.assertEqual(self._notes(), ["Unknown payment status."])

    def test_already_paid_is_a_no_op(self):
        self._reconcile(StubChecker(Success(transaction_id="TX123", message="OK")))
        checker = StubChecker(Success(transaction_id="TX999", message="OK"))

        rec = self._reconcile(checker)

        self.assertEqual(rec.outcome, Outcome.PAID)
        self.assertEqual(checker.calls, [])
        self.assertEqual(len(self._notes()), 1)
        self.assertEqual(self.order.transaction_id, "TX123")
        self.assertEqual(len(self.fulfilled), 1)

    def test_stale_order_after_payment_adds_no_note(self):
        stale = Order.objects.get(pk=self.order.pk)
        self._reconcile(StubChecker(Success(transaction_id="TX1", message="OK")))

        with self.captureOnCommitCallbacks(execute=True):
            rec = reconcile(stale, "TOK-2", checker=StubChecker(Success(transaction_id="TX2", message="OK")),
                            store=order_store)

        self.assertEqual(rec.outcome, Outcome.PAID)
        self.order.refresh_from_db()
        self.assertEqual(self.order.transaction_id, "TX1")
        notes = self._notes()
        self.assertEqual(len(notes), 1)
        self.assertIn("TX1", notes[0])
        self.assertEqual(len(self.fulfilled), 1)

    def test_decline_then_fresh_token_can_pay(self):
        self._reconcile(StubChecker(Error(message="Card expired")))
        rec = self._reconcile(StubChecker(Success(transaction_id="TX2", message="OK")))
        self.assertEqual(rec.outcome, Outcome.PAID)
        self.assertEqual(len(self._notes()), 2)

    def test_key_mismatch_refuses_before_status_check(self):
        checker = StubChecker(Success(transaction_id="TX123", message="OK"))
        with self.assertRaises(AuthorizationFailure):
            reconcile_callback(self.order, "wc_order_wrong", "TOK", reconciler=checker, store=order_store)
        self.assertEqual(checker.calls, [])
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, Order.STATUS_PENDING)
        self.assertEqual(self._notes(), [])


class RedirectTargetTest(TestCase):
    def test_targets(self):
        order = Order.objects.create(total=Decimal("5.00"))
        ret = order_store.return_url(order)
        pay = order_store.pay_page_url(order)
        self.assertEqual(target_for(Outcome.PAID, order, order_store), ret)
        self.assertEqual(target_for(Outcome.HELD_FOR_REVIEW, order, order_store), ret)
        self.assertEqual(target_for(Outcome.UNKNOWN, order, order_store), ret)
        self.assertEqual(target_for(Outcome.DECLINED, order, order_store), pay)
        self.assertIn(f"key={order.order_key}", pay)


class PaymentTokenStoreTest(TestCase):
    def setUp(self):
        self.order = Order.objects.create(total=Decimal("5.00"))

    def test_take_consumes(self):
        PaymentToken.remember(self.order, "TOK-A")
        self.assertEqual(PaymentToken.take(self.order), "TOK-A")
        self.assertIsNone(PaymentToken.take(self.order))

    def test_remember_replaces(self):
        PaymentToken.remember(self.order, "TOK-A")
        PaymentToken.remember(self.order, "TOK-B")
        self.assertEqual(PaymentToken.objects.filter(order=self.order).count(), 1)
        self.assertEqual(PaymentToken.take(self.order), "TOK-B")

    def test_expired_is_never_returned(self):
        PaymentToken.remember(self.order, "TOK-OLD", minutes=-1)
        self.assertIsNone(PaymentToken.take(self.order))
        self.assertFalse(PaymentToken.objects.exists())

    def test_purge_expired(self):
        other = Order.objects.create(total=Decimal("1.00"))
        PaymentToken.remember(self.order, "TOK-OLD", minutes=-1)
        PaymentToken.remember(other, "TOK-NEW")
        self.assertEqual(PaymentToken.purge_expired(), 1)
        self.assertEqual(list(PaymentToken.objects.values_list("token", flat=True)), ["TOK-NEW"])

    def test_purge_command(self):
        PaymentToken.remember(self.order, "TOK-OLD", minutes=-1)
        out = StringIO()
        call_command("purge_payment_tokens", stdout=out)
        self.assertIn("1 expired token(s) deleted.", out.getvalue())
        self.assertFalse(PaymentToken.objects.exists())


@override_settings(PAYMENTS=SIMPLEPAY_SETTINGS)
class CheckoutFlowTest(TestCase):
    def setUp(self):
        self.order = Order.objects.create(total=Decimal("49.95"), currency="AUD")
        self.client = APIClient()
        self.url = reverse("payments:checkout", args=[self.order.pk])

    @patch("payments.simplepay_service.requests.post")
    def test_checkout_stores_token_and_redirects_to_pay_page(self, post):
        post.return_value = _response({"transaction": {"token": "TOK-1"}})

        res = self.client.post(self.url, {"order_key": self.order.order_key}, format="json")

        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["result"], "success")
        self.assertEqual(res.data["redirect"], order_store.pay_page_url(self.order))
        self.assertEqual(PaymentToken.objects.get(order=self.order).token, "TOK-1")

    @patch("payments.simplepay_service.requests.post")
    def test_checkout_cannot_connect(self, post):
        post.side_effect = requests.ConnectionError("down")

        res = self.client.post(self.url, {"order_key": self.order.order_key}, format="json")

        self.assertEqual(res.status_code, 502)
        self.assertEqual(res.data["detail"], "Could not connect to payment gateway.")
        self.assertFalse(PaymentToken.objects.exists())
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, Order.STATUS_PENDING)
        self.assertFalse(self.order.notes.exists())

    @patch("payments.simplepay_service.requests.post")
    def test_checkout_wrong_key(self, post):
        res = self.client.post(self.url, {"order_key": "wc_order_nope"}, format="json")
        self.assertEqual(res.status_code, 403)
        post.assert_not_called()

    def test_checkout_requires_key(self):
        res = self.client.post(self.url, {}, format="json")
        self.assertEqual(res.status_code, 400)

    def test_checkout_paid_order_conflicts(self):
        self.order.mark_paid(transaction_id="TX1")
        res = self.client.post(self.url, {"order_key": self.order.order_key}, format="json")
        self.assertEqual(res.status_code, 409)

    @patch("payments.simplepay_service.requests.post")
    def test_pay_page_uses_stored_token(self, post):
        PaymentToken.remember(self.order, "TOK-STORED")
        res = self.client.get(order_store.pay_page_url(self.order))

        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["token"], "TOK-STORED")
        self.assertEqual(res.data["form_url"], sp.FORM_TEST_URL)
        self.assertEqual(res.data["accepted_brands"], ["VISA", "MASTER"])
        self.assertEqual(res.data["cancel_url"], order_store.cancel_url(self.order))
        self.assertTrue(res.data["action_url"].startswith("http://testserver/api/payments/callback/?"))
        self.assertIn(f"order_id={self.order.pk}", res.data["action_url"])
        self.assertIn(f"order_key={self.order.order_key}", res.data["action_url"])
        post.assert_not_called()
        self.assertFalse(PaymentToken.objects.exists())

    @patch("payments.simplepay_service.requests.post")
    def test_pay_page_issues_fresh_token(self, post):
        post.return_value = _response({"transaction": {"token": "TOK-FRESH"}})
        res = self.client.get(order_store.pay_page_url(self.order))
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["token"], "TOK-FRESH")

    @patch("payments.simplepay_service.requests.post")
    def test_pay_page_cannot_connect(self, post):
        post.side_effect = requests.Timeout("slow")
        res = self.client.get(order_store.pay_page_url(self.order))
        self.assertEqual(res.status_code, 502)

    def test_pay_page_paid_order(self):
        self.order.mark_paid(transaction_id="TX1")
        res = self.client.get(order_store.pay_page_url(self.order))
        self.assertEqual(res.status_code, 200)
        self.assertTrue(res.data["already_paid"])
        self.assertEqual(res.data["redirect_url"], order_store.return_url(self.order))

    def test_pay_page_wrong_key(self):
        url = reverse("payments:pay", args=[self.order.pk]) + "?key=wc_order_nope"
        self.assertEqual(self.client.get(url).status_code, 403)


@override_settings(PAYMENTS=SIMPLEPAY_SETTINGS)
class CallbackViewTest(TestCase):
    def setUp(self):
        self.order = Order.objects.create(total=Decimal("49.95"), currency="AUD")
        self.client = Client()
        self.url = reverse("payments:callback")
        self.fulfilled = []
        order_paid.connect(self._on_paid)

    def tearDown(self):
        order_paid.disconnect(self._on_paid)

    def _on_paid(self, sender, order, **kwargs):
        self.fulfilled.append(order.pk)

    def _callback(self, **overrides):
        params = {"token": "TOK-1", "order_id": self.order.pk, "order_key": self.order.order_key}
        params.update(overrides)
        with self.captureOnCommitCallbacks(execute=True):
            res = self.client.get(self.url, params)
        self.order.refresh_from_db()
        return res

    def _notes(self):
        return [n.text for n in self.order.notes.all()]

    @patch("payments.simplepay_service.requests.get")
    def test_success(self, get):
        get.return_value = _response(ACK_BODY)

        res = self._callback()

        self.assertEqual(res.status_code, 302)
        self.assertEqual(res["Location"], order_store.return_url(self.order))
        self.assertTrue(self.order.is_paid)
        self.assertEqual(len(self._notes()), 1)
        self.assertIn("TX123", self._notes()[0])
        self.assertIn("OK", self._notes()[0])
        self.assertEqual(self.fulfilled, [self.order.pk])
        get.assert_called_once_with(sp.STATUS_TEST_URL + "TOK-1", timeout=30, allow_redirects=True)

    @patch("payments.simplepay_service.requests.get")
    def test_decline_goes_back_to_pay_page(self, get):
        get.return_value = _response({"errorMessage": "Card expired"})

        res = self._callback()

        self.assertEqual(res.status_code, 302)
        self.assertEqual(res["Location"], order_store.pay_page_url(self.order))
        self.assertFalse(self.order.is_paid)
        self.assertIn("Card expired", self._notes()[0])
        self.assertEqual(self.fulfilled, [])

    @patch("payments.simplepay_service.requests.get")
    def test_error_message_beats_ack(self, get):
        get.return_value = _response(dict(ACK_BODY, errorMessage="Fraud suspected"))

        res = self._callback()

        self.assertEqual(res["Location"], order_store.pay_page_url(self.order))
        self.assertFalse(self.order.is_paid)

    @patch("payments.simplepay_service.requests.get")
    def test_transport_failure_puts_order_on_hold(self, get):
        get.side_effect = requests.ConnectionError("down")

        res = self._callback()

        self.assertEqual(res["Location"], order_store.return_url(self.order))
        self.assertEqual(self.order.status, Order.STATUS_ON_HOLD)
        self.assertEqual(self._notes(), ["Could not check payment status."])

        # shopper sees the notice on the thank-you page
        page = self.client.get(res["Location"])
        self.assertIn(
            "Could not check payment status.",
            [m["message"] for m in page.json()["messages"]],
        )

    @patch("payments.simplepay_service.requests.get")
    def test_unknown_status(self, get):
        get.return_value = _response({"transaction": {"processing": {"result": "WAITING"}}})

        res = self._callback()

        self.assertEqual(res["Location"], order_store.return_url(self.order))
        self.assertEqual(self.order.status, Order.STATUS_ON_HOLD)
        self.assertEqual(self._notes(), ["Unknown payment status."])

    @patch("payments.simplepay_service.requests.get")
    def test_wrong_key_changes_nothing(self, get):
        for key in ("wc_order_forged", "wc_order_é"):
            with self.subTest(order_key=key):
                res = self._callback(order_key=key)

                self.assertEqual(res.status_code, 403)
                self.assertFalse(res.has_header("Location"))
                get.assert_not_called()
                self.assertEqual(self.order.status, Order.STATUS_PENDING)
                self.assertEqual(self._notes(), [])

    @patch("payments.simplepay_service.requests.get")
    def test_resubmitted_token_after_paid(self, get):
        get.return_value = _response(ACK_BODY)
        self._callback()
        self._callback()

        self.assertEqual(get.call_count, 1)
        self.assertEqual(len(self._notes()), 1)
        self.assertEqual(self.fulfilled, [self.order.pk])

    def test_missing_params(self):
        for missing in ("token", "order_id", "order_key"):
            params = {"token": "T", "order_id": self.order.pk, "order_key": self.order.order_key}
            params.pop(missing)
            with self.subTest(missing=missing):
                res = self.client.get(self.url, params)
                self.assertEqual(res.status_code, 400)

    def test_unknown_order(self):
        res = self.client.get(self.url, {"token": "T", "order_id": "99999", "order_key": "k"})
        self.assertEqual(res.status_code, 404)

    @override_settings(PAYMENTS=dict(SIMPLEPAY_SETTINGS, DEFAULT_GATEWAY="fake"))
    def test_full_flow_with_fake_gateway(self):
        api = APIClient()
        res = api.post(
            reverse("payments:checkout", args=[self.order.pk]),
            {"order_key": self.order.order_key},
            format="json",
        )
        self.assertEqual(res.status_code, 200)
        page = api.get(res.data["redirect"])
        token = page.data["token"]

        res = self._callback(token=token)

        self.assertEqual(res["Location"], order_store.return_url(self.order))
        self.assertTrue(self.order.is_paid)
        self.assertTrue(self.order.transaction_id.startswith("TEST-FAKE-"))
