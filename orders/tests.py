from decimal import Decimal

from django.test import TestCase, override_settings
from django.urls import reverse
from rest_framework.test import APIClient

from .models import Order
from .signals import order_paid
from .store import order_store


class OrderModelTest(TestCase):
    def setUp(self):
        self.order = Order.objects.create(total=Decimal("49.9"), currency="AUD")
        self.fulfilled = []
        order_paid.connect(self._on_paid)

    def tearDown(self):
        order_paid.disconnect(self._on_paid)

    def _on_paid(self, sender, order, transaction_id, **kwargs):
        self.fulfilled.append(transaction_id)

    def test_defaults(self):
        self.assertEqual(self.order.status, Order.STATUS_PENDING)
        self.assertTrue(self.order.order_key.startswith("wc_order_"))
        self.assertEqual(len(self.order.order_key), len("wc_order_") + 13)
        self.assertTrue(self.order.needs_payment)
        self.assertFalse(self.order.is_paid)

    def test_amount_always_two_decimals(self):
        self.order.refresh_from_db()
        self.assertEqual(self.order.amount_str, "49.90")

    def test_key_is_valid(self):
        self.assertTrue(self.order.key_is_valid(self.order.order_key))
        for key in ("", None, "wc_order_nope", "wc_order_é", self.order.order_key.upper()):
            with self.subTest(key=key):
                self.assertFalse(self.order.key_is_valid(key))

    def test_mark_paid_once(self):
        with self.captureOnCommitCallbacks(execute=True):
            first = self.order.mark_paid(transaction_id="TX1")
            second = self.order.mark_paid(transaction_id="TX2")

        self.assertTrue(first)
        self.assertFalse(second)
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, Order.STATUS_PROCESSING)
        self.assertEqual(self.order.transaction_id, "TX1")
        self.assertIsNotNone(self.order.paid_at)
        self.assertEqual(self.fulfilled, ["TX1"])

    def test_mark_paid_on_stale_instance(self):
        stale = Order.objects.get(pk=self.order.pk)
        with self.captureOnCommitCallbacks(execute=True):
            self.order.mark_paid(transaction_id="TX1")
            self.assertFalse(stale.mark_paid(transaction_id="TX2"))
        self.assertTrue(stale.is_paid)
        self.assertEqual(self.fulfilled, ["TX1"])

    def test_update_status_adds_note(self):
        self.order.update_status(Order.STATUS_ON_HOLD, "Could not check payment status.")
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, Order.STATUS_ON_HOLD)
        self.assertEqual([n.text for n in self.order.notes.all()], ["Could not check payment status."])
        # on-hold orders can still be paid
        self.assertTrue(self.order.needs_payment)

    def test_cancel(self):
        self.assertTrue(self.order.cancel())
        self.assertEqual(self.order.status, Order.STATUS_CANCELLED)
        self.assertFalse(self.order.needs_payment)

    def test_cancel_refused_once_money_may_have_moved(self):
        for status in (Order.STATUS_ON_HOLD, Order.STATUS_PROCESSING, Order.STATUS_COMPLETED):
            with self.subTest(status=status):
                self.order.status = status
                self.order.save()
                self.assertFalse(self.order.cancel())
                self.order.refresh_from_db()
                self.assertEqual(self.order.status, status)


class OrderStoreTest(TestCase):
    def setUp(self):
        self.order = Order.objects.create(total=Decimal("10.00"))

    def test_load(self):
        self.assertEqual(order_store.load(str(self.order.pk)), self.order)
        for bad in ("abc", "", None, "99999"):
            with self.subTest(order_id=bad):
                with self.assertRaises(Order.DoesNotExist):
                    order_store.load(bad)

    def test_urls_carry_key(self):
        key = self.order.order_key
        pk = self.order.pk
        self.assertEqual(order_store.return_url(self.order), f"/api/orders/{pk}/received/?key={key}")
        self.assertEqual(order_store.cancel_url(self.order), f"/api/orders/{pk}/cancel/?key={key}")
        self.assertEqual(order_store.pay_page_url(self.order), f"/api/payments/pay/{pk}/?key={key}")

    def test_mark_on_hold(self):
        order_store.mark_on_hold(self.order, "Unknown payment status.")
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, Order.STATUS_ON_HOLD)
        self.assertEqual(self.order.notes.get().text, "Unknown payment status.")


@override_settings(PAYMENTS={"CART_URL": "/cart/"})
class OrderViewsTest(TestCase):
    def setUp(self):
        self.order = Order.objects.create(total=Decimal("25.00"), currency="AUD")
        self.client = APIClient()

    def test_received(self):
        self.order.add_note("Payment has been authorised.")
        res = self.client.get(order_store.return_url(self.order))

        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["order_id"], self.order.pk)
        self.assertEqual(res.data["status"], Order.STATUS_PENDING)
        self.assertEqual(res.data["total"], "25.00")
        self.assertEqual(res.data["notes"], ["Payment has been authorised."])
        self.assertEqual(res.data["messages"], [])

    def test_received_wrong_key(self):
        url = reverse("orders:received", args=[self.order.pk])
        for key in ("wc_order_nope", "wc_order_é"):
            with self.subTest(key=key):
                self.assertEqual(self.client.get(url, {"key": key}).status_code, 403)

    def test_received_unknown_order(self):
        url = reverse("orders:received", args=[99999]) + "?key=x"
        self.assertEqual(self.client.get(url).status_code, 404)

    def test_cancel_redirects_to_cart(self):
        res = self.client.get(order_store.cancel_url(self.order))

        self.assertEqual(res.status_code, 302)
        self.assertEqual(res["Location"], "/cart/")
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, Order.STATUS_CANCELLED)

    def test_cancel_paid_order_is_refused(self):
        self.order.mark_paid(transaction_id="TX1")

        res = self.client.get(order_store.cancel_url(self.order))

        self.assertEqual(res.status_code, 302)
        self.order.refresh_from_db()
        self.assertTrue(self.order.is_paid)
        page = self.client.get(order_store.return_url(self.order))
        self.assertEqual(
            page.data["messages"],
            [{"level": "error", "message": "Your order can no longer be cancelled."}],
        )

    def test_cancel_wrong_key(self):
        url = reverse("orders:cancel", args=[self.order.pk]) + "?key=wc_order_nope"
        self.assertEqual(self.client.get(url).status_code, 403)
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, Order.STATUS_PENDING)
