from __future__ import annotations

import logging
import secrets
import string
from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models, transaction
from django.utils import timezone
from django.utils.crypto import constant_time_compare

from .signals import order_paid

log = logging.getLogger("orders")


def _gen_order_key(n: int = 13) -> str:
    alphabet = string.ascii_letters + string.digits
    return "wc_order_" + "".join(secrets.choice(alphabet) for _ in range(n))


def _default_currency() -> str:
    return (getattr(settings, "PAYMENTS", {}) or {}).get("CURRENCY") or "AUD"


class Order(models.Model):
    STATUS_PENDING = "pending"
    STATUS_ON_HOLD = "on-hold"
    STATUS_PROCESSING = "processing"
    STATUS_COMPLETED = "completed"
    STATUS_CANCELLED = "cancelled"
    STATUS_FAILED = "failed"

    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending payment"),
        (STATUS_ON_HOLD, "On hold"),
        (STATUS_PROCESSING, "Processing"),
        (STATUS_COMPLETED, "Completed"),
        (STATUS_CANCELLED, "Cancelled"),
        (STATUS_FAILED, "Failed"),
    ]

    PAID_STATUSES = (STATUS_PROCESSING, STATUS_COMPLETED)
    PAYABLE_STATUSES = (STATUS_PENDING, STATUS_FAILED, STATUS_ON_HOLD)

    # secret carried in pay/callback URLs
    order_key = models.CharField(
        max_length=32,
        unique=True,
        db_index=True,
        default=_gen_order_key,
        editable=False,
    )

    total = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    currency = models.CharField(max_length=3, default=_default_currency)

    status = models.CharField(
        max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING
    )

    # processor reference (uniqueId)
    transaction_id = models.CharField(max_length=64, blank=True, default="")
    paid_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status"], name="orders_orde_status_c6dd84_idx"),
            models.Index(fields=["created_at"], name="orders_orde_created_0e92a8_idx"),
        ]

    def __str__(self):
        return f"#{self.pk} - {self.total} {self.currency} - {self.status}"

    # ───────────── Properties ─────────────
    @property
    def is_paid(self) -> bool:
        return self.status in self.PAID_STATUSES

    @property
    def needs_payment(self) -> bool:
        return self.status in self.PAYABLE_STATUSES

    @property
    def amount_str(self) -> str:
        """Total as the processor expects it, always two decimals."""
        return f"{Decimal(self.total or 0):.2f}"

    # ───────────── Helpers ─────────────
    def key_is_valid(self, key) -> bool:
        if not key or not self.order_key:
            return False
        return constant_time_compare(str(key), self.order_key)

    def add_note(self, text: str) -> "OrderNote":
        return OrderNote.objects.create(order=self, text=text)

    def update_status(self, status: str, note: str = "") -> None:
        old = self.status
        self.status = status
        self.save(update_fields=["status", "updated_at"])
        if note:
            self.add_note(note)
        log.info("ORDER_STATUS order=%s %s -> %s", self.pk, old, status)

    @transaction.atomic
    def mark_paid(self, transaction_id: str = "") -> bool:
        """
        Move the order to processing and announce it via ``order_paid``.

        Idempotent: the row is locked and re-read, an order that is already
        paid is left alone and nothing is sent. Returns True only on the
        first transition.
        """
        locked = Order.objects.select_for_update().get(pk=self.pk)
        if locked.is_paid:
            self.refresh_from_db()
            return False

        locked.status = self.STATUS_PROCESSING
        locked.paid_at = timezone.now()
        if transaction_id:
            locked.transaction_id = transaction_id
        locked.save(update_fields=["status", "paid_at", "transaction_id", "updated_at"])
        self.refresh_from_db()

        log.info("ORDER_PAID order=%s tx=%s", self.pk, self.transaction_id)
        transaction.on_commit(
            lambda: order_paid.send(sender=Order, order=self, transaction_id=self.transaction_id)
        )
        return True

    def cancel(self) -> bool:
        # on-hold orders may have money in flight
        if self.status not in (self.STATUS_PENDING, self.STATUS_FAILED):
            return False
        self.update_status(self.STATUS_CANCELLED, "Order cancelled by customer.")
        return True


class OrderNote(models.Model):
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="notes")
    text = models.TextField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at", "id"]

    def __str__(self):
        return f"#{self.order_id}: {self.text[:40]}"
