from __future__ import annotations

from datetime import timedelta
from typing import Optional

from django.conf import settings
from django.db import models, transaction
from django.utils import timezone


def _token_ttl_minutes() -> int:
    try:
        return int((getattr(settings, "PAYMENTS", {}) or {}).get("TOKEN_TTL_MINUTES") or 10)
    except (TypeError, ValueError):
        return 10


class PaymentToken(models.Model):
    """
    Short-lived order -> token store.

    A token issued at checkout is kept here so the pay page does not have to
    ask the processor again. One live token per order; reading it consumes it.
    """

    order = models.OneToOneField(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="payment_token",
    )
    token = models.CharField(max_length=128)
    expires_at = models.DateTimeField(db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"order #{self.order_id} - expires {self.expires_at:%Y-%m-%d %H:%M}"

    @property
    def is_expired(self) -> bool:
        return self.expires_at <= timezone.now()

    @classmethod
    def remember(cls, order, token: str, minutes: Optional[int] = None) -> "PaymentToken":
        minutes = _token_ttl_minutes() if minutes is None else minutes
        obj, _ = cls.objects.update_or_create(
            order=order,
            defaults={
                "token": token,
                "expires_at": timezone.now() + timedelta(minutes=minutes),
            },
        )
        return obj

    @classmethod
    @transaction.atomic
    def take(cls, order) -> Optional[str]:
        """Pop the live token for ``order``; expired tokens are dropped and yield None."""
        obj = cls.objects.select_for_update().filter(order=order).first()
        if obj is None:
            return None
        token = obj.token
        expired = obj.is_expired
        obj.delete()
        return None if expired else token

    @classmethod
    def purge_expired(cls) -> int:
        deleted, _ = cls.objects.filter(expires_at__lte=timezone.now()).delete()
        return deleted
