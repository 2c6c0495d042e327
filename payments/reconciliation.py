# payments/reconciliation.py
"""
Payment status reconciliation.

One callback, one terminal outcome:

    TransportFailure        -> HELD_FOR_REVIEW  (order on-hold)
    Error / Declined (NOK)  -> DECLINED         (note only, shopper retries)
    Success (ACK)           -> PAID             (note, order paid)
    anything else           -> UNKNOWN          (order on-hold)

An order that is already paid is never touched again.
"""
from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .exceptions import AuthorizationFailure, TransportFailure
from .status import Declined, Error, Success

if TYPE_CHECKING:
    from .gateways.base import OrderStore, Reconciler, StatusChecker

log = logging.getLogger("payments")

MSG_COULD_NOT_CHECK = "Could not check payment status."
MSG_UNKNOWN_STATUS = "Unknown payment status."
MSG_COULD_NOT_DETERMINE = "Could not determine payment status."
MSG_UNSUCCESSFUL = "Payment unsuccessful."
MSG_AUTHORISED = "Payment has been authorised."


class Outcome(enum.Enum):
    PAID = "paid"
    DECLINED = "declined"
    HELD_FOR_REVIEW = "held_for_review"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class Reconciliation:
    outcome: Outcome
    notice: str = ""  # shopper-facing error, empty when there is nothing to show


def _decline_note(message: str) -> str:
    note = MSG_UNSUCCESSFUL
    if message:
        note += f"\nError: {message}"
    return note


def _success_note(result: Success) -> str:
    note = MSG_AUTHORISED
    if result.transaction_id:
        note += f"\nTransaction ID: {result.transaction_id}"
    if result.message:
        note += f"\nResponse: {result.message}"
    return note


def reconcile(order, token: str, *, checker: StatusChecker, store: OrderStore) -> Reconciliation:
    if order.is_paid:
        log.info("RECONCILE_ALREADY_PAID order=%s token=%s", order.pk, token)
        return Reconciliation(Outcome.PAID)

    try:
        result = checker.check_status(token)
    except TransportFailure as e:
        log.error("STATUS_CHECK_FAILED order=%s token=%s err=%s", order.pk, token, e)
        store.mark_on_hold(order, MSG_COULD_NOT_CHECK)
        return Reconciliation(Outcome.HELD_FOR_REVIEW, MSG_COULD_NOT_CHECK)

    if isinstance(result, (Error, Declined)):
        note = _decline_note(result.message)
        store.add_note(order, note)
        log.warning("PAYMENT_DECLINED order=%s token=%s msg=%s", order.pk, token, result.message)
        return Reconciliation(Outcome.DECLINED, note)

    if isinstance(result, Success):
        if not store.mark_paid(order, transaction_id=result.transaction_id):
            # lost the race to another callback
            log.info("RECONCILE_ALREADY_PAID order=%s token=%s", order.pk, token)
            return Reconciliation(Outcome.PAID)
        store.add_note(order, _success_note(result))
        log.info("PAYMENT_AUTHORISED order=%s token=%s tx=%s", order.pk, token, result.transaction_id)
        return Reconciliation(Outcome.PAID)

    log.warning("PAYMENT_STATUS_UNKNOWN order=%s token=%s raw=%.200r", order.pk, token, getattr(result, "raw", result))
    store.mark_on_hold(order, MSG_UNKNOWN_STATUS)
    return Reconciliation(Outcome.UNKNOWN, MSG_COULD_NOT_DETERMINE)


def reconcile_callback(order, order_key, token: str, *,
                       reconciler: Reconciler, store: OrderStore) -> Reconciliation:
    """Key check first; a mismatch never reaches the processor or the order."""
    if not store.key_is_valid(order, order_key):
        raise AuthorizationFailure(f"order key mismatch for order {order.pk}")
    return reconciler.reconcile(order, token)
