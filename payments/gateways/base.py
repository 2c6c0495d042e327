# payments/gateways/base.py
from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ..reconciliation import Reconciliation
    from ..status import StatusResult


@runtime_checkable
class TokenIssuer(Protocol):
    def issue_token(self, order) -> Optional[str]:
        """Payment token for the order, or None if the processor could not be used.
        Never raises."""
        ...


@runtime_checkable
class StatusChecker(Protocol):
    def check_status(self, token: str) -> "StatusResult":
        """Raises TransportFailure when the processor cannot be reached."""
        ...


@runtime_checkable
class Reconciler(Protocol):
    def reconcile(self, order, token: str) -> "Reconciliation":
        ...


@runtime_checkable
class OrderStore(Protocol):
    def load(self, order_id) -> Any: ...

    def mark_on_hold(self, order, reason: str) -> None: ...

    def mark_paid(self, order, transaction_id: str = "") -> bool: ...

    def add_note(self, order, text: str) -> None: ...

    def key_is_valid(self, order, key) -> bool: ...

    def cancel_url(self, order) -> str: ...

    def return_url(self, order) -> str: ...

    def pay_page_url(self, order) -> str: ...
