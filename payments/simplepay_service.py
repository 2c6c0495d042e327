import logging
from dataclasses import dataclass, field
from typing import List, Optional

import requests
from django.conf import settings

from .exceptions import ProcessorDeclined, ProcessorUnknown, TransportFailure
from .status import StatusResult, Unknown, parse_status

log = logging.getLogger("payments")

TOKEN_URL      = "https://simplepays.com/frontend/GenerateToken"
TOKEN_TEST_URL = "https://test.simplepays.com/frontend/GenerateToken"

FORM_URL      = "https://simplepays.com/frontend/widget/v3/widget.js?language=en&style=card"
FORM_TEST_URL = "https://test.simplepays.com/frontend/widget/v3/widget.js?language=en&style=card"

STATUS_URL      = "https://simplepays.com/frontend/GetStatus;jsessionid="
STATUS_TEST_URL = "https://test.simplepays.com/frontend/GetStatus;jsessionid="

BRANDS = {
    "MASTER": "MasterCard",
    "VISA": "Visa",
    "AMEX": "American Express",
    "DINERS": "Diners",
    "JCB": "JCB",
}


@dataclass(frozen=True)
class SimplePayConfig:
    security_sender: str
    transaction_channel: str
    transaction_mode: str
    user_login: str
    user_pwd: str
    payment_type: str
    test_mode: bool = True
    accepted_brands: List[str] = field(default_factory=list)
    token_timeout: int = 60
    status_timeout: int = 30


def get_cfg() -> SimplePayConfig:
    s = ((getattr(settings, "PAYMENTS", {}) or {}).get("SIMPLEPAY") or {})
    brands = [b for b in (s.get("ACCEPTED_BRANDS") or []) if b in BRANDS]
    return SimplePayConfig(
        security_sender=s.get("SECURITY_SENDER", ""),
        transaction_channel=s.get("TRANSACTION_CHANNEL", ""),
        transaction_mode=s.get("TRANSACTION_MODE", ""),
        user_login=s.get("USER_LOGIN", ""),
        user_pwd=s.get("USER_PWD", ""),
        payment_type=s.get("PAYMENT_TYPE", ""),
        test_mode=bool(s.get("TEST_MODE", True)),
        accepted_brands=brands,
        token_timeout=int(s.get("TOKEN_TIMEOUT") or 60),
        status_timeout=int(s.get("STATUS_TIMEOUT") or 30),
    )


def token_url(cfg: Optional[SimplePayConfig] = None) -> str:
    cfg = cfg or get_cfg()
    return TOKEN_TEST_URL if cfg.test_mode else TOKEN_URL


def form_url(cfg: Optional[SimplePayConfig] = None) -> str:
    cfg = cfg or get_cfg()
    return FORM_TEST_URL if cfg.test_mode else FORM_URL


def status_url(token: str, cfg: Optional[SimplePayConfig] = None) -> str:
    cfg = cfg or get_cfg()
    base = STATUS_TEST_URL if cfg.test_mode else STATUS_URL
    return f"{base}{token}"


def _token_payload(cfg: SimplePayConfig, order_id, amount: str, currency: str) -> dict:
    return {
        "SECURITY.SENDER": cfg.security_sender,
        "TRANSACTION.CHANNEL": cfg.transaction_channel,
        "TRANSACTION.MODE": cfg.transaction_mode,
        "USER.LOGIN": cfg.user_login,
        "USER.PWD": cfg.user_pwd,
        "PAYMENT.TYPE": cfg.payment_type,
        "PRESENTATION.AMOUNT": amount,
        "PRESENTATION.CURRENCY": currency,
        "IDENTIFICATION.INVOICEID": str(order_id),
    }


def request_token(*, order_id, amount: str, currency: str,
                  cfg: Optional[SimplePayConfig] = None) -> str:
    """GenerateToken: one form-encoded POST, returns ``transaction.token``."""
    cfg = cfg or get_cfg()
    url = token_url(cfg)
    try:
        r = requests.post(
            url,
            data=_token_payload(cfg, order_id, amount, currency),
            headers={"Content-Type": "application/x-www-form-urlencoded"},
            timeout=cfg.token_timeout,
        )
        r.raise_for_status()
    except requests.RequestException as e:
        raise TransportFailure(f"token request failed: {e}") from e

    try:
        data = r.json()
    except ValueError as e:
        raise ProcessorUnknown("token response is not JSON") from e

    if not isinstance(data, dict):
        raise ProcessorUnknown("token response is not an object")
    if data.get("errorMessage") is not None:
        raise ProcessorDeclined(str(data["errorMessage"]))

    tx = data.get("transaction")
    token = tx.get("token") if isinstance(tx, dict) else None
    if not token:
        raise ProcessorUnknown("token response has no transaction.token")

    log.info("TOKEN_ISSUED order=%s amount=%s %s test=%s", order_id, amount, currency, cfg.test_mode)
    return str(token)


def fetch_status(token: str, cfg: Optional[SimplePayConfig] = None) -> StatusResult:
    """GetStatus for a token. Transport problems raise, body problems do not."""
    cfg = cfg or get_cfg()
    try:
        r = requests.get(status_url(token, cfg), timeout=cfg.status_timeout, allow_redirects=True)
        r.raise_for_status()
    except requests.RequestException as e:
        raise TransportFailure(f"status request failed: {e}") from e

    try:
        data = r.json()
    except ValueError:
        log.warning("STATUS_NOT_JSON token=%s body=%s", token, (r.text or "")[:200])
        return Unknown(raw=r.text)

    return parse_status(data)
