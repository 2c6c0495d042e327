# payments/status.py
"""
Parsed SimplePay status responses.

``parse_status`` turns the JSON body of a GetStatus call into exactly one
of four variants. Precedence is fixed: ``errorMessage`` wins over the
processing result, and NOK is checked before ACK.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

RESULT_ACK = "ACK"
RESULT_NOK = "NOK"


@dataclass(frozen=True)
class Error:
    message: str


@dataclass(frozen=True)
class Success:
    transaction_id: str
    message: str


@dataclass(frozen=True)
class Declined:
    message: str


@dataclass(frozen=True)
class Unknown:
    raw: Any


StatusResult = Union[Error, Success, Declined, Unknown]


def _dig(data, *path):
    cur = data
    for key in path:
        if not isinstance(cur, dict):
            return None
        cur = cur.get(key)
    return cur


def _text(v) -> str:
    return "" if v is None else str(v)


def parse_status(payload) -> StatusResult:
    if not isinstance(payload, dict):
        return Unknown(raw=payload)

    if payload.get("errorMessage") is not None:
        return Error(message=_text(payload["errorMessage"]))

    result = _dig(payload, "transaction", "processing", "result")
    message = _text(_dig(payload, "transaction", "processing", "return", "message"))

    if result == RESULT_NOK:
        return Declined(message=message)

    if result == RESULT_ACK:
        return Success(
            transaction_id=_text(_dig(payload, "transaction", "identification", "uniqueId")),
            message=message,
        )

    return Unknown(raw=payload)
