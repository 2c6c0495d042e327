# payments/redirects.py
from django.http import HttpResponseRedirect

from .reconciliation import Outcome

# outcome -> store method producing the target URL
_TARGETS = {
    Outcome.PAID: "return_url",
    Outcome.HELD_FOR_REVIEW: "return_url",
    Outcome.UNKNOWN: "return_url",
    Outcome.DECLINED: "pay_page_url",
}


def target_for(outcome: Outcome, order, store) -> str:
    return getattr(store, _TARGETS[outcome])(order)


def redirect_for(outcome: Outcome, order, store) -> HttpResponseRedirect:
    return HttpResponseRedirect(target_for(outcome, order, store))
