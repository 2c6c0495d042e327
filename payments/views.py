# payments/views.py
# -*- coding: utf-8 -*-
from __future__ import annotations

import logging
from urllib.parse import urlencode

from django.contrib import messages
from django.http import Http404, HttpResponseBadRequest, HttpResponseForbidden
from django.urls import reverse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET
from rest_framework import permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from orders.models import Order
from orders.store import order_store
from orders.views import load_order_for_key

from .exceptions import AuthorizationFailure
from .gateways import get_gateway
from .models import PaymentToken
from .reconciliation import reconcile_callback
from .redirects import redirect_for
from .serializers import CallbackSerializer, CheckoutSerializer

log = logging.getLogger("payments")

MSG_CANNOT_CONNECT = "Could not connect to payment gateway."
MSG_PAY_INTRO = "Thank you for your order, please use the form below to pay for your order."


# ───────────────────────── Helpers ─────────────────────────
def _cannot_connect(request, order):
    messages.error(request, MSG_CANNOT_CONNECT, fail_silently=True)
    return Response(
        {"detail": MSG_CANNOT_CONNECT, "retry_url": order_store.pay_page_url(order)},
        status=status.HTTP_502_BAD_GATEWAY,
    )


def _callback_url(request, order) -> str:
    """Where the hosted form sends the shopper back; SimplePay appends the token."""
    base = request.build_absolute_uri(reverse("payments:callback"))
    return f"{base}?{urlencode({'order_id': order.pk, 'order_key': order.order_key})}"


# ─────────────────── Checkout (process payment) ───────────────────

class CheckoutView(APIView):
    permission_classes = [permissions.AllowAny]

    def post(self, request, order_id):
        ser = CheckoutSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        order, err = load_order_for_key(order_id, ser.validated_data["order_key"])
        if err:
            return err

        if not order.needs_payment:
            return Response(
                {"detail": f"order does not need payment (status: {order.status})"},
                status=status.HTTP_409_CONFLICT,
            )

        gateway = get_gateway()
        token = gateway.issue_token(order)
        if token is None:
            return _cannot_connect(request._request, order)

        PaymentToken.remember(order, token)
        log.info("CHECKOUT order=%s gateway=%s", order.pk, gateway.name)

        return Response({"result": "success", "redirect": order_store.pay_page_url(order)})


# ─────────────────── Pay page ───────────────────

class PayPageView(APIView):
    """Everything the frontend needs to embed the SimplePay widget."""

    permission_classes = [permissions.AllowAny]

    def get(self, request, order_id):
        order, err = load_order_for_key(order_id, request.GET.get("key"))
        if err:
            return err

        if order.is_paid:
            return Response({"already_paid": True, "redirect_url": order_store.return_url(order)})

        if not order.needs_payment:
            return Response(
                {"detail": f"order does not need payment (status: {order.status})"},
                status=status.HTTP_409_CONFLICT,
            )

        gateway = get_gateway()

        token = PaymentToken.take(order)
        if token is None:
            log.info("PAY_PAGE_NEW_TOKEN order=%s", order.pk)
            token = gateway.issue_token(order)
            if token is None:
                return _cannot_connect(request._request, order)

        return Response(
            {
                "order_id": order.pk,
                "total": order.amount_str,
                "currency": order.currency,
                "form_url": gateway.form_url(),
                "token": token,
                "action_url": _callback_url(request, order),
                "accepted_brands": gateway.accepted_brands,
                "cancel_url": order_store.cancel_url(order),
                "message": MSG_PAY_INTRO,
            }
        )


# ─────────────────── Callback ───────────────────

@csrf_exempt
@require_GET
def payment_callback(request):
    ser = CallbackSerializer(data=request.GET)
    if not ser.is_valid():
        log.warning("CALLBACK_INVALID qs=%s errors=%s", dict(request.GET.lists()), ser.errors)
        return HttpResponseBadRequest("Invalid response.")

    data = ser.validated_data
    token, order_id, order_key = data["token"], data["order_id"], data["order_key"]

    try:
        order = order_store.load(order_id)
    except Order.DoesNotExist:
        log.warning("CALLBACK_UNKNOWN_ORDER order=%s token=%s", order_id, token)
        raise Http404("Order not found")

    log.info("CALLBACK_IN order=%s token=%s status=%s", order.pk, token, order.status)

    try:
        rec = reconcile_callback(
            order, order_key, token,
            reconciler=get_gateway(store=order_store),
            store=order_store,
        )
    except AuthorizationFailure as e:
        log.warning("CALLBACK_UNAUTHORISED order=%s err=%s", order.pk, e)
        return HttpResponseForbidden("Invalid order key.")

    if rec.notice:
        messages.error(request, rec.notice, fail_silently=True)

    log.info("CALLBACK_DONE order=%s outcome=%s", order.pk, rec.outcome.value)
    return redirect_for(rec.outcome, order, order_store)
