# -*- coding: utf-8 -*-
from rest_framework import serializers


class CheckoutSerializer(serializers.Serializer):
    order_key = serializers.CharField(max_length=64)


class CallbackSerializer(serializers.Serializer):
    """Query string SimplePay sends the shopper back with."""

    token = serializers.CharField(max_length=128)
    order_id = serializers.CharField(max_length=32)
    order_key = serializers.CharField(max_length=64)
