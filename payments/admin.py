from django.contrib import admin
from .models import PaymentToken


@admin.register(PaymentToken)
class PaymentTokenAdmin(admin.ModelAdmin):
    list_display = ("order", "expires_at", "created_at")
    list_filter = ("expires_at", "created_at")
    search_fields = ("order__id", "token")
    readonly_fields = ("created_at",)
    ordering = ("-created_at",)
    list_per_page = 50
