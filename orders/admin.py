from django.contrib import admin
from .models import Order, OrderNote


class OrderNoteInline(admin.TabularInline):
    model = OrderNote
    extra = 0
    readonly_fields = ("text", "created_at")


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ("id", "total", "currency", "status", "transaction_id", "paid_at", "created_at")
    list_filter = ("status", "currency", "created_at")
    search_fields = ("id", "order_key", "transaction_id")
    readonly_fields = ("order_key", "paid_at", "created_at", "updated_at")
    ordering = ("-created_at",)
    list_per_page = 50
    inlines = [OrderNoteInline]
