from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.db import migrations, models

import orders.models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Order",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("order_key", models.CharField(db_index=True, default=orders.models._gen_order_key, editable=False, max_length=32, unique=True)),
                ("total", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal("0.00"))])),
                ("currency", models.CharField(default=orders.models._default_currency, max_length=3)),
                ("status", models.CharField(choices=[("pending", "Pending payment"), ("on-hold", "On hold"), ("processing", "Processing"), ("completed", "Completed"), ("cancelled", "Cancelled"), ("failed", "Failed")], default="pending", max_length=20)),
                ("transaction_id", models.CharField(blank=True, default="", max_length=64)),
                ("paid_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["status"], name="orders_orde_status_c6dd84_idx"),
                    models.Index(fields=["created_at"], name="orders_orde_created_0e92a8_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="OrderNote",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("text", models.TextField()),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("order", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="notes", to="orders.order")),
            ],
            options={
                "ordering": ["created_at", "id"],
            },
        ),
    ]
