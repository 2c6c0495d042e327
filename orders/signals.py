# orders/signals.py
from django.dispatch import Signal

# Sent once, after commit, when an order first becomes paid.
# kwargs: order, transaction_id
order_paid = Signal()
