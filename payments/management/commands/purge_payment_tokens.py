from django.core.management.base import BaseCommand
from payments.models import PaymentToken


class Command(BaseCommand):
    help = "Delete expired SimplePay payment tokens"

    def handle(self, *args, **kwargs):
        count = PaymentToken.purge_expired()
        self.stdout.write(self.style.SUCCESS(f"{count} expired token(s) deleted."))
