# payments/exceptions.py


class PaymentError(Exception):
    """Base class for SimplePay integration errors."""


class TransportFailure(PaymentError):
    """The processor could not be reached, timed out or answered non-2xx."""


class AuthorizationFailure(PaymentError):
    """Callback order key does not match the stored order key."""


class ProcessorDeclined(PaymentError):
    """The processor explicitly refused the request (errorMessage / NOK)."""


class ProcessorUnknown(PaymentError):
    """The processor answered with a shape we cannot interpret."""
