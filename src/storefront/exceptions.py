"""Checkout and reconciliation errors that are not plain domain validation.

Input problems are raised as ``protean.exceptions.ValidationError`` and unknown
records as ``protean.exceptions.ObjectNotFoundError``, the same as everywhere
else in the domain. The classes below cover the external gateway and the
partial-failure windows around it.
"""


class CheckoutError(Exception):
    """Base class for checkout and reconciliation failures."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class GatewayError(CheckoutError):
    """The payment gateway could not create or retrieve a session."""


class PersistenceError(CheckoutError):
    """A gateway session exists but the local order could not be stored."""

    def __init__(self, message: str, session_id: str | None = None) -> None:
        super().__init__(message)
        self.session_id = session_id


class AuthenticityError(CheckoutError):
    """A webhook could not be verified as coming from the gateway."""


class PaymentIncompleteError(CheckoutError):
    """The gateway has not (yet) confirmed payment for a session."""

    def __init__(self, message: str, payment_status: str | None = None) -> None:
        super().__init__(message)
        self.payment_status = payment_status
