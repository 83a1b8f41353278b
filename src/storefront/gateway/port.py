"""Payment gateway port (abstract interface).

Defines the three operations checkout relies on: opening a hosted checkout
session, retrieving its live state, and verifying webhook notifications.
This enables swapping between FakeGateway (dev/test) and StripeGateway
(production) without changing any domain or application code.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

# Gateway payment_status value that proves money was captured
PAID = "paid"

# Webhook event types the reconciliation engine acts on
SESSION_COMPLETED = "checkout.session.completed"
SESSION_ASYNC_PAYMENT_SUCCEEDED = "checkout.session.async_payment_succeeded"
SESSION_ASYNC_PAYMENT_FAILED = "checkout.session.async_payment_failed"
SESSION_EXPIRED = "checkout.session.expired"

SUCCESS_EVENTS = frozenset({SESSION_COMPLETED, SESSION_ASYNC_PAYMENT_SUCCEEDED})
FAILURE_EVENTS = frozenset({SESSION_ASYNC_PAYMENT_FAILED, SESSION_EXPIRED})


@dataclass(frozen=True)
class SessionLineItem:
    """One line of a hosted checkout session, priced in the smallest currency unit."""

    name: str
    unit_amount: int
    quantity: int
    image: str | None = None


@dataclass(frozen=True)
class CheckoutSession:
    """Observable state of a hosted checkout session."""

    id: str
    url: str | None = None
    payment_intent_id: str | None = None
    payment_status: str = "unpaid"
    metadata: dict[str, str] = field(default_factory=dict)

    @property
    def is_paid(self) -> bool:
        return self.payment_status == PAID


@dataclass(frozen=True)
class WebhookEvent:
    """A verified gateway notification about a checkout session."""

    id: str
    type: str
    session_id: str | None
    payment_intent_id: str | None = None
    metadata: dict[str, str] = field(default_factory=dict)


class PaymentGateway(ABC):
    """Abstract payment gateway interface."""

    @abstractmethod
    def create_checkout_session(
        self,
        line_items: list[SessionLineItem],
        customer_email: str,
        success_url: str,
        cancel_url: str,
        metadata: dict[str, str],
        currency: str = "usd",
    ) -> CheckoutSession:
        """Open a hosted single-payment session. Raises GatewayError on failure."""
        ...

    @abstractmethod
    def retrieve_checkout_session(self, session_id: str) -> CheckoutSession:
        """Fetch the live state of a session. Raises GatewayError on failure."""
        ...

    @abstractmethod
    def verify_webhook(self, payload: bytes, signature: str, secret: str) -> WebhookEvent:
        """Verify and decode a webhook payload. Raises AuthenticityError if not authentic."""
        ...
