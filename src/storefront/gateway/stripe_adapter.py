"""Stripe payment gateway adapter.

Uses the stripe-python SDK to:
- Create hosted Checkout Sessions in ``payment`` mode
- Retrieve a session to confirm its payment status
- Verify webhook signatures using Stripe's signing secret
"""

import stripe
import structlog

from storefront.exceptions import AuthenticityError, GatewayError
from storefront.gateway.port import CheckoutSession, PaymentGateway, SessionLineItem, WebhookEvent

logger = structlog.get_logger(__name__)


def _plain_dict(value) -> dict[str, str]:
    if not value:
        return {}
    if hasattr(value, "to_dict"):
        value = value.to_dict()
    return {str(key): str(val) for key, val in dict(value).items()}


def _identifier(value) -> str | None:
    """Return the id of a possibly-expanded Stripe reference."""
    if value is None or isinstance(value, str):
        return value
    return getattr(value, "id", None)


class StripeGateway(PaymentGateway):
    """Production Stripe gateway adapter."""

    def __init__(self, api_key: str) -> None:
        if not api_key:
            raise ValueError("StripeGateway requires a secret API key")
        self.api_key = api_key

    def create_checkout_session(
        self,
        line_items: list[SessionLineItem],
        customer_email: str,
        success_url: str,
        cancel_url: str,
        metadata: dict[str, str],
        currency: str = "usd",
    ) -> CheckoutSession:
        try:
            session = stripe.checkout.Session.create(
                api_key=self.api_key,
                payment_method_types=["card"],
                mode="payment",
                line_items=[self._line_item(item, currency) for item in line_items],
                customer_email=customer_email,
                success_url=success_url,
                cancel_url=cancel_url,
                metadata=metadata,
            )
        except stripe.StripeError as exc:
            logger.error("Stripe checkout session creation failed", error=str(exc), error_type=type(exc).__name__)
            raise GatewayError(f"Failed to create checkout session: {exc}") from exc

        return self._to_session(session)

    def retrieve_checkout_session(self, session_id: str) -> CheckoutSession:
        try:
            session = stripe.checkout.Session.retrieve(session_id, api_key=self.api_key)
        except stripe.StripeError as exc:
            logger.error("Stripe checkout session retrieval failed", session_id=session_id, error=str(exc))
            raise GatewayError(f"Failed to retrieve checkout session {session_id}: {exc}") from exc

        return self._to_session(session)

    def verify_webhook(self, payload: bytes, signature: str, secret: str) -> WebhookEvent:
        if not secret:
            raise AuthenticityError("Webhook secret not configured")
        if not signature:
            raise AuthenticityError("Missing webhook signature")

        try:
            event = stripe.Webhook.construct_event(payload, signature, secret)
        except stripe.SignatureVerificationError as exc:
            raise AuthenticityError(f"Webhook signature verification failed: {exc}") from exc
        except ValueError as exc:
            raise AuthenticityError(f"Malformed webhook payload: {exc}") from exc

        session = event.data.object
        return WebhookEvent(
            id=event.id,
            type=event.type,
            session_id=getattr(session, "id", None),
            payment_intent_id=_identifier(getattr(session, "payment_intent", None)),
            metadata=_plain_dict(getattr(session, "metadata", None)),
        )

    @staticmethod
    def _line_item(item: SessionLineItem, currency: str) -> dict:
        product_data = {"name": item.name}
        if item.image:
            product_data["images"] = [item.image]
        return {
            "price_data": {
                "currency": currency,
                "product_data": product_data,
                "unit_amount": item.unit_amount,
            },
            "quantity": item.quantity,
        }

    @staticmethod
    def _to_session(session) -> CheckoutSession:
        return CheckoutSession(
            id=session.id,
            url=getattr(session, "url", None),
            payment_intent_id=_identifier(getattr(session, "payment_intent", None)),
            payment_status=getattr(session, "payment_status", None) or "unpaid",
            metadata=_plain_dict(getattr(session, "metadata", None)),
        )
