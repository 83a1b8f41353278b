"""Configurable fake payment gateway for development and testing.

This adapter simulates a hosted checkout provider without any external calls.
Sessions live in memory, their payment status can be moved by hand, and
webhook payloads are signed with an HMAC of the shared secret, so the full
checkout → redirect → webhook/poll loop can be exercised locally.

Follows the shape of Stripe's checkout sessions and events but keeps only the
fields the storefront reads.
"""

import hashlib
import hmac
import json
from uuid import uuid4

from storefront.exceptions import AuthenticityError, GatewayError
from storefront.gateway.port import CheckoutSession, PaymentGateway, SessionLineItem, WebhookEvent


def compute_signature(payload: bytes, secret: str) -> str:
    """Signature the fake gateway expects for ``payload`` under ``secret``."""
    return hmac.new(secret.encode("utf-8"), payload, hashlib.sha256).hexdigest()


class FakeGateway(PaymentGateway):
    """Configurable fake payment gateway."""

    def __init__(self, base_url: str = "https://checkout.fake-gateway.test") -> None:
        self.base_url = base_url
        self.should_succeed: bool = True
        self.failure_reason: str = "Gateway unavailable"
        self.sessions: dict[str, CheckoutSession] = {}
        self.calls: list[dict] = []

    def configure(self, should_succeed: bool, failure_reason: str = "Gateway unavailable") -> None:
        """Configure gateway behavior at runtime."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def create_checkout_session(
        self,
        line_items: list[SessionLineItem],
        customer_email: str,
        success_url: str,
        cancel_url: str,
        metadata: dict[str, str],
        currency: str = "usd",
    ) -> CheckoutSession:
        self.calls.append(
            {
                "method": "create_checkout_session",
                "line_items": list(line_items),
                "customer_email": customer_email,
                "success_url": success_url,
                "cancel_url": cancel_url,
                "metadata": dict(metadata),
                "currency": currency,
            }
        )
        if not self.should_succeed:
            raise GatewayError(self.failure_reason)

        session_id = f"cs_test_{uuid4().hex[:24]}"
        session = CheckoutSession(
            id=session_id,
            url=f"{self.base_url}/pay/{session_id}",
            payment_intent_id=None,
            payment_status="unpaid",
            metadata=dict(metadata),
        )
        self.sessions[session_id] = session
        return session

    def retrieve_checkout_session(self, session_id: str) -> CheckoutSession:
        self.calls.append({"method": "retrieve_checkout_session", "session_id": session_id})
        if not self.should_succeed:
            raise GatewayError(self.failure_reason)

        session = self.sessions.get(session_id)
        if session is None:
            raise GatewayError(f"No such checkout session: {session_id}")
        return session

    def verify_webhook(self, payload: bytes, signature: str, secret: str) -> WebhookEvent:
        self.calls.append({"method": "verify_webhook", "signature": signature})
        if not secret:
            raise AuthenticityError("Webhook secret not configured")
        if not signature or not hmac.compare_digest(signature, compute_signature(payload, secret)):
            raise AuthenticityError("Webhook signature verification failed")

        try:
            body = json.loads(payload)
            session = body["data"]["object"]
        except (ValueError, KeyError, TypeError) as exc:
            raise AuthenticityError(f"Malformed webhook payload: {exc}") from exc

        return WebhookEvent(
            id=body.get("id", ""),
            type=body.get("type", ""),
            session_id=session.get("id"),
            payment_intent_id=session.get("payment_intent"),
            metadata=dict(session.get("metadata") or {}),
        )

    # -------------------------------------------------------------------
    # Simulation helpers
    # -------------------------------------------------------------------
    def complete_payment(self, session_id: str, payment_intent_id: str | None = None) -> CheckoutSession:
        """Mark a session as paid, as if the customer finished the hosted page."""
        return self.set_payment_status(session_id, "paid", payment_intent_id or f"pi_test_{uuid4().hex[:24]}")

    def set_payment_status(
        self,
        session_id: str,
        payment_status: str,
        payment_intent_id: str | None = None,
    ) -> CheckoutSession:
        current = self.sessions.get(session_id)
        if current is None:
            raise GatewayError(f"No such checkout session: {session_id}")
        updated = CheckoutSession(
            id=current.id,
            url=current.url,
            payment_intent_id=payment_intent_id or current.payment_intent_id,
            payment_status=payment_status,
            metadata=current.metadata,
        )
        self.sessions[session_id] = updated
        return updated

    def webhook_payload(self, event_type: str, session_id: str) -> bytes:
        """Serialize a gateway event about ``session_id`` the way the gateway would send it."""
        session = self.sessions[session_id]
        body = {
            "id": f"evt_test_{uuid4().hex[:24]}",
            "type": event_type,
            "data": {
                "object": {
                    "id": session.id,
                    "object": "checkout.session",
                    "payment_intent": session.payment_intent_id,
                    "payment_status": session.payment_status,
                    "metadata": session.metadata,
                }
            },
        }
        return json.dumps(body).encode("utf-8")
