"""Webhook intake: the push half of payment reconciliation.

Every notification is verified against STRIPE_WEBHOOK_SECRET before anything
is read from it. With no secret configured the endpoint rejects everything.
"""

from collections import Counter

from protean.exceptions import ObjectNotFoundError

from storefront.config import get_settings
from storefront.domain import logger
from storefront.exceptions import AuthenticityError
from storefront.gateway import get_gateway
from storefront.gateway.port import FAILURE_EVENTS, SESSION_EXPIRED, SUCCESS_EVENTS
from storefront.reconciliation.settlement import settle_failure, settle_success
from storefront.utils.logging import checkout_context

ACKNOWLEDGED = {"received": True}

# Webhook outcomes since process start, reported on /health
_outcomes: Counter = Counter()


def webhook_counts() -> dict[str, int]:
    return dict(_outcomes)


def reset_webhook_counts() -> None:
    _outcomes.clear()


def handle_webhook(payload: bytes, signature: str | None) -> dict:
    """Verify a gateway notification and apply it to the matching order.

    Raises AuthenticityError when the notification cannot be verified. Event
    types that carry no payment outcome, and sessions with no local order, are
    acknowledged without changing anything.
    """
    secret = get_settings().webhook_secret
    if not secret:
        _outcomes["rejected"] += 1
        logger.error("Webhook rejected: STRIPE_WEBHOOK_SECRET is not configured")
        raise AuthenticityError("Webhook secret is not configured")
    if not signature:
        _outcomes["rejected"] += 1
        logger.warning("Webhook rejected: missing signature header")
        raise AuthenticityError("Missing webhook signature")

    try:
        event = get_gateway().verify_webhook(payload, signature, secret)
    except AuthenticityError:
        _outcomes["rejected"] += 1
        raise
    log = logger.bind(event_id=event.id, event_type=event.type, session_id=event.session_id)

    if event.type not in SUCCESS_EVENTS and event.type not in FAILURE_EVENTS:
        _outcomes["ignored"] += 1
        log.info("Webhook event ignored")
        return ACKNOWLEDGED
    if not event.session_id:
        _outcomes["missing_session"] += 1
        log.warning("Webhook event carries no session id")
        return ACKNOWLEDGED

    identity = event.metadata.get("identity")
    try:
        with checkout_context(session_id=event.session_id, identity=identity, event_id=event.id):
            if event.type in SUCCESS_EVENTS:
                settle_success(event.session_id, payment_ref=event.payment_intent_id, identity=identity)
            else:
                reason = "Checkout session expired" if event.type == SESSION_EXPIRED else "Payment failed"
                settle_failure(event.session_id, reason=reason)
    except ObjectNotFoundError:
        _outcomes["unmatched_session"] += 1
        log.warning(
            "Webhook for unknown checkout session",
            unmatched_session=True,
            unmatched_total=_outcomes["unmatched_session"],
        )
        return ACKNOWLEDGED

    _outcomes["settled"] += 1
    return ACKNOWLEDGED
