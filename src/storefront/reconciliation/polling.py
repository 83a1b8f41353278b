"""Status poll: the pull half of payment reconciliation, plus the order lookup.

The client calls this after the gateway redirects it back. A poll can confirm a
payment but never fails an order: an unpaid session may still be paid later,
and failure is only ever learned from the gateway's own notifications.
"""

from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from storefront.domain import logger
from storefront.exceptions import PaymentIncompleteError
from storefront.gateway import get_gateway
from storefront.order.order import Order
from storefront.reconciliation.settlement import settle_success
from storefront.utils.logging import checkout_context


def confirm_by_polling(session_id: str) -> Order:
    if not session_id:
        raise ValidationError({"session_id": ["Session ID is required"]})

    session = get_gateway().retrieve_checkout_session(session_id)
    if not session.is_paid:
        logger.info(
            "Poll found session not yet paid",
            session_id=session_id,
            payment_status=session.payment_status,
        )
        raise PaymentIncompleteError(
            f"Payment not completed (status: {session.payment_status})",
            payment_status=session.payment_status,
        )

    identity = session.metadata.get("identity")
    with checkout_context(session_id=session_id, identity=identity):
        settlement = settle_success(session_id, payment_ref=session.payment_intent_id, identity=identity)
    return settlement.order


def get_order_by_session(session_id: str) -> Order:
    """Raises ObjectNotFoundError when no order exists for the session."""
    return current_domain.repository_for(Order).get_by_session_id(session_id)
