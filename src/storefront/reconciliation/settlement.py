"""Settlement: applies a payment outcome to an order, then to the cart.

Webhook and status-poll signals both end up here, so they share one terminal
state guard and one cart-clearing rule:

* the order transition is a conditional write against the stored aggregate;
  a concurrent writer surfaces as ExpectedVersionError and the transition is
  re-read and re-applied, so the first terminal state persisted wins;
* the cart is cleared only by the signal that moved the order to SUCCESSFUL,
  and only after that state is stored. Later duplicates of a success signal
  leave the cart alone, so a cart refilled after paying survives them.
"""

from dataclasses import dataclass

from protean.exceptions import ExpectedVersionError
from protean.utils.globals import current_domain

from storefront.cart.store import get_cart_store
from storefront.domain import logger
from storefront.order.order import Order, PaymentStatus
from storefront.order.payment import RecordPaymentFailure, RecordPaymentSuccess

MAX_TRANSITION_ATTEMPTS = 3


@dataclass(frozen=True)
class Settlement:
    order: Order
    applied: bool
    cart_cleared: bool = False


def _transition(command) -> bool:
    for attempt in range(1, MAX_TRANSITION_ATTEMPTS + 1):
        try:
            return bool(current_domain.process(command, asynchronous=False))
        except ExpectedVersionError:
            logger.warning(
                "Order changed concurrently, re-applying payment outcome",
                session_id=command.session_id,
                attempt=attempt,
            )
            if attempt == MAX_TRANSITION_ATTEMPTS:
                raise
    return False


def settle_success(session_id: str, payment_ref: str | None, identity: str | None) -> Settlement:
    """Move the order for ``session_id`` to SUCCESSFUL and, on that transition, clear the payer's cart.

    Raises ObjectNotFoundError when no order exists for the session.
    """
    applied = _transition(RecordPaymentSuccess(session_id=session_id, payment_ref=payment_ref))
    order = current_domain.repository_for(Order).get_by_session_id(session_id)

    if order.payment_status != PaymentStatus.SUCCESSFUL.value:
        logger.warning(
            "Payment confirmed for an order that already failed",
            session_id=session_id,
            order_id=str(order.id),
        )
        return Settlement(order=order, applied=applied)

    cart_cleared = False
    if applied and identity:
        cart_cleared = get_cart_store().clear_cart(identity)

    logger.info(
        "Order payment settled",
        session_id=session_id,
        order_id=str(order.id),
        applied=applied,
        cart_cleared=cart_cleared,
    )
    return Settlement(order=order, applied=applied, cart_cleared=cart_cleared)


def settle_failure(session_id: str, reason: str) -> Settlement:
    """Move the order for ``session_id`` to FAILED. The cart is kept for a retry."""
    applied = _transition(RecordPaymentFailure(session_id=session_id, reason=reason))
    order = current_domain.repository_for(Order).get_by_session_id(session_id)

    logger.info(
        "Order payment failure recorded",
        session_id=session_id,
        order_id=str(order.id),
        applied=applied,
        payment_status=order.payment_status,
    )
    return Settlement(order=order, applied=applied)
