"""Checkout orchestration: cart to hosted payment session to pending order.

Sequence:
    1. Read the shopper's cart and validate the input (no gateway call yet)
    2. Open a hosted checkout session with the gateway
    3. Record a PENDING order keyed by the session id

The cart is left as it is. It is cleared by reconciliation, once the payment
behind the session has been confirmed.
"""

import json
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from storefront.cart.cart import GUEST
from storefront.cart.store import CartLine, get_cart_store
from storefront.config import get_settings
from storefront.domain import logger
from storefront.exceptions import PersistenceError
from storefront.gateway import get_gateway
from storefront.gateway.port import SessionLineItem
from storefront.order.order import PAYMENT_REF_PLACEHOLDER, normalize_email
from storefront.order.placement import PlaceOrder
from storefront.utils.logging import checkout_context


@dataclass(frozen=True)
class CheckoutResult:
    session_id: str
    redirect_url: str | None
    order_id: str


def to_minor_units(amount: float) -> int:
    """Price in cents, rounded half-up."""
    return int((Decimal(str(amount)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _session_line_item(line: CartLine) -> SessionLineItem:
    return SessionLineItem(
        name=line.name,
        unit_amount=to_minor_units(line.unit_price),
        quantity=line.quantity,
        image=line.image,
    )


def begin_checkout(identity: str, contact_email: str) -> CheckoutResult:
    """Open a payment session for the identity's cart and record a pending order.

    Raises:
        ValidationError: the email is missing or the cart is empty
        GatewayError: the gateway could not open a session
        PersistenceError: the session was opened but the order was not stored
    """
    identity = identity or GUEST
    email = normalize_email(contact_email)
    if not email:
        raise ValidationError({"contact_email": ["Email is required for checkout"]})

    lines = get_cart_store().get_cart(identity)
    if not lines:
        raise ValidationError({"cart": ["Cart is empty"]})
    for line in lines:
        if line.quantity < 1:
            raise ValidationError({"quantity": [f"Invalid quantity for {line.name}"]})

    settings = get_settings()
    session = get_gateway().create_checkout_session(
        line_items=[_session_line_item(line) for line in lines],
        customer_email=email,
        success_url=settings.success_url,
        cancel_url=settings.cancel_url,
        metadata={"identity": identity, "contact_email": email},
        currency=settings.currency,
    )
    logger.info("Checkout session created", session_id=session.id, identity=identity, line_count=len(lines))

    order_lines = [
        {
            "product_ref": line.product_id,
            "name": line.name,
            "unit_price": line.unit_price,
            "quantity": line.quantity,
        }
        for line in lines
    ]
    command = PlaceOrder(
        owner_identity=None if identity == GUEST else identity,
        contact_email=email,
        line_items=json.dumps(order_lines),
        external_session_ref=session.id,
        external_payment_ref=session.payment_intent_id or PAYMENT_REF_PLACEHOLDER,
    )
    try:
        with checkout_context(session_id=session.id, identity=identity):
            order_id = current_domain.process(command, asynchronous=False)
    except Exception as exc:
        # The gateway session now has no local order; reconciliation will not find it
        logger.error(
            "Orphaned checkout session: order could not be stored",
            session_id=session.id,
            identity=identity,
            error=str(exc),
        )
        raise PersistenceError("Failed to store order for checkout session", session_id=session.id) from exc

    logger.info("Pending order recorded", order_id=order_id, session_id=session.id)
    return CheckoutResult(session_id=session.id, redirect_url=session.url, order_id=order_id)
