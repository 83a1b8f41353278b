"""Order aggregate: the ledger entry for one checkout.

An order is recorded the moment a hosted payment session is opened. It
snapshots the cart lines and the total at that instant; neither changes
afterwards, whatever happens to catalogue prices.

Payment State Machine:
    PENDING → SUCCESSFUL   (webhook "session completed" or a paid status poll)
    PENDING → FAILED       (webhook "payment failed" / "session expired")

SUCCESSFUL and FAILED are terminal. A reconciliation signal that arrives for
an order already in a terminal state is a no-op, not an error.
"""

from datetime import UTC, datetime
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Integer, String, ValueObject

from storefront.domain import storefront
from storefront.order.events import OrderPaymentConfirmed, OrderPaymentFailed, OrderPlaced

# Stored until the gateway reports the payment intent behind a session
PAYMENT_REF_PLACEHOLDER = "pending"

_CENTS = Decimal("0.01")


class PaymentStatus(Enum):
    PENDING = "pending"
    SUCCESSFUL = "successful"
    FAILED = "failed"


_VALID_TRANSITIONS = {
    PaymentStatus.PENDING: {PaymentStatus.SUCCESSFUL, PaymentStatus.FAILED},
    PaymentStatus.SUCCESSFUL: set(),  # Terminal
    PaymentStatus.FAILED: set(),  # Terminal
}


def normalize_email(email):
    return (email or "").strip().lower()


def order_total(lines) -> float:
    """Sum of unit_price × quantity over line dicts, rounded to cents."""
    total = sum(
        (Decimal(str(line["unit_price"])) * int(line["quantity"]) for line in lines),
        Decimal("0"),
    )
    return float(total.quantize(_CENTS, rounding=ROUND_HALF_UP))


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@storefront.value_object(part_of="Order")
class ShippingAddress:
    name = String(max_length=200)
    address = String(max_length=255)
    city = String(max_length=100)
    postal_code = String(max_length=20)
    country = String(max_length=100)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@storefront.entity(part_of="Order")
class OrderLine:
    """A cart line as it was at checkout."""

    product_ref = String(required=True, max_length=255)
    name = String(required=True, max_length=200)
    unit_price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=1)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@storefront.aggregate
class Order:
    owner_identity = String(max_length=255)  # None for guest checkout
    contact_email = String(required=True, max_length=254)
    line_items = HasMany(OrderLine)
    total_amount = Float(required=True, min_value=0.0)
    payment_status = String(
        max_length=20,
        choices=PaymentStatus,
        default=PaymentStatus.PENDING.value,
    )
    external_session_ref = String(required=True, max_length=255, unique=True)
    external_payment_ref = String(required=True, max_length=255, default=PAYMENT_REF_PLACEHOLDER)
    failure_reason = String(max_length=500)
    shipping_address = ValueObject(ShippingAddress)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def contact_email_must_be_normalized(self):
        if self.contact_email and self.contact_email != normalize_email(self.contact_email):
            raise ValidationError({"contact_email": ["Contact email must be trimmed and lowercase"]})

    @invariant.post
    def settled_order_must_carry_payment_reference(self):
        if self.payment_status == PaymentStatus.SUCCESSFUL.value and not self.external_payment_ref:
            raise ValidationError({"external_payment_ref": ["A successful order must reference its payment"]})

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        contact_email,
        line_items,
        external_session_ref,
        owner_identity=None,
        external_payment_ref=None,
    ):
        """Record a pending order for a newly opened payment session.

        ``line_items`` is a list of dicts with product_ref, name, unit_price
        and quantity. The total is computed here, once.
        """
        email = normalize_email(contact_email)
        if not email:
            raise ValidationError({"contact_email": ["Email is required for checkout"]})
        if not line_items:
            raise ValidationError({"line_items": ["Cannot place an order for an empty cart"]})
        for line in line_items:
            if int(line["quantity"]) < 1:
                raise ValidationError({"quantity": ["Quantity must be greater than 0"]})

        now = datetime.now(UTC)
        order = cls(
            owner_identity=owner_identity,
            contact_email=email,
            total_amount=order_total(line_items),
            payment_status=PaymentStatus.PENDING.value,
            external_session_ref=external_session_ref,
            external_payment_ref=external_payment_ref or PAYMENT_REF_PLACEHOLDER,
            created_at=now,
            updated_at=now,
        )
        for line in line_items:
            order.add_line_items(
                OrderLine(
                    product_ref=str(line["product_ref"]),
                    name=line["name"],
                    unit_price=float(line["unit_price"]),
                    quantity=int(line["quantity"]),
                )
            )

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                owner_identity=owner_identity,
                contact_email=email,
                external_session_ref=external_session_ref,
                total_amount=order.total_amount,
                item_count=sum(int(line["quantity"]) for line in line_items),
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # State transition helpers
    # -------------------------------------------------------------------
    def current_status(self) -> PaymentStatus:
        return PaymentStatus(self.payment_status)

    def is_settled(self) -> bool:
        """True once the order reached a terminal payment state."""
        return not _VALID_TRANSITIONS[self.current_status()]

    def can_transition_to(self, target_status: PaymentStatus) -> bool:
        return target_status in _VALID_TRANSITIONS.get(self.current_status(), set())

    # -------------------------------------------------------------------
    # Payment outcome
    # -------------------------------------------------------------------
    def mark_successful(self, payment_ref: str | None = None) -> bool:
        """Record a confirmed payment. Returns False if the order was already settled."""
        if not self.can_transition_to(PaymentStatus.SUCCESSFUL):
            return False

        now = datetime.now(UTC)
        with atomic_change(self):
            self.payment_status = PaymentStatus.SUCCESSFUL.value
            if payment_ref:
                self.external_payment_ref = payment_ref
            self.updated_at = now

        self.raise_(
            OrderPaymentConfirmed(
                order_id=str(self.id),
                external_session_ref=self.external_session_ref,
                external_payment_ref=self.external_payment_ref,
                total_amount=self.total_amount,
                confirmed_at=now,
            )
        )
        return True

    def mark_failed(self, reason: str | None = None) -> bool:
        """Record a failed or expired payment. Returns False if the order was already settled."""
        if not self.can_transition_to(PaymentStatus.FAILED):
            return False

        now = datetime.now(UTC)
        with atomic_change(self):
            self.payment_status = PaymentStatus.FAILED.value
            self.failure_reason = reason
            self.updated_at = now

        self.raise_(
            OrderPaymentFailed(
                order_id=str(self.id),
                external_session_ref=self.external_session_ref,
                reason=reason,
                failed_at=now,
            )
        )
        return True
