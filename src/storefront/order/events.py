"""Domain events for the Order aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Order")
class OrderPlaced:
    """A pending order was recorded for a freshly opened payment session."""

    __version__ = 1

    order_id = Identifier(required=True)
    owner_identity = String(max_length=255)
    contact_email = String(required=True, max_length=254)
    external_session_ref = String(required=True, max_length=255)
    total_amount = Float(required=True)
    item_count = Integer(required=True)
    placed_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderPaymentConfirmed:
    __version__ = 1

    order_id = Identifier(required=True)
    external_session_ref = String(required=True, max_length=255)
    external_payment_ref = String(max_length=255)
    total_amount = Float(required=True)
    confirmed_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderPaymentFailed:
    __version__ = 1

    order_id = Identifier(required=True)
    external_session_ref = String(required=True, max_length=255)
    reason = String(max_length=500)
    failed_at = DateTime(required=True)
