"""Order placement: command and handler.

Records the pending order that backs a freshly opened payment session.
"""

import json

from protean import handle
from protean.fields import String, Text
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.order.order import Order


@storefront.command(part_of="Order")
class PlaceOrder:
    owner_identity = String(max_length=255)
    contact_email = String(required=True, max_length=254)
    line_items = Text(required=True)  # JSON: list of {product_ref, name, unit_price, quantity}
    external_session_ref = String(required=True, max_length=255)
    external_payment_ref = String(max_length=255)


@storefront.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        line_items = json.loads(command.line_items) if isinstance(command.line_items, str) else command.line_items

        order = Order.create(
            contact_email=command.contact_email,
            line_items=line_items,
            external_session_ref=command.external_session_ref,
            owner_identity=command.owner_identity,
            external_payment_ref=command.external_payment_ref,
        )
        current_domain.repository_for(Order).add(order)
        return str(order.id)
