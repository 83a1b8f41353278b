"""Domain events for the ShoppingCart aggregate."""

from protean.fields import Float, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="ShoppingCart")
class CartItemAdded:
    """A product was added to the cart, or its quantity increased."""

    __version__ = 1

    cart_id = Identifier(required=True)
    owner = String(required=True, max_length=255)
    product_id = String(required=True, max_length=255)
    quantity = Integer(required=True)
    unit_price = Float(required=True)


@storefront.event(part_of="ShoppingCart")
class CartQuantityUpdated:
    __version__ = 1

    cart_id = Identifier(required=True)
    product_id = String(required=True, max_length=255)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)


@storefront.event(part_of="ShoppingCart")
class CartItemRemoved:
    __version__ = 1

    cart_id = Identifier(required=True)
    product_id = String(required=True, max_length=255)


@storefront.event(part_of="ShoppingCart")
class CartCleared:
    """All lines were removed from the cart."""

    __version__ = 1

    cart_id = Identifier(required=True)
    owner = String(required=True, max_length=255)
    items_removed = Integer(required=True)
