"""Cart item management: commands and handler.

Carts are addressed by the shopper identity; the first write for an identity
creates its cart.
"""

from protean import handle
from protean.fields import Integer, String
from protean.utils.globals import current_domain

from storefront.cart.cart import ShoppingCart
from storefront.catalogue.product import Product
from storefront.domain import storefront


@storefront.command(part_of="ShoppingCart")
class AddToCart:
    owner = String(required=True, max_length=255)
    product_id = String(required=True, max_length=255)
    quantity = Integer(default=1)


@storefront.command(part_of="ShoppingCart")
class UpdateCartQuantity:
    owner = String(required=True, max_length=255)
    product_id = String(required=True, max_length=255)
    new_quantity = Integer(required=True)


@storefront.command(part_of="ShoppingCart")
class RemoveFromCart:
    owner = String(required=True, max_length=255)
    product_id = String(required=True, max_length=255)


@storefront.command(part_of="ShoppingCart")
class ClearCart:
    owner = String(required=True, max_length=255)


@storefront.command_handler(part_of=ShoppingCart)
class ManageCartItemsHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        # Raises ObjectNotFoundError for products that are not in the catalogue
        product = current_domain.repository_for(Product).get(command.product_id)

        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.get_or_create_for_owner(command.owner)
        cart.add_item(
            product_id=product.id,
            name=product.name,
            unit_price=product.price,
            image=product.image,
            quantity=command.quantity,
        )
        repo.add(cart)
        return str(cart.id)

    @handle(UpdateCartQuantity)
    def update_cart_quantity(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.get_or_create_for_owner(command.owner)
        cart.update_item_quantity(product_id=command.product_id, new_quantity=command.new_quantity)
        repo.add(cart)

    @handle(RemoveFromCart)
    def remove_from_cart(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.find_for_owner(command.owner)
        if cart is None:
            return
        cart.remove_item(product_id=command.product_id)
        repo.add(cart)

    @handle(ClearCart)
    def clear_cart(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.find_for_owner(command.owner)
        if cart is None or not cart.clear():
            return False
        repo.add(cart)
        return True
