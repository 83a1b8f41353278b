"""Repository for the ShoppingCart aggregate, addressed by shopper identity."""

from storefront.cart.cart import ShoppingCart
from storefront.domain import storefront


@storefront.repository(part_of=ShoppingCart)
class ShoppingCartRepository:
    def find_for_owner(self, owner: str) -> ShoppingCart | None:
        carts = self._dao.query.filter(owner=owner).all().items
        return carts[0] if carts else None

    def get_or_create_for_owner(self, owner: str) -> ShoppingCart:
        return self.find_for_owner(owner) or ShoppingCart.create(owner=owner)
