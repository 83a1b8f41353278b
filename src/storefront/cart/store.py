"""Cart store port: the view of carts that checkout and reconciliation consume.

Checkout only ever reads a cart and reconciliation only ever clears one, so
both depend on this narrow interface instead of on the ShoppingCart aggregate.
The default implementation is backed by the aggregate repository; tests and
other deployments can install their own via set_cart_store().
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from protean.utils.globals import current_domain

from storefront.cart.cart import ShoppingCart
from storefront.cart.items import ClearCart


@dataclass(frozen=True)
class CartLine:
    """Read-only snapshot of one cart line."""

    product_id: str
    name: str
    unit_price: float
    quantity: int
    image: str | None = None


class CartStore(ABC):
    @abstractmethod
    def get_cart(self, identity: str) -> list[CartLine]:
        """Return the lines in the identity's cart, empty when there is no cart."""
        ...

    @abstractmethod
    def clear_cart(self, identity: str) -> bool:
        """Empty the identity's cart. Returns False when there was nothing to clear."""
        ...


class DomainCartStore(CartStore):
    """Cart store backed by the ShoppingCart aggregate."""

    def get_cart(self, identity: str) -> list[CartLine]:
        cart = current_domain.repository_for(ShoppingCart).find_for_owner(identity)
        if cart is None:
            return []
        return [
            CartLine(
                product_id=str(item.product_id),
                name=item.name,
                unit_price=item.unit_price,
                quantity=item.quantity,
                image=item.image,
            )
            for item in cart.items
        ]

    def clear_cart(self, identity: str) -> bool:
        return bool(current_domain.process(ClearCart(owner=identity), asynchronous=False))


_current_store: CartStore | None = None


def get_cart_store() -> CartStore:
    """Return the active cart store. Defaults to DomainCartStore."""
    global _current_store
    if _current_store is None:
        _current_store = DomainCartStore()
    return _current_store


def set_cart_store(store: CartStore) -> None:
    global _current_store
    _current_store = store


def reset_cart_store() -> None:
    global _current_store
    _current_store = None
