"""Shopping Cart aggregate: one cart per shopper identity.

The cart holds the lines a shopper intends to buy, each carrying the product's
name, unit price and image as they were when the product was added. It is the
source of truth for what becomes an order at checkout, and it is cleared only
once a payment is confirmed.
"""

from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Integer, String

from storefront.cart.events import CartCleared, CartItemAdded, CartItemRemoved, CartQuantityUpdated
from storefront.domain import storefront

# Identity used for shoppers who are not signed in
GUEST = "guest"


@storefront.entity(part_of="ShoppingCart")
class CartItem:
    product_id = String(required=True, max_length=255)
    name = String(required=True, max_length=200)
    unit_price = Float(required=True, min_value=0.0)
    image = String(max_length=500, sanitize=False)
    quantity = Integer(required=True, min_value=1)
    added_at = DateTime()


@storefront.aggregate
class ShoppingCart:
    owner = String(required=True, max_length=255, unique=True)
    items = HasMany(CartItem)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def create(cls, owner):
        now = datetime.now(UTC)
        return cls(owner=owner, created_at=now, updated_at=now)

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    def find_item(self, product_id):
        return next((i for i in self.items if str(i.product_id) == str(product_id)), None)

    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    def subtotal(self) -> float:
        return round(sum(item.unit_price * item.quantity for item in self.items), 2)

    # -------------------------------------------------------------------
    # Item management
    # -------------------------------------------------------------------
    def add_item(self, product_id, name, unit_price, quantity=1, image=None):
        """Add a product to the cart, or increase its quantity if already present."""
        if quantity is None or quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be greater than 0"]})

        now = datetime.now(UTC)
        existing = self.find_item(product_id)
        if existing:
            existing.quantity += quantity
            line_price = existing.unit_price
        else:
            self.add_items(
                CartItem(
                    product_id=str(product_id),
                    name=name,
                    unit_price=unit_price,
                    image=image,
                    quantity=quantity,
                    added_at=now,
                )
            )
            line_price = unit_price

        self.updated_at = now
        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                owner=self.owner,
                product_id=str(product_id),
                quantity=quantity,
                unit_price=line_price,
            )
        )

    def update_item_quantity(self, product_id, new_quantity):
        if new_quantity is None or new_quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be greater than 0"]})

        item = self.find_item(product_id)
        if item is None:
            # Updating a product that is not in the cart leaves the cart as is
            return

        previous_quantity = item.quantity
        item.quantity = new_quantity
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartQuantityUpdated(
                cart_id=str(self.id),
                product_id=str(product_id),
                previous_quantity=previous_quantity,
                new_quantity=new_quantity,
            )
        )

    def remove_item(self, product_id):
        item = self.find_item(product_id)
        if item is None:
            return

        self.remove_items(item)
        self.updated_at = datetime.now(UTC)
        self.raise_(CartItemRemoved(cart_id=str(self.id), product_id=str(product_id)))

    def clear(self) -> bool:
        """Remove every line. Returns False when the cart was already empty."""
        if not self.items:
            return False

        removed = len(self.items)
        for item in list(self.items):
            self.remove_items(item)
        self.updated_at = datetime.now(UTC)

        self.raise_(CartCleared(cart_id=str(self.id), owner=self.owner, items_removed=removed))
        return True
