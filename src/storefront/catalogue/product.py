"""Product aggregate: the catalogue entries shoppers add to their carts.

Only the fields the cart snapshots at add time (name, price, image) matter to
checkout. Later price changes here never reach a cart line or a placed order.
"""

from datetime import UTC, datetime

from protean.fields import DateTime, Float, Integer, String

from storefront.domain import storefront


@storefront.aggregate
class Product:
    name = String(required=True, max_length=200)
    description = String(max_length=1000)
    price = Float(required=True, min_value=0.0)
    image = String(max_length=500, sanitize=False)
    category = String(max_length=100)
    stock = Integer(default=0, min_value=0)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def create(cls, name, price, description=None, image=None, category=None, stock=0, product_id=None):
        now = datetime.now(UTC)
        attributes = {
            "name": name,
            "price": price,
            "description": description,
            "image": image,
            "category": category,
            "stock": stock,
            "created_at": now,
            "updated_at": now,
        }
        if product_id is not None:
            attributes["id"] = product_id
        return cls(**attributes)

    def change_price(self, new_price):
        self.price = new_price
        self.updated_at = datetime.now(UTC)


@storefront.repository(part_of=Product)
class ProductRepository:
    def list_all(self) -> list[Product]:
        return self._dao.query.all().items
