"""Demo catalogue: seeds the six storefront products on an empty store."""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from storefront.catalogue.product import Product
from storefront.domain import logger

SEED_PRODUCTS: list[dict] = [
    {
        "product_id": "1",
        "name": "Wireless Headphones",
        "description": "High-quality wireless headphones with noise cancellation",
        "price": 99.99,
        "image": "https://images.unsplash.com/photo-1505740420928-5e560c06d30e?w=500",
        "category": "Electronics",
        "stock": 50,
    },
    {
        "product_id": "2",
        "name": "Smart Watch",
        "description": "Fitness tracking smartwatch with heart rate monitor",
        "price": 199.99,
        "image": "https://images.unsplash.com/photo-1523275335684-37898b6baf30?w=500",
        "category": "Electronics",
        "stock": 30,
    },
    {
        "product_id": "3",
        "name": "Laptop Stand",
        "description": "Adjustable aluminum laptop stand for better ergonomics",
        "price": 49.99,
        "image": "https://images.unsplash.com/photo-1527864550417-7fd91fc51a46?w=500",
        "category": "Accessories",
        "stock": 75,
    },
    {
        "product_id": "4",
        "name": "Coffee Mug",
        "description": "Premium ceramic coffee mug with thermal insulation",
        "price": 24.99,
        "image": "https://images.unsplash.com/photo-1506905925346-21bda4d32df4?w=500&q=80",
        "category": "Kitchen",
        "stock": 100,
    },
    {
        "product_id": "5",
        "name": "Backpack",
        "description": "Waterproof travel backpack with multiple compartments",
        "price": 79.99,
        "image": "https://images.unsplash.com/photo-1553062407-98eeb64c6a62?w=500",
        "category": "Travel",
        "stock": 40,
    },
    {
        "product_id": "6",
        "name": "Desk Lamp",
        "description": "LED desk lamp with adjustable brightness and color",
        "price": 34.99,
        "image": "https://images.unsplash.com/photo-1507003211169-0a1dd7228f2d?w=500",
        "category": "Home",
        "stock": 60,
    },
]


def seed_catalogue() -> int:
    """Insert any missing demo products. Returns how many were added."""
    repo = current_domain.repository_for(Product)
    inserted = 0
    for data in SEED_PRODUCTS:
        try:
            repo.get(data["product_id"])
            continue
        except ObjectNotFoundError:
            pass
        repo.add(Product.create(**data))
        inserted += 1

    if inserted:
        logger.info("Catalogue seeded", inserted=inserted)
    return inserted
