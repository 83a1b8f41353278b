"""Pydantic request/response schemas for the Storefront API.

These are external contracts (anti-corruption layer): separate from
internal Protean commands and aggregates.
"""

from datetime import datetime

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Catalogue
# ---------------------------------------------------------------------------
class ProductResponse(BaseModel):
    id: str
    name: str
    description: str | None = None
    price: float
    image: str | None = None
    category: str | None = None
    stock: int = 0


def product_response(product) -> ProductResponse:
    return ProductResponse(
        id=str(product.id),
        name=product.name,
        description=product.description,
        price=product.price,
        image=product.image,
        category=product.category,
        stock=product.stock or 0,
    )


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------
class AddToCartRequest(BaseModel):
    product_id: str
    quantity: int = Field(default=1, ge=1)

    model_config = {"json_schema_extra": {"examples": [{"product_id": "1", "quantity": 2}]}}


class UpdateCartQuantityRequest(BaseModel):
    # Checked by the aggregate so a non-positive quantity reports like any other domain rule
    quantity: int


class CartItemResponse(BaseModel):
    product_id: str
    name: str
    price: float
    image: str | None = None
    quantity: int


class CartResponse(BaseModel):
    items: list[CartItemResponse]
    total_items: int
    total_amount: float


# ---------------------------------------------------------------------------
# Checkout
# ---------------------------------------------------------------------------
class CreateSessionRequest(BaseModel):
    # A missing email is rejected by begin_checkout (400)
    email: str | None = None

    model_config = {"json_schema_extra": {"examples": [{"email": "shopper@example.com"}]}}


class CreateSessionResponse(BaseModel):
    session_id: str
    url: str | None = None
    order_id: str


class UpdateOrderRequest(BaseModel):
    session_id: str | None = None


class WebhookAckResponse(BaseModel):
    received: bool = True


class OrderLineResponse(BaseModel):
    product_id: str
    name: str
    price: float
    quantity: int


class OrderResponse(BaseModel):
    id: str
    user_id: str | None = None
    email: str
    items: list[OrderLineResponse]
    total_amount: float
    payment_status: str
    stripe_session_id: str
    stripe_payment_intent_id: str
    failure_reason: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


def order_response(order) -> OrderResponse:
    return OrderResponse(
        id=str(order.id),
        user_id=order.owner_identity,
        email=order.contact_email,
        items=[
            OrderLineResponse(
                product_id=line.product_ref,
                name=line.name,
                price=line.unit_price,
                quantity=line.quantity,
            )
            for line in order.line_items
        ],
        total_amount=order.total_amount,
        payment_status=order.payment_status,
        stripe_session_id=order.external_session_ref,
        stripe_payment_intent_id=order.external_payment_ref,
        failure_reason=order.failure_reason,
        created_at=order.created_at,
        updated_at=order.updated_at,
    )


# ---------------------------------------------------------------------------
# Gateway (non-production)
# ---------------------------------------------------------------------------
class ConfigureGatewayRequest(BaseModel):
    should_succeed: bool = True
    failure_reason: str = "Gateway unavailable"


class GatewayConfigResponse(BaseModel):
    gateway: str
    should_succeed: bool
    failure_reason: str


class StatusResponse(BaseModel):
    status: str = "ok"
