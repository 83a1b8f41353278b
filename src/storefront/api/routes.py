"""FastAPI routes for the Storefront: catalogue, cart and checkout."""

from fastapi import APIRouter, Header, HTTPException, Request
from protean.utils.globals import current_domain

from storefront.api.schemas import (
    AddToCartRequest,
    CartItemResponse,
    CartResponse,
    ConfigureGatewayRequest,
    CreateSessionRequest,
    CreateSessionResponse,
    GatewayConfigResponse,
    OrderResponse,
    ProductResponse,
    StatusResponse,
    UpdateCartQuantityRequest,
    UpdateOrderRequest,
    WebhookAckResponse,
    order_response,
    product_response,
)
from storefront.cart.cart import GUEST, ShoppingCart
from storefront.cart.items import AddToCart, ClearCart, RemoveFromCart, UpdateCartQuantity
from storefront.catalogue.product import Product
from storefront.checkout.orchestrator import begin_checkout
from storefront.config import get_settings
from storefront.gateway import get_gateway
from storefront.gateway.fake_adapter import FakeGateway
from storefront.reconciliation.polling import confirm_by_polling, get_order_by_session
from storefront.reconciliation.webhook import handle_webhook, webhook_counts


def shopper_identity(x_user_id: str | None) -> str:
    """Identity of the shopper making the request, ``guest`` when not signed in."""
    return x_user_id or GUEST


def _cart_response(identity: str) -> CartResponse:
    cart = current_domain.repository_for(ShoppingCart).find_for_owner(identity)
    if cart is None:
        return CartResponse(items=[], total_items=0, total_amount=0.0)
    return CartResponse(
        items=[
            CartItemResponse(
                product_id=item.product_id,
                name=item.name,
                price=item.unit_price,
                image=item.image,
                quantity=item.quantity,
            )
            for item in cart.items
        ],
        total_items=cart.item_count(),
        total_amount=cart.subtotal(),
    )


# ---------------------------------------------------------------------------
# Product Router
# ---------------------------------------------------------------------------
product_router = APIRouter(prefix="/products", tags=["products"])


@product_router.get("", response_model=list[ProductResponse])
async def list_products() -> list[ProductResponse]:
    """List every product in the catalogue."""
    products = current_domain.repository_for(Product).list_all()
    return [product_response(product) for product in products]


@product_router.get("/{product_id}", response_model=ProductResponse)
async def get_product(product_id: str) -> ProductResponse:
    product = current_domain.repository_for(Product).get(product_id)
    return product_response(product)


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/cart", tags=["cart"])


@cart_router.get("", response_model=CartResponse)
async def get_cart(x_user_id: str | None = Header(default=None)) -> CartResponse:
    """Current cart with its item count and total."""
    return _cart_response(shopper_identity(x_user_id))


@cart_router.post("/add", response_model=CartResponse)
async def add_to_cart(body: AddToCartRequest, x_user_id: str | None = Header(default=None)) -> CartResponse:
    identity = shopper_identity(x_user_id)
    command = AddToCart(owner=identity, product_id=body.product_id, quantity=body.quantity)
    current_domain.process(command, asynchronous=False)
    return _cart_response(identity)


@cart_router.delete("/remove/{product_id}", response_model=CartResponse)
async def remove_from_cart(product_id: str, x_user_id: str | None = Header(default=None)) -> CartResponse:
    identity = shopper_identity(x_user_id)
    current_domain.process(RemoveFromCart(owner=identity, product_id=product_id), asynchronous=False)
    return _cart_response(identity)


@cart_router.patch("/update/{product_id}", response_model=CartResponse)
async def update_cart_quantity(
    product_id: str,
    body: UpdateCartQuantityRequest,
    x_user_id: str | None = Header(default=None),
) -> CartResponse:
    identity = shopper_identity(x_user_id)
    command = UpdateCartQuantity(owner=identity, product_id=product_id, new_quantity=body.quantity)
    current_domain.process(command, asynchronous=False)
    return _cart_response(identity)


@cart_router.delete("/clear", response_model=CartResponse)
async def clear_cart(x_user_id: str | None = Header(default=None)) -> CartResponse:
    identity = shopper_identity(x_user_id)
    current_domain.process(ClearCart(owner=identity), asynchronous=False)
    return _cart_response(identity)


# ---------------------------------------------------------------------------
# Checkout Router
# ---------------------------------------------------------------------------
checkout_router = APIRouter(prefix="/checkout", tags=["checkout"])


@checkout_router.post("/create-session", response_model=CreateSessionResponse)
def create_session(
    body: CreateSessionRequest,
    x_user_id: str | None = Header(default=None),
) -> CreateSessionResponse:
    """Open a hosted payment session for the cart and record a pending order.

    Declared sync so the blocking gateway call runs in the threadpool.
    """
    result = begin_checkout(shopper_identity(x_user_id), body.email)
    return CreateSessionResponse(session_id=result.session_id, url=result.redirect_url, order_id=result.order_id)


@checkout_router.post("/webhook", response_model=WebhookAckResponse)
async def webhook(request: Request, stripe_signature: str | None = Header(default=None)) -> WebhookAckResponse:
    """Gateway notification endpoint. The body is verified byte for byte."""
    payload = await request.body()
    handle_webhook(payload, stripe_signature)
    return WebhookAckResponse(received=True)


@checkout_router.post("/update-order", response_model=OrderResponse)
def update_order(body: UpdateOrderRequest) -> OrderResponse:
    """Confirm a payment by asking the gateway about the session."""
    order = confirm_by_polling(body.session_id)
    return order_response(order)


@checkout_router.get("/order-status/{session_id}", response_model=OrderResponse)
async def order_status(session_id: str) -> OrderResponse:
    return order_response(get_order_by_session(session_id))


@checkout_router.post("/gateway/configure", response_model=GatewayConfigResponse)
async def configure_gateway(body: ConfigureGatewayRequest) -> GatewayConfigResponse:
    """Configure the FakeGateway behavior (non-production only).

    Lets manual API testing switch session creation between success and failure.
    """
    if get_settings().is_production:
        raise HTTPException(status_code=403, detail="Gateway configuration not available in production")

    gateway = get_gateway()
    if not isinstance(gateway, FakeGateway):
        raise HTTPException(status_code=400, detail="Gateway configuration only available for FakeGateway")

    gateway.configure(should_succeed=body.should_succeed, failure_reason=body.failure_reason)
    return GatewayConfigResponse(
        gateway=type(gateway).__name__,
        should_succeed=gateway.should_succeed,
        failure_reason=gateway.failure_reason,
    )


@checkout_router.post("/gateway/sessions/{session_id}/pay", response_model=StatusResponse)
async def pay_fake_session(session_id: str) -> StatusResponse:
    """Mark a FakeGateway session as paid (non-production only)."""
    if get_settings().is_production:
        raise HTTPException(status_code=403, detail="Gateway configuration not available in production")

    gateway = get_gateway()
    if not isinstance(gateway, FakeGateway):
        raise HTTPException(status_code=400, detail="Gateway configuration only available for FakeGateway")

    gateway.complete_payment(session_id)
    return StatusResponse(status="paid")


# ---------------------------------------------------------------------------
# Health Router
# ---------------------------------------------------------------------------
health_router = APIRouter(tags=["health"])


@health_router.get("/health")
async def health() -> dict:
    """Liveness, plus webhook outcome counts since the process started."""
    return {"status": "ok", "domain": {"name": current_domain.name}, "webhooks": webhook_counts()}
