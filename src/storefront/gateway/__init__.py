"""Payment gateway factory.

Provides get_gateway() / set_gateway() to swap implementations:
- FakeGateway for development and testing (PAYMENT_GATEWAY=fake, the default)
- StripeGateway for production (PAYMENT_GATEWAY=stripe, needs STRIPE_SECRET_KEY)
"""

from storefront.config import get_settings
from storefront.gateway.port import PaymentGateway

_current_gateway: PaymentGateway | None = None


def _build_gateway() -> PaymentGateway:
    settings = get_settings()
    if settings.gateway == "fake":
        from storefront.gateway.fake_adapter import FakeGateway

        return FakeGateway()
    if settings.gateway == "stripe":
        from storefront.gateway.stripe_adapter import StripeGateway

        if not settings.stripe_secret_key:
            raise ValueError("STRIPE_SECRET_KEY must be set when PAYMENT_GATEWAY=stripe")
        return StripeGateway(api_key=settings.stripe_secret_key)
    raise ValueError(f"Unknown payment gateway: {settings.gateway}")


def get_gateway() -> PaymentGateway:
    """Return the current payment gateway, building it from settings on first use."""
    global _current_gateway
    if _current_gateway is None:
        _current_gateway = _build_gateway()
    return _current_gateway


def set_gateway(gateway: PaymentGateway) -> None:
    """Override the active payment gateway (useful for tests)."""
    global _current_gateway
    _current_gateway = gateway


def reset_gateway() -> None:
    """Reset to default gateway."""
    global _current_gateway
    _current_gateway = None
