"""Runtime settings for the storefront, read from environment variables.

Settings are resolved on every call so that a process (or a test) can change
the environment without re-importing modules.
"""

import os
from dataclasses import dataclass

DEFAULT_FRONTEND_URL = "http://localhost:3000"


@dataclass(frozen=True)
class CheckoutSettings:
    environment: str
    frontend_url: str
    currency: str
    webhook_secret: str | None
    gateway: str
    stripe_secret_key: str | None

    @property
    def success_url(self) -> str:
        # {CHECKOUT_SESSION_ID} is substituted by the gateway on redirect
        return f"{self.frontend_url}/payment-success?session_id={{CHECKOUT_SESSION_ID}}"

    @property
    def cancel_url(self) -> str:
        return f"{self.frontend_url}/payment-failed"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


def get_settings() -> CheckoutSettings:
    return CheckoutSettings(
        environment=os.environ.get("PROTEAN_ENV", "development").lower(),
        frontend_url=os.environ.get("FRONTEND_URL", DEFAULT_FRONTEND_URL).rstrip("/"),
        currency=os.environ.get("CHECKOUT_CURRENCY", "usd").lower(),
        webhook_secret=os.environ.get("STRIPE_WEBHOOK_SECRET") or None,
        gateway=os.environ.get("PAYMENT_GATEWAY", "fake").lower(),
        stripe_secret_key=os.environ.get("STRIPE_SECRET_KEY") or None,
    )
