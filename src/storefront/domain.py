"""Storefront bounded context: Cart, Checkout and Payment Reconciliation.

Holds the per-identity shopping cart, the order ledger, the checkout flow that
opens a hosted payment session, and the reconciliation of payment outcomes
reported by the gateway (webhook) or confirmed by the client (status poll).
"""

import structlog
from protean.domain import Domain

storefront = Domain(name="storefront")

logger = structlog.get_logger(__name__)
