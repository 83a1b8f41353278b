"""Storefront bounded context: catalogue, cart, checkout and payment reconciliation."""
