import pytest
from protean import current_domain
from protean.integrations.pytest import DomainFixture

WEBHOOK_SECRET = "whsec_test_secret"


@pytest.fixture(scope="session")
def storefront_bed():
    from storefront.domain import storefront

    bed = DomainFixture(storefront)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(storefront_bed):
    with storefront_bed.domain_context():
        yield

        # Clear all databases
        for _, provider in current_domain.providers.items():
            provider._data_reset()

        # Drain event stores
        current_domain.event_store.store._data_reset()


@pytest.fixture(autouse=True)
def fake_gateway(_ctx, monkeypatch):
    """Fresh FakeGateway, default cart store and seeded catalogue for every test."""
    from storefront.cart.store import reset_cart_store
    from storefront.catalogue.seeding import seed_catalogue
    from storefront.gateway import reset_gateway, set_gateway
    from storefront.gateway.fake_adapter import FakeGateway
    from storefront.reconciliation.webhook import reset_webhook_counts

    monkeypatch.setenv("STRIPE_WEBHOOK_SECRET", WEBHOOK_SECRET)
    gateway = FakeGateway()
    set_gateway(gateway)
    reset_cart_store()
    reset_webhook_counts()
    seed_catalogue()

    yield gateway

    reset_gateway()
    reset_cart_store()
