"""Application tests for confirming a payment by polling the gateway."""

import pytest
from protean import current_domain
from protean.exceptions import ObjectNotFoundError, ValidationError
from storefront.cart.items import AddToCart
from storefront.cart.store import get_cart_store
from storefront.checkout.orchestrator import begin_checkout
from storefront.exceptions import GatewayError, PaymentIncompleteError
from storefront.order.order import Order, PaymentStatus
from storefront.reconciliation.polling import confirm_by_polling, get_order_by_session


def _checkout(owner="user-001"):
    current_domain.process(AddToCart(owner=owner, product_id="1", quantity=1), asynchronous=False)
    return begin_checkout(owner, "shopper@example.com")


class TestConfirmByPolling:
    def test_paid_session_marks_order_successful(self, fake_gateway):
        result = _checkout()
        fake_gateway.complete_payment(result.session_id, payment_intent_id="pi_poll_001")

        order = confirm_by_polling(result.session_id)

        assert str(order.id) == result.order_id
        assert order.payment_status == PaymentStatus.SUCCESSFUL.value
        assert order.external_payment_ref == "pi_poll_001"
        assert get_cart_store().get_cart("user-001") == []

    def test_unpaid_session_raises_incomplete(self, fake_gateway):
        result = _checkout()

        with pytest.raises(PaymentIncompleteError) as exc:
            confirm_by_polling(result.session_id)

        assert exc.value.payment_status == "unpaid"
        order = current_domain.repository_for(Order).get(result.order_id)
        assert order.payment_status == PaymentStatus.PENDING.value
        assert len(get_cart_store().get_cart("user-001")) == 1

    def test_poll_never_fails_an_order(self, fake_gateway):
        result = _checkout()
        fake_gateway.set_payment_status(result.session_id, "unpaid")

        with pytest.raises(PaymentIncompleteError):
            confirm_by_polling(result.session_id)

        assert get_order_by_session(result.session_id).payment_status == PaymentStatus.PENDING.value

    def test_missing_session_id_rejected(self, fake_gateway):
        with pytest.raises(ValidationError):
            confirm_by_polling("")
        assert fake_gateway.calls == []

    def test_unknown_gateway_session(self, fake_gateway):
        with pytest.raises(GatewayError):
            confirm_by_polling("cs_test_unknown")

    def test_paid_session_without_order(self, fake_gateway):
        session = fake_gateway.create_checkout_session(
            line_items=[],
            customer_email="nobody@example.com",
            success_url="http://localhost:3000/payment-success",
            cancel_url="http://localhost:3000/payment-failed",
            metadata={"identity": "user-404"},
        )
        fake_gateway.complete_payment(session.id)

        with pytest.raises(ObjectNotFoundError):
            confirm_by_polling(session.id)

    def test_gateway_outage(self, fake_gateway):
        result = _checkout()
        fake_gateway.configure(should_succeed=False)

        with pytest.raises(GatewayError):
            confirm_by_polling(result.session_id)


class TestGetOrderBySession:
    def test_returns_order(self, fake_gateway):
        result = _checkout()
        order = get_order_by_session(result.session_id)
        assert str(order.id) == result.order_id

    def test_unknown_session(self):
        with pytest.raises(ObjectNotFoundError):
            get_order_by_session("cs_test_missing")
