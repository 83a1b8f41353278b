"""Integration tests for the checkout endpoints via TestClient."""

import inspect
import os

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from storefront.api import cart_router, checkout_router, health_router, register_exception_handlers, routes
from storefront.gateway.fake_adapter import compute_signature
from storefront.gateway.port import SESSION_COMPLETED, SESSION_EXPIRED

USER = {"X-User-Id": "user-001"}


@pytest.fixture()
def client():
    app = FastAPI()
    app.include_router(cart_router)
    app.include_router(checkout_router)
    app.include_router(health_router)
    register_exception_handlers(app)
    return TestClient(app)


def _checkout(client, headers=USER, email="shopper@example.com"):
    client.post("/cart/add", json={"product_id": "1", "quantity": 1}, headers=headers)
    response = client.post("/checkout/create-session", json={"email": email}, headers=headers)
    assert response.status_code == 200
    return response.json()


def _post_webhook(client, gateway, event_type, session_id, signature=None):
    payload = gateway.webhook_payload(event_type, session_id)
    if signature is None:
        signature = compute_signature(payload, os.environ["STRIPE_WEBHOOK_SECRET"])
    return client.post(
        "/checkout/webhook",
        content=payload,
        headers={"Stripe-Signature": signature, "Content-Type": "application/json"},
    )


class TestCreateSessionAPI:
    def test_returns_session_and_order(self, client, fake_gateway):
        body = _checkout(client)
        assert body["session_id"] in fake_gateway.sessions
        assert body["url"].endswith(body["session_id"])
        assert body["order_id"]

    def test_order_is_pending(self, client, fake_gateway):
        body = _checkout(client)
        response = client.get(f"/checkout/order-status/{body['session_id']}")
        assert response.status_code == 200
        order = response.json()
        assert order["payment_status"] == "pending"
        assert order["total_amount"] == 99.99
        assert order["user_id"] == "user-001"
        assert order["stripe_payment_intent_id"] == "pending"
        assert order["items"] == [{"product_id": "1", "name": "Wireless Headphones", "price": 99.99, "quantity": 1}]

    def test_guest_checkout_without_header(self, client, fake_gateway):
        body = _checkout(client, headers={})
        order = client.get(f"/checkout/order-status/{body['session_id']}").json()
        assert order["user_id"] is None

    def test_empty_cart_returns_400(self, client, fake_gateway):
        response = client.post("/checkout/create-session", json={"email": "shopper@example.com"}, headers=USER)
        assert response.status_code == 400
        assert response.json()["status"] == 400
        assert response.json()["message"] == "Cart is empty"
        assert fake_gateway.calls == []

    def test_blank_email_returns_400(self, client, fake_gateway):
        client.post("/cart/add", json={"product_id": "1"}, headers=USER)
        response = client.post("/checkout/create-session", json={"email": " "}, headers=USER)
        assert response.status_code == 400

    def test_missing_email_returns_400(self, client, fake_gateway):
        client.post("/cart/add", json={"product_id": "1"}, headers=USER)
        response = client.post("/checkout/create-session", json={}, headers=USER)
        assert response.status_code == 400
        assert response.json()["message"] == "Email is required for checkout"
        assert fake_gateway.calls == []

    def test_gateway_failure_returns_502(self, client, fake_gateway):
        client.post("/cart/add", json={"product_id": "1"}, headers=USER)
        fake_gateway.configure(should_succeed=False, failure_reason="Gateway unavailable")

        response = client.post("/checkout/create-session", json={"email": "shopper@example.com"}, headers=USER)

        assert response.status_code == 502
        assert response.json() == {"status": 502, "message": "Gateway unavailable"}


class TestWebhookAPI:
    def test_completed_event(self, client, fake_gateway):
        body = _checkout(client)
        fake_gateway.complete_payment(body["session_id"], payment_intent_id="pi_api_001")

        response = _post_webhook(client, fake_gateway, SESSION_COMPLETED, body["session_id"])

        assert response.status_code == 200
        assert response.json() == {"received": True}
        order = client.get(f"/checkout/order-status/{body['session_id']}").json()
        assert order["payment_status"] == "successful"
        assert order["stripe_payment_intent_id"] == "pi_api_001"
        assert client.get("/cart", headers=USER).json()["items"] == []

    def test_expired_event_keeps_cart(self, client, fake_gateway):
        body = _checkout(client)

        _post_webhook(client, fake_gateway, SESSION_EXPIRED, body["session_id"])

        order = client.get(f"/checkout/order-status/{body['session_id']}").json()
        assert order["payment_status"] == "failed"
        assert client.get("/cart", headers=USER).json()["total_items"] == 1

    def test_bad_signature_returns_400(self, client, fake_gateway):
        body = _checkout(client)

        response = _post_webhook(client, fake_gateway, SESSION_COMPLETED, body["session_id"], signature="bogus")

        assert response.status_code == 400
        order = client.get(f"/checkout/order-status/{body['session_id']}").json()
        assert order["payment_status"] == "pending"

    def test_missing_signature_header_returns_400(self, client, fake_gateway):
        body = _checkout(client)
        payload = fake_gateway.webhook_payload(SESSION_COMPLETED, body["session_id"])
        response = client.post("/checkout/webhook", content=payload)
        assert response.status_code == 400


class TestUpdateOrderAPI:
    def test_unpaid_returns_409(self, client, fake_gateway):
        body = _checkout(client)

        response = client.post("/checkout/update-order", json={"session_id": body["session_id"]})

        assert response.status_code == 409
        assert response.json()["message"] == "Payment not completed (status: unpaid)"
        order = client.get(f"/checkout/order-status/{body['session_id']}").json()
        assert order["payment_status"] == "pending"
        assert client.get("/cart", headers=USER).json()["total_items"] == 1

    def test_paid_returns_successful_order(self, client, fake_gateway):
        body = _checkout(client)
        fake_gateway.complete_payment(body["session_id"])

        response = client.post("/checkout/update-order", json={"session_id": body["session_id"]})

        assert response.status_code == 200
        assert response.json()["id"] == body["order_id"]
        assert response.json()["payment_status"] == "successful"
        assert client.get("/cart", headers=USER).json()["items"] == []

    def test_poll_after_webhook_returns_same_order(self, client, fake_gateway):
        body = _checkout(client)
        fake_gateway.complete_payment(body["session_id"])
        _post_webhook(client, fake_gateway, SESSION_COMPLETED, body["session_id"])

        response = client.post("/checkout/update-order", json={"session_id": body["session_id"]})

        assert response.status_code == 200
        assert response.json()["id"] == body["order_id"]
        assert response.json()["payment_status"] == "successful"

    def test_missing_session_id_returns_400(self, client):
        response = client.post("/checkout/update-order", json={})
        assert response.status_code == 400

    def test_unknown_session_returns_502(self, client):
        response = client.post("/checkout/update-order", json={"session_id": "cs_test_unknown"})
        assert response.status_code == 502


class TestOrderStatusAPI:
    def test_unknown_session_returns_404(self, client):
        response = client.get("/checkout/order-status/cs_test_missing")
        assert response.status_code == 404
        assert response.json()["status"] == 404


class TestGatewayConfigureAPI:
    def test_configure_fake_gateway(self, client, fake_gateway):
        response = client.post(
            "/checkout/gateway/configure",
            json={"should_succeed": False, "failure_reason": "Maintenance"},
        )
        assert response.status_code == 200
        assert response.json() == {"gateway": "FakeGateway", "should_succeed": False, "failure_reason": "Maintenance"}
        assert fake_gateway.should_succeed is False

    def test_forbidden_in_production(self, client, monkeypatch):
        monkeypatch.setenv("PROTEAN_ENV", "production")
        response = client.post("/checkout/gateway/configure", json={"should_succeed": False})
        assert response.status_code == 403

    def test_pay_fake_session(self, client, fake_gateway):
        body = _checkout(client)
        response = client.post(f"/checkout/gateway/sessions/{body['session_id']}/pay")
        assert response.status_code == 200
        assert fake_gateway.sessions[body["session_id"]].is_paid


class TestHealthAPI:
    def test_reports_webhook_outcomes(self, client, fake_gateway):
        body = _checkout(client)
        fake_gateway.complete_payment(body["session_id"])
        stray = fake_gateway.create_checkout_session(
            line_items=[],
            customer_email="nobody@example.com",
            success_url="http://localhost:3000/payment-success",
            cancel_url="http://localhost:3000/payment-failed",
            metadata={},
        )

        _post_webhook(client, fake_gateway, SESSION_COMPLETED, body["session_id"])
        _post_webhook(client, fake_gateway, SESSION_COMPLETED, stray.id)
        _post_webhook(client, fake_gateway, SESSION_COMPLETED, body["session_id"], signature="bogus")

        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"
        assert response.json()["webhooks"] == {"settled": 1, "unmatched_session": 1, "rejected": 1}


class TestGatewayBoundRoutes:
    def test_run_in_threadpool(self):
        # FastAPI runs plain def routes in its threadpool, off the event loop
        assert not inspect.iscoroutinefunction(routes.create_session)
        assert not inspect.iscoroutinefunction(routes.update_order)
