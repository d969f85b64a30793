"""Tests for the pool, order and quote endpoints."""

import pytest
from fastapi.testclient import TestClient

from flowhook.api.endpoints import get_controller
from flowhook.api.main import app
from flowhook.errors import CrossedBook
from flowhook.hooks.controller import HookController
from flowhook.math.price import price_to_sqrt_price_x96
from tests.helpers import ALICE, BASE_TOKEN, BOB, ONE, OTHER_HOOK, QUOTE_TOKEN


@pytest.fixture
def controller() -> HookController:
    return HookController()


@pytest.fixture
def client(controller):
    """Test client wired to a fresh controller."""
    app.dependency_overrides[get_controller] = lambda: controller
    yield TestClient(app)
    app.dependency_overrides.clear()


def pool_payload(**overrides) -> dict:
    payload = {
        "key": {"currency0": BASE_TOKEN, "currency1": QUOTE_TOKEN, "fee": 3000},
        "sqrtPriceX96": str(price_to_sqrt_price_x96(100 * ONE)),
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def pool_id(client) -> str:
    response = client.post("/pools", json=pool_payload())
    assert response.status_code == 200
    return response.json()["poolId"]


def place(client, pool_id, owner, side, price, quantity):
    return client.post(
        f"/pools/{pool_id}/orders",
        json={"owner": owner, "side": side, "limitPrice": str(price), "quantity": str(quantity)},
    )


class TestCreatePool:
    def test_creates_pool_with_receipt(self, client, controller):
        response = client.post("/pools", json=pool_payload())

        assert response.status_code == 200
        data = response.json()
        assert data["poolId"].startswith("0x")
        assert data["receipt"]["status"] == "confirmed"
        assert controller.registry.get_by_id(data["poolId"]).is_active

    def test_duplicate_pool_conflicts(self, client, pool_id):
        response = client.post("/pools", json=pool_payload())

        assert response.status_code == 409
        assert response.json()["receipt"]["status"] == "failed"
        assert response.json()["receipt"]["failure"] == "user"

    def test_foreign_hook_rejected(self, client, controller):
        payload = pool_payload()
        payload["key"]["hooks"] = OTHER_HOOK

        response = client.post("/pools", json=payload)

        assert response.status_code == 400
        assert len(controller.registry) == 0

    def test_unordered_currencies(self, client):
        payload = pool_payload()
        payload["key"] = {"currency0": QUOTE_TOKEN, "currency1": BASE_TOKEN, "fee": 3000}

        assert client.post("/pools", json=payload).status_code == 422

    def test_invalid_address(self, client):
        payload = pool_payload()
        payload["key"]["currency0"] = "not-an-address"

        assert client.post("/pools", json=payload).status_code == 422


class TestOrders:
    def test_place_resting_order(self, client, pool_id):
        response = place(client, pool_id, ALICE, "sell", 100 * ONE, 10 * ONE)

        assert response.status_code == 200
        data = response.json()
        assert data["filledQuantity"] == "0"
        assert data["restedQuantity"] == str(10 * ONE)
        assert data["receipt"]["status"] == "confirmed"

    def test_place_matching_order(self, client, pool_id):
        ask_id = place(client, pool_id, ALICE, "sell", 100 * ONE, 10 * ONE).json()["orderId"]

        data = place(client, pool_id, BOB, "buy", 100 * ONE, 4 * ONE).json()

        assert data["filledQuantity"] == str(4 * ONE)
        assert data["fills"][0]["orderId"] == ask_id
        assert data["fills"][0]["quoteAmount"] == str(400 * ONE)
        assert data["fills"][0]["orderRemaining"] == str(6 * ONE)

    def test_zero_quantity_rejected(self, client, pool_id):
        response = place(client, pool_id, ALICE, "buy", ONE, 0)

        assert response.status_code == 400
        assert response.json()["detail"] == "Request rejected: InvalidQuantity"

    def test_unknown_pool(self, client):
        response = place(client, "0x" + "00" * 32, ALICE, "buy", ONE, ONE)

        assert response.status_code == 404

    def test_cancel(self, client, pool_id):
        order_id = place(client, pool_id, ALICE, "sell", 100 * ONE, 10 * ONE).json()["orderId"]

        response = client.delete(f"/pools/{pool_id}/orders/{order_id}", params={"owner": ALICE})

        assert response.status_code == 200
        assert response.json()["freedQuantity"] == str(10 * ONE)

    def test_cancel_by_stranger(self, client, pool_id):
        order_id = place(client, pool_id, ALICE, "sell", 100 * ONE, ONE).json()["orderId"]

        response = client.delete(f"/pools/{pool_id}/orders/{order_id}", params={"owner": BOB})

        assert response.status_code == 403

    def test_cancel_missing(self, client, pool_id):
        response = client.delete(f"/pools/{pool_id}/orders/999", params={"owner": ALICE})

        assert response.status_code == 404
        assert response.json()["receipt"]["status"] == "failed"

    def test_cancel_requires_owner(self, client, pool_id):
        assert client.delete(f"/pools/{pool_id}/orders/1").status_code == 422

    def test_list_owner_orders(self, client, pool_id):
        ask_id = place(client, pool_id, ALICE, "sell", 101 * ONE, 3 * ONE).json()["orderId"]
        bid_id = place(client, pool_id, ALICE, "buy", 99 * ONE, 2 * ONE).json()["orderId"]
        place(client, pool_id, BOB, "buy", 98 * ONE, ONE)

        response = client.get(f"/pools/{pool_id}/orders", params={"owner": ALICE})

        assert response.status_code == 200
        orders = response.json()["orders"]
        assert [o["orderId"] for o in orders] == [bid_id, ask_id]
        assert orders[0]["side"] == "buy"
        assert orders[0]["limitPrice"] == str(99 * ONE)
        assert orders[0]["remainingQuantity"] == str(2 * ONE)
        assert orders[0]["lockedAmount"] == str(198 * ONE)
        assert orders[1]["lockedAmount"] == str(3 * ONE)

    def test_list_shows_partial_fills(self, client, pool_id):
        place(client, pool_id, ALICE, "sell", 100 * ONE, 10 * ONE)
        place(client, pool_id, BOB, "buy", 100 * ONE, 4 * ONE)

        order = client.get(f"/pools/{pool_id}/orders", params={"owner": ALICE}).json()[
            "orders"
        ][0]

        assert order["originalQuantity"] == str(10 * ONE)
        assert order["remainingQuantity"] == str(6 * ONE)

    def test_list_requires_owner(self, client, pool_id):
        assert client.get(f"/pools/{pool_id}/orders").status_code == 422

    def test_list_unknown_pool(self, client):
        response = client.get(f"/pools/0x{'00' * 32}/orders", params={"owner": ALICE})

        assert response.status_code == 404


class TestBookAndQuote:
    def test_book_snapshot(self, client, pool_id):
        place(client, pool_id, ALICE, "sell", 101 * ONE, ONE)
        place(client, pool_id, BOB, "buy", 99 * ONE, 2 * ONE)

        data = client.get(f"/pools/{pool_id}/book").json()

        assert data["asks"][0]["price"] == str(101 * ONE)
        assert data["bids"][0]["quantity"] == str(2 * ONE)
        assert data["spread"] == str(2 * ONE)
        assert data["midPrice"] == str(100 * ONE)

    def test_book_level_cap(self, client, pool_id):
        for price in (101, 102, 103):
            place(client, pool_id, ALICE, "sell", price * ONE, ONE)

        data = client.get(f"/pools/{pool_id}/book", params={"levels": 2}).json()

        assert len(data["asks"]) == 2

    def test_quote_is_dry_run(self, client, pool_id):
        place(client, pool_id, ALICE, "sell", 100 * ONE, 10 * ONE)

        response = client.post(
            f"/pools/{pool_id}/quote",
            json={"direction": "buy", "amountSpecified": str(-4 * ONE)},
        )

        data = response.json()
        assert data["filledQuantity"] == str(4 * ONE)
        assert data["deltaSpecified"] == str(-4 * ONE)
        assert data["deltaUnspecified"] == str(400 * ONE)
        book = client.get(f"/pools/{pool_id}/book").json()
        assert book["asks"][0]["quantity"] == str(10 * ONE)

    def test_quote_zero_amount(self, client, pool_id):
        response = client.post(
            f"/pools/{pool_id}/quote", json={"direction": "sell", "amountSpecified": "0"}
        )

        assert response.status_code == 400


class TestFatalErrors:
    def test_invariant_failure_returns_500(self, client, controller, pool_id, monkeypatch):
        place(client, pool_id, ALICE, "sell", 100 * ONE, ONE)
        book = controller.registry.get_by_id(pool_id).book

        def crossed():
            raise CrossedBook(1, 1)

        monkeypatch.setattr(book, "assert_not_crossed", crossed)
        response = place(client, pool_id, BOB, "buy", 100 * ONE, ONE)

        assert response.status_code == 500
        assert response.json()["receipt"]["failure"] == "internal"
        assert response.json()["detail"] == "Internal error; the call was rolled back"
        assert book.total_quantity() == ONE
