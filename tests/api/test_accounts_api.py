"""
API tests for account, trade and history endpoints.

Tests cover:
- Open account (success, duplicate, validation)
- Get account and positions
- Buy and sell (success + domain errors)
- History filtering and sorting
- Error responses (400, 404, 422)
"""

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient


@pytest.fixture
def alice(client: TestClient) -> str:
    """Open alice's account through the API."""
    response = client.post("/accounts/", json={"user_id": "alice"})
    assert response.status_code == 201
    return "alice"


# =============================================================================
# ACCOUNT TESTS
# =============================================================================


class TestOpenAccountAPI:
    """Tests for POST /accounts."""

    def test_open_account_success(self, client: TestClient):
        """
        GIVEN no accounts exist
        WHEN I POST /accounts for "alice"
        THEN response is 201 and the account holds the $10,000 starting cash
        """
        response = client.post("/accounts/", json={"user_id": "alice"})

        assert response.status_code == 201
        data = response.json()
        assert data["user_id"] == "alice"
        assert Decimal(data["cash_balance"]) == Decimal("10000")
        assert data["created_at"] is not None

    def test_open_account_with_initial_cash(self, client: TestClient):
        response = client.post("/accounts/", json={"user_id": "bob", "initial_cash": "50"})

        assert response.status_code == 201
        assert Decimal(response.json()["cash_balance"]) == Decimal("50")

    def test_duplicate_account(self, client: TestClient, alice: str):
        response = client.post("/accounts/", json={"user_id": alice})

        assert response.status_code == 400
        assert response.json()["error"] == "VALIDATION_ERROR"

    def test_missing_user_id(self, client: TestClient):
        response = client.post("/accounts/", json={})

        assert response.status_code == 422


class TestGetAccountAPI:
    """Tests for GET /accounts/{user_id} and its positions."""

    def test_get_account(self, client: TestClient, alice: str):
        response = client.get(f"/accounts/{alice}")

        assert response.status_code == 200
        assert Decimal(response.json()["cash_balance"]) == Decimal("10000")

    def test_get_unknown_account(self, client: TestClient):
        response = client.get("/accounts/nobody")

        assert response.status_code == 404
        data = response.json()
        assert data["error"] == "NOT_FOUND"
        assert "nobody" in data["message"]

    def test_positions(self, client: TestClient, alice: str):
        client.post(f"/accounts/{alice}/buy", json={"asset_id": "bitcoin", "quantity": "2", "price": "100"})

        response = client.get(f"/accounts/{alice}/positions")

        assert response.status_code == 200
        positions = response.json()
        assert len(positions) == 1
        assert positions[0]["asset_id"] == "bitcoin"
        assert Decimal(positions[0]["quantity"]) == Decimal("2")

    def test_positions_for_unknown_account(self, client: TestClient):
        assert client.get("/accounts/nobody/positions").status_code == 404


# =============================================================================
# TRADE TESTS
# =============================================================================


class TestTradeAPI:
    """Tests for POST /accounts/{user_id}/buy and /sell."""

    def test_buy_then_sell(self, client: TestClient, alice: str):
        """
        GIVEN alice with $10,000
        WHEN she buys 2 BTC at $100, 2 at $200, then sells 1 at $500
        THEN the average cost is $150 throughout and cash ends at $9,900
        """
        client.post(f"/accounts/{alice}/buy", json={"asset_id": "bitcoin", "quantity": 2, "price": 100})
        bought = client.post(f"/accounts/{alice}/buy", json={"asset_id": "bitcoin", "quantity": 2, "price": 200})

        assert bought.status_code == 200
        assert Decimal(bought.json()["position"]["average_cost"]) == Decimal("150")

        sold = client.post(f"/accounts/{alice}/sell", json={"asset_id": "bitcoin", "quantity": 1, "price": 500})

        assert sold.status_code == 200
        data = sold.json()
        assert data["entry"]["side"] == "sell"
        assert Decimal(data["entry"]["total"]) == Decimal("500")
        assert Decimal(data["position"]["quantity"]) == Decimal("3")
        assert Decimal(data["position"]["average_cost"]) == Decimal("150")
        assert Decimal(data["cash_balance"]) == Decimal("9900")

    def test_full_liquidation_returns_no_position(self, client: TestClient, alice: str):
        client.post(f"/accounts/{alice}/buy", json={"asset_id": "ethereum", "quantity": 1, "price": 100})

        response = client.post(f"/accounts/{alice}/sell", json={"asset_id": "ethereum", "quantity": 1, "price": 100})

        assert response.status_code == 200
        assert response.json()["position"] is None
        assert client.get(f"/accounts/{alice}/positions").json() == []

    def test_insufficient_funds(self, client: TestClient):
        client.post("/accounts/", json={"user_id": "bob", "initial_cash": 50})

        response = client.post("/accounts/bob/buy", json={"asset_id": "bitcoin", "quantity": 1, "price": 100})

        assert response.status_code == 400
        assert response.json()["error"] == "INSUFFICIENT_FUNDS"
        assert Decimal(client.get("/accounts/bob").json()["cash_balance"]) == Decimal("50")

    def test_insufficient_holdings(self, client: TestClient, alice: str):
        response = client.post(f"/accounts/{alice}/sell", json={"asset_id": "bitcoin", "quantity": 1, "price": 100})

        assert response.status_code == 400
        assert response.json()["error"] == "INSUFFICIENT_HOLDINGS"

    def test_non_positive_quantity(self, client: TestClient, alice: str):
        response = client.post(f"/accounts/{alice}/buy", json={"asset_id": "bitcoin", "quantity": 0, "price": 100})

        assert response.status_code == 400
        assert response.json()["error"] == "VALIDATION_ERROR"

    def test_unparseable_price(self, client: TestClient, alice: str):
        response = client.post(f"/accounts/{alice}/buy", json={"asset_id": "bitcoin", "quantity": 1, "price": "lots"})

        assert response.status_code == 422

    def test_trade_for_unknown_account(self, client: TestClient):
        response = client.post("/accounts/ghost/buy", json={"asset_id": "bitcoin", "quantity": 1, "price": 1})

        assert response.status_code == 404


# =============================================================================
# HISTORY TESTS
# =============================================================================


class TestHistoryAPI:
    """Tests for GET /accounts/{user_id}/history."""

    @pytest.fixture
    def trades(self, client: TestClient, alice: str) -> str:
        client.post(f"/accounts/{alice}/buy", json={"asset_id": "bitcoin", "quantity": 2, "price": 100})
        client.post(f"/accounts/{alice}/buy", json={"asset_id": "ethereum", "quantity": 1, "price": 50})
        client.post(f"/accounts/{alice}/sell", json={"asset_id": "bitcoin", "quantity": 1, "price": 300})
        return alice

    def test_full_history(self, client: TestClient, trades: str):
        response = client.get(f"/accounts/{trades}/history")

        assert response.status_code == 200
        data = response.json()
        assert len(data["entries"]) == 3
        assert data["side"] == "all"
        assert data["sort_by"] == "timestamp"
        assert data["order"] == "desc"

    def test_filter_by_type(self, client: TestClient, trades: str):
        response = client.get(f"/accounts/{trades}/history", params={"type": "buy"})

        entries = response.json()["entries"]
        assert len(entries) == 2
        assert {e["side"] for e in entries} == {"buy"}

    def test_sort_by_total(self, client: TestClient, trades: str):
        response = client.get(f"/accounts/{trades}/history", params={"sort_by": "total", "order": "asc"})

        totals = [Decimal(e["total"]) for e in response.json()["entries"]]
        assert totals == [Decimal("50"), Decimal("200"), Decimal("300")]

    def test_invalid_type(self, client: TestClient, trades: str):
        response = client.get(f"/accounts/{trades}/history", params={"type": "short"})

        assert response.status_code == 400

    def test_history_for_unknown_account(self, client: TestClient):
        assert client.get("/accounts/nobody/history").status_code == 404
