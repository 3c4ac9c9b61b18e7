"""Unit tests for the pool API endpoints."""

from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient

from cpamm import __version__
from cpamm.api.endpoints import get_exchange
from cpamm.api.main import app
from cpamm.config import PoolConfig
from cpamm.service import Exchange
from tests.helpers import ALICE, BOB, DAI, FAR_FUTURE, USDC, WETH

POOL_ADDRESS = "pool:WETH/DAI"


@pytest.fixture
def exchange() -> Exchange:
    """Exchange with hand-checkable pool parameters."""
    return Exchange.create(
        base_asset=WETH,
        config=PoolConfig(min_base_liquidity=1, swap_bonus_amount=1, price_unit=1),
    )


@pytest.fixture
def client(exchange) -> Iterator[TestClient]:
    """Create a test client bound to a fresh exchange."""
    app.dependency_overrides[get_exchange] = lambda: exchange
    yield TestClient(app)
    app.dependency_overrides.clear()


def fund(client: TestClient, holder: str, asset: str, amount: int) -> None:
    """Credit holder and approve the WETH/DAI pool to pull it."""
    response = client.post(f"/ledger/{asset}/credit", json={"holder": holder, "amount": str(amount)})
    assert response.status_code == 200
    response = client.post(
        f"/ledger/{asset}/approve",
        json={"owner": holder, "spender": POOL_ADDRESS, "amount": str(amount)},
    )
    assert response.status_code == 204


@pytest.fixture
def funded(client) -> TestClient:
    """Client whose DAI pool alice bootstrapped with 100 / 100."""
    assert client.post("/pools", json={"asset": DAI}).status_code == 201
    fund(client, ALICE, WETH, 100)
    fund(client, ALICE, DAI, 100)
    response = client.post(
        f"/pools/{DAI}/deposit",
        json={
            "provider": ALICE,
            "base_amount": "100",
            "max_quote_to_deposit": "100",
            "deadline": FAR_FUTURE,
        },
    )
    assert response.status_code == 200
    return client


class TestHealth:
    def test_health_check(self, client):
        """Health reports status and package version."""
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "version": __version__}


class TestPools:
    """Tests for pool creation and views."""

    def test_create_pool(self, client):
        """A new pool starts empty with no price."""
        response = client.post("/pools", json={"asset": DAI})

        assert response.status_code == 201
        data = response.json()
        assert data["address"] == POOL_ADDRESS
        assert data["status"] == "empty"
        assert data["reserve_base"] == "0"
        assert data["total_shares"] == "0"
        assert data["price_of_one_base_in_quote"] is None

    def test_duplicate_pool(self, client):
        """A second pool for the same asset conflicts."""
        client.post("/pools", json={"asset": DAI})
        response = client.post("/pools", json={"asset": DAI})

        assert response.status_code == 409
        assert response.json()["error"] == "pool_already_exists"

    def test_pool_for_base_asset(self, client):
        """Pairing the base asset with itself is rejected."""
        response = client.post("/pools", json={"asset": WETH})
        assert response.status_code == 400
        assert response.json()["error"] == "invalid_asset_pair"

    def test_list_pools(self, client):
        """Pools are listed in creation order."""
        client.post("/pools", json={"asset": DAI})
        client.post("/pools", json={"asset": USDC})

        response = client.get("/pools")

        assert response.status_code == 200
        assert [pool["quote_asset"] for pool in response.json()] == [DAI, USDC]

    def test_unknown_pool(self, client):
        """Unknown asset returns 404."""
        response = client.get(f"/pools/{USDC}")
        assert response.status_code == 404

    def test_funded_view(self, funded):
        """Funded view reports reserves, shares and prices."""
        data = funded.get(f"/pools/{DAI}").json()

        assert data["status"] == "funded"
        assert data["reserve_base"] == "100"
        assert data["reserve_quote"] == "100"
        assert data["total_shares"] == "100"
        assert data["swap_count"] == 0
        assert data["minimum_base_liquidity"] == "1"
        # price_unit is 1, which floors to 0 on a pool this shallow
        assert data["price_of_one_base_in_quote"] == "0"


class TestQuotes:
    """Tests for the read-only quote endpoints."""

    def test_exact_input_quote(self, funded):
        """Exact input quote matches the forward formula."""
        response = funded.get(
            f"/pools/{DAI}/quote/exact-input", params={"input_asset": DAI, "amount": "10"}
        )

        assert response.status_code == 200
        assert response.json() == {
            "input_asset": DAI,
            "input_amount": "10",
            "output_asset": WETH,
            "output_amount": "9",
        }

    def test_exact_output_quote(self, funded):
        """Exact output quote matches the inverse formula."""
        response = funded.get(
            f"/pools/{DAI}/quote/exact-output", params={"input_asset": DAI, "amount": "9"}
        )

        assert response.status_code == 200
        assert response.json()["input_amount"] == "99"

    def test_foreign_input_asset(self, funded):
        """Assets outside the pool return the structured invalid_asset_pair error."""
        response = funded.get(
            f"/pools/{DAI}/quote/exact-input", params={"input_asset": USDC, "amount": "10"}
        )
        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "invalid_asset_pair"
        assert body["context"]["input_asset"] == USDC
        assert "detail" in body

    @pytest.mark.parametrize("amount", ["-1", "abc", str(2**256)])
    def test_invalid_amount(self, funded, amount):
        """Malformed or out-of-range amounts fail validation."""
        response = funded.get(
            f"/pools/{DAI}/quote/exact-input", params={"input_asset": DAI, "amount": amount}
        )
        assert response.status_code == 422

    def test_zero_amount(self, funded):
        """Zero amount maps to a zero_amount error."""
        response = funded.get(
            f"/pools/{DAI}/quote/exact-input", params={"input_asset": DAI, "amount": "0"}
        )
        assert response.status_code == 400
        assert response.json()["error"] == "zero_amount"


class TestLiquidityEndpoints:
    """Tests for deposit and withdraw."""

    def test_deposit_and_withdraw(self, funded):
        """Deposit mints pro-rata shares and withdraw pays them back."""
        fund(funded, BOB, WETH, 50)
        fund(funded, BOB, DAI, 80)

        response = funded.post(
            f"/pools/{DAI}/deposit",
            json={
                "provider": BOB,
                "base_amount": "50",
                "min_shares_to_mint": "50",
                "max_quote_to_deposit": "80",
                "deadline": FAR_FUTURE,
            },
        )
        assert response.status_code == 200
        assert response.json() == {"shares_minted": "50"}

        response = funded.post(
            f"/pools/{DAI}/withdraw",
            json={
                "provider": BOB,
                "shares_to_burn": "50",
                "min_base_out": "1",
                "min_quote_out": "1",
                "deadline": FAR_FUTURE,
            },
        )
        assert response.status_code == 200
        assert response.json() == {"base_amount": "50", "quote_amount": "50"}
        assert funded.get(f"/ledger/{DAI}/{BOB}").json()["balance"] == "80"

    def test_max_quote_exceeded(self, funded):
        """Slippage errors carry their threshold in context."""
        fund(funded, BOB, WETH, 50)
        fund(funded, BOB, DAI, 50)

        response = funded.post(
            f"/pools/{DAI}/deposit",
            json={
                "provider": BOB,
                "base_amount": "50",
                "max_quote_to_deposit": "49",
                "deadline": FAR_FUTURE,
            },
        )

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "max_quote_exceeded"
        assert body["context"] == {"maximum": 49, "required": 50}

    def test_expired_deadline(self, funded):
        """Expired deadline maps to 400."""
        response = funded.post(
            f"/pools/{DAI}/withdraw",
            json={
                "provider": ALICE,
                "shares_to_burn": "1",
                "min_base_out": "1",
                "min_quote_out": "1",
                "deadline": 1,
            },
        )
        assert response.status_code == 400
        assert response.json()["error"] == "deadline_expired"

    def test_missing_allowance(self, funded):
        """Ledger errors map to 400 and roll the deposit back."""
        funded.post(f"/ledger/{WETH}/credit", json={"holder": BOB, "amount": "50"})
        funded.post(f"/ledger/{DAI}/credit", json={"holder": BOB, "amount": "50"})

        response = funded.post(
            f"/pools/{DAI}/deposit",
            json={
                "provider": BOB,
                "base_amount": "50",
                "max_quote_to_deposit": "50",
                "deadline": FAR_FUTURE,
            },
        )

        assert response.status_code == 400
        assert response.json()["error"] == "insufficient_allowance"
        assert funded.get(f"/pools/{DAI}").json()["total_shares"] == "100"

    def test_malformed_amount(self, funded):
        """Fractional amounts fail validation."""
        response = funded.post(
            f"/pools/{DAI}/deposit",
            json={
                "provider": BOB,
                "base_amount": "1.5",
                "max_quote_to_deposit": "50",
                "deadline": FAR_FUTURE,
            },
        )
        assert response.status_code == 422


class TestSwapEndpoints:
    """Tests for the swap endpoints."""

    def test_swap_exact_input(self, funded):
        """Exact input swap moves reserves and ticks the counter."""
        fund(funded, BOB, DAI, 10)

        response = funded.post(
            f"/pools/{DAI}/swap/exact-input",
            json={
                "swapper": BOB,
                "input_asset": DAI,
                "input_amount": "10",
                "output_asset": WETH,
                "min_output": "9",
                "deadline": FAR_FUTURE,
            },
        )

        assert response.status_code == 200
        assert response.json()["output_amount"] == "9"
        assert response.json()["bonus"] == "0"
        pool = funded.get(f"/pools/{DAI}").json()
        assert (pool["reserve_base"], pool["reserve_quote"]) == ("91", "110")
        assert pool["swap_count"] == 1

    def test_swap_exact_output(self, funded):
        """Exact output swap charges the inverse price."""
        fund(funded, BOB, DAI, 200)

        response = funded.post(
            f"/pools/{DAI}/swap/exact-output",
            json={
                "swapper": BOB,
                "input_asset": DAI,
                "output_asset": WETH,
                "output_amount": "9",
                "deadline": FAR_FUTURE,
            },
        )

        assert response.status_code == 200
        assert response.json()["input_amount"] == "99"
        assert funded.get(f"/ledger/{WETH}/{BOB}").json()["balance"] == "9"

    def test_slippage(self, funded):
        """Output below min_output is reported with the actual amount."""
        fund(funded, BOB, DAI, 10)

        response = funded.post(
            f"/pools/{DAI}/swap/exact-input",
            json={
                "swapper": BOB,
                "input_asset": DAI,
                "input_amount": "10",
                "output_asset": WETH,
                "min_output": "10",
                "deadline": FAR_FUTURE,
            },
        )

        assert response.status_code == 400
        assert response.json()["context"]["actual"] == 9

    def test_swap_on_unknown_pool(self, client):
        """Swapping on a missing pool returns 404."""
        response = client.post(
            f"/pools/{USDC}/swap/exact-input",
            json={
                "swapper": BOB,
                "input_asset": USDC,
                "input_amount": "10",
                "output_asset": WETH,
                "deadline": FAR_FUTURE,
            },
        )
        assert response.status_code == 404

    def test_tenth_swap_reports_bonus(self, funded):
        """The swap that pays the loyalty bonus reports it in the response."""
        fund(funded, BOB, DAI, 10)
        request = {
            "swapper": BOB,
            "input_asset": DAI,
            "input_amount": "1",
            "output_asset": WETH,
            "deadline": FAR_FUTURE,
        }

        bonuses = [
            funded.post(f"/pools/{DAI}/swap/exact-input", json=request).json()["bonus"]
            for _ in range(10)
        ]

        assert bonuses == ["0"] * 9 + ["1"]
        assert funded.get(f"/ledger/{WETH}/{BOB}").json()["balance"] == "1"

    def test_swap_on_empty_pool(self, client):
        """Balances sent to an empty pool's address are not tradable."""
        assert client.post("/pools", json={"asset": DAI}).status_code == 201
        client.post(f"/ledger/{WETH}/credit", json={"holder": POOL_ADDRESS, "amount": "1000"})
        client.post(f"/ledger/{DAI}/credit", json={"holder": POOL_ADDRESS, "amount": "1000"})
        fund(client, BOB, DAI, 100)

        response = client.post(
            f"/pools/{DAI}/swap/exact-input",
            json={
                "swapper": BOB,
                "input_asset": DAI,
                "input_amount": "100",
                "output_asset": WETH,
                "deadline": FAR_FUTURE,
            },
        )

        assert response.status_code == 400
        assert response.json()["error"] == "empty_pool"
        assert client.get(f"/ledger/{DAI}/{BOB}").json()["balance"] == "100"
