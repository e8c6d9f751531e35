"""
HTTP surface tests.

Requests go through httpx.ASGITransport against the FastAPI app. The FX
provider is replaced through a dependency override so no network is used.
"""

import json
from decimal import Decimal
from uuid import uuid4

import httpx
import pytest
import pytest_asyncio

from app.fx.client import FxClient
from app.fx.config import FxConfig, RetryConfig
from app.fx.service import FxService, get_fx_service
from app.main import app
from app.transactions.config import FeedConfig
from app.transactions.feed import FeedState, LedgerFeedPoller
from app.transactions.router import _event_stream
from tests.conftest import ACCOUNT_ID, ScriptedStore, make_entry


class ProviderSpy:
    def __init__(self, handler):
        self.handler = handler
        self.calls = 0

    def __call__(self, request):
        self.calls += 1
        return self.handler(request)


def eur_usd(request):
    return httpx.Response(
        200,
        json={
            "success": True,
            "query": {"from": "EUR", "to": "USD", "amount": 100},
            "info": {"rate": 1.085},
            "result": 108.5,
            "date": "2025-01-07",
        },
    )


@pytest_asyncio.fixture
async def api(db):
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app), base_url="http://test"
    ) as client:
        yield client
    app.dependency_overrides.clear()


def override_fx(clock, handler, **config):
    spy = ProviderSpy(handler)
    values = {"base_url": "https://fx.test", "access_key": "test-key"}
    values.update(config)
    client = FxClient(
        config=FxConfig(**values), transport=httpx.MockTransport(spy), clock=clock
    )
    app.dependency_overrides[get_fx_service] = lambda: FxService(client=client)
    return spy


@pytest.mark.asyncio
class TestHealth:
    async def test_root(self, api):
        response = await api.get("/")

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    async def test_healthz(self, api):
        response = await api.get("/healthz")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert "x-request-id" in response.headers


@pytest.mark.asyncio
class TestConversionQuote:
    """Tests for GET /conversion-quote."""

    async def test_quote(self, api, clock):
        spy = override_fx(clock, eur_usd)

        response = await api.get(
            "/conversion-quote", params={"from": "EUR", "to": "USD", "amount": "100.00"}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["from_currency"] == "EUR"
        assert body["to_currency"] == "USD"
        assert Decimal(body["rate"]) == Decimal("1.085")
        assert Decimal(body["converted"]) == Decimal("108.5")
        assert body["fetched_at"].startswith("2025-01-07T00:00:00")
        assert spy.calls == 1

    @pytest.mark.parametrize(
        "params",
        [
            {"from": "eur", "to": "USD", "amount": "1"},
            {"from": "EURO", "to": "USD", "amount": "1"},
            {"from": "EUR", "to": "USD", "amount": "0"},
            {"from": "EUR", "to": "USD", "amount": "-5"},
            {"from": "EUR", "to": "USD", "amount": "abc"},
            {"from": "EUR", "to": "USD"},
        ],
    )
    async def test_invalid_parameters_rejected_before_provider(self, api, clock, params):
        spy = override_fx(clock, eur_usd)

        response = await api.get("/conversion-quote", params=params)

        assert response.status_code == 400
        assert isinstance(response.json()["detail"], list)
        assert spy.calls == 0

    async def test_missing_access_key(self, api, clock):
        spy = override_fx(clock, eur_usd, access_key=None)

        response = await api.get(
            "/conversion-quote", params={"from": "EUR", "to": "USD", "amount": "1"}
        )

        assert response.status_code == 500
        assert "FX_ACCESS_KEY" in response.json()["detail"]
        assert spy.calls == 0

    async def test_non_numeric_rate_is_bad_gateway(self, api, clock):
        def bad_rate(request):
            return httpx.Response(
                200,
                json={"success": True, "info": {"rate": "n/a"}, "result": 108.5},
            )

        spy = override_fx(clock, bad_rate)

        response = await api.get(
            "/conversion-quote", params={"from": "EUR", "to": "USD", "amount": "1"}
        )

        assert response.status_code == 502
        assert spy.calls == 1

    async def test_remote_error_is_bad_gateway(self, api, clock):
        spy = override_fx(
            clock, lambda request: httpx.Response(500, json={"error": "down"})
        )

        response = await api.get(
            "/conversion-quote", params={"from": "EUR", "to": "USD", "amount": "1"}
        )

        assert response.status_code == 502
        assert spy.calls == 1

    async def test_exhausted_timeouts_are_gateway_timeout(self, api, clock):
        def timeout(request):
            raise httpx.ReadTimeout("timed out", request=request)

        spy = override_fx(clock, timeout, retry=RetryConfig(max_retries=2))

        response = await api.get(
            "/conversion-quote", params={"from": "EUR", "to": "USD", "amount": "1"}
        )

        assert response.status_code == 504
        assert spy.calls == 3


@pytest.mark.asyncio
class TestAccountsApi:
    """Tests for /api/accounts."""

    async def test_create_and_list(self, api):
        created = await api.post(
            "/api/accounts", json={"name": "Main", "currency_code": "EUR"}
        )
        await api.post("/api/accounts", json={"name": "Trip", "currency_code": "USD"})

        assert created.status_code == 201
        assert Decimal(created.json()["balance"]) == Decimal("0")

        everything = await api.get("/api/accounts")
        euros = await api.get("/api/accounts", params={"currency": "EUR"})

        assert len(everything.json()) == 2
        assert [a["id"] for a in euros.json()] == [created.json()["id"]]

    async def test_invalid_currency_rejected(self, api):
        response = await api.post(
            "/api/accounts", json={"name": "Main", "currency_code": "euro"}
        )

        assert response.status_code == 400


@pytest.mark.asyncio
class TestTransactionsApi:
    """Tests for ledger endpoints."""

    async def _account(self, api, currency="EUR"):
        response = await api.post(
            "/api/accounts", json={"name": "Main", "currency_code": currency}
        )
        return response.json()["id"]

    async def test_create_and_list(self, api):
        account_id = await self._account(api)

        created = await api.post(
            f"/api/accounts/{account_id}/transactions",
            json={
                "type": "expense",
                "amount": "12.30",
                "currency_code": "EUR",
                "description": "Lunch",
                "occurred_at": "2025-01-07T11:00:00Z",
            },
        )
        listed = await api.get(f"/api/accounts/{account_id}/transactions")

        assert created.status_code == 201
        assert listed.status_code == 200
        assert [e["description"] for e in listed.json()] == ["Lunch"]
        assert Decimal(listed.json()[0]["amount"]) == Decimal("12.30")

    async def test_offset_occurred_at_is_normalized(self, api):
        account_id = await self._account(api)
        url = f"/api/accounts/{account_id}/transactions"

        await api.post(
            url,
            json={
                "type": "expense",
                "amount": "1.00",
                "currency_code": "EUR",
                "description": "early",
                "occurred_at": "2025-01-07T10:00:00+05:00",
            },
        )
        await api.post(
            url,
            json={
                "type": "expense",
                "amount": "2.00",
                "currency_code": "EUR",
                "description": "late",
                "occurred_at": "2025-01-07T07:00:00Z",
            },
        )
        listed = (await api.get(url)).json()

        assert [e["description"] for e in listed] == ["late", "early"]
        assert listed[1]["occurred_at"].startswith("2025-01-07T05:00:00")

    async def test_non_positive_amount_rejected(self, api):
        account_id = await self._account(api)

        response = await api.post(
            f"/api/accounts/{account_id}/transactions",
            json={"type": "income", "amount": "0", "currency_code": "EUR"},
        )

        assert response.status_code == 400

    async def test_generate(self, api):
        account_id = await self._account(api, "GBP")

        response = await api.post(
            f"/api/accounts/{account_id}/transactions/generate", params={"count": 7}
        )
        listed = await api.get(f"/api/accounts/{account_id}/transactions")

        assert response.status_code == 201
        assert len(response.json()) == 7
        assert len(listed.json()) == 7
        assert {e["currency_code"] for e in listed.json()} == {"GBP"}

    async def test_generate_rejects_zero_count(self, api):
        account_id = await self._account(api)

        response = await api.post(
            f"/api/accounts/{account_id}/transactions/generate", params={"count": 0}
        )

        assert response.status_code == 400

    async def test_unknown_account_is_not_found(self, api):
        response = await api.get(f"/api/accounts/{uuid4()}/transactions")

        assert response.status_code == 404


@pytest.mark.asyncio
class TestLedgerStream:
    """Tests for GET /ledger-stream/{account_id}."""

    async def test_unknown_account_is_not_found(self, api):
        response = await api.get(f"/ledger-stream/{uuid4()}")

        assert response.status_code == 404
        assert "Account not found" in response.json()["detail"]

    async def test_malformed_account_id_is_rejected(self, api):
        response = await api.get("/ledger-stream/not-a-uuid")

        assert response.status_code == 400

    async def test_event_frames(self, clock):
        a = make_entry("A", minutes_ago=1)
        store = ScriptedStore([[a]])
        poller = LedgerFeedPoller(store=store, config=FeedConfig(), clock=clock)
        feed = await poller.open(ACCOUNT_ID)
        frames = _event_stream(feed)

        frame = await frames.__anext__()
        await frames.aclose()

        assert frame.startswith("data: ")
        assert frame.endswith("\n\n")
        payload = json.loads(frame[len("data: "):])
        assert payload["id"] == str(a.id)
        assert payload["description"] == "A"
        assert payload["type"] == "expense"
        assert feed.state == FeedState.CANCELLED
