import asyncio
import json
from decimal import Decimal
from unittest.mock import AsyncMock

import httpx
import pytest

from birdeye_connectors.core.config import with_base_url, with_transport
from birdeye_connectors.core.exceptions import APIError, ApplicationError, ValidationError, as_api_error
from birdeye_connectors.birdeye.api_client import BirdeyeClient
from conftest import TEST_BASE_URL, load_bytes, load_json, wrap_failure, wrap_response

SOL = "So11111111111111111111111111111111111111112"
USDC = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"


@pytest.mark.asyncio
class TestBirdeyeClientOffline:

    def setup_method(self):
        """Initialisation du client avec une API Key factice"""
        self.client = BirdeyeClient(api_key="FAKE_KEY")

    async def test_get_price(self):
        self.client.http.do_get = AsyncMock(return_value=load_bytes("price_SOL.json"))

        price = await self.client.get_price(SOL)

        assert price.value == Decimal("1.5")
        assert price.update_unix_time == 1703980800
        assert price.update_human_time == "2023-12-31T00:00:00"
        assert price.price_change_24h == Decimal("5.25")
        self.client.http.do_get.assert_called_once_with("/defi/price", {"address": SOL})

    async def test_get_multiple_prices(self):
        self.client.http.do_get = AsyncMock(return_value=load_bytes("multi_price.json"))

        prices = await self.client.get_multiple_prices([SOL, USDC])

        assert prices[SOL] == Decimal("101.23")
        assert prices[USDC] == Decimal("1.0001")
        self.client.http.do_get.assert_called_once_with("/defi/multi_price", {"list_address": f"{SOL},{USDC}"})

    async def test_get_multiple_prices_omits_null_prices(self):
        self.client.http.do_get = AsyncMock(
            return_value=json.dumps(wrap_response({SOL: 101.23, "unknown-token": None})).encode())

        prices = await self.client.get_multiple_prices([SOL, "unknown-token"])

        assert prices == {SOL: Decimal("101.23")}

    async def test_get_multiple_prices_empty(self):
        self.client.http.do_get = AsyncMock()

        assert await self.client.get_multiple_prices([]) == {}
        self.client.http.do_get.assert_not_called()

    async def test_get_token_overview(self):
        self.client.http.do_get = AsyncMock(return_value=load_bytes("token_overview_USDC.json"))

        overview = await self.client.get_token_overview(USDC)

        assert overview.address == USDC
        assert overview.symbol == "USDC"
        assert overview.decimals == 6
        assert overview.logo_uri == "https://example.com/usdc.png"
        assert overview.liquidity == Decimal("1250000000.5")
        assert overview.volume_24h_usd == Decimal("850085000.25")
        assert overview.market_cap == Decimal("24500000000")
        assert overview.holder == 2450000
        assert overview.extensions.coingecko == "usd-coin"
        assert overview.extensions.telegram is None
        self.client.http.do_get.assert_called_once_with("/defi/token_overview", {"address": USDC})

    async def test_get_token_security(self):
        self.client.http.do_get = AsyncMock(return_value=load_bytes("token_security_USDC.json"))

        security = await self.client.get_token_security(USDC)

        assert security.has_mint_authority
        assert security.has_freeze_authority
        assert security.owner_address is None
        assert security.top10_holder_percent == "0.4002"
        assert security.mutable_metadata
        assert security.transfer_fee_data is None

    async def test_get_token_security_without_authorities(self):
        self.client.http.do_get = AsyncMock(return_value=load_bytes("token_security_safe.json"))

        security = await self.client.get_token_security(USDC)

        assert not security.has_mint_authority
        assert not security.has_freeze_authority
        # valeurs numériques converties en texte
        assert security.creator_balance == "1250.5"
        assert security.is_token_2022
        assert security.transfer_fee_data.transfer_fee_bps == 150

    @pytest.mark.parametrize("method", ["get_price", "get_token_overview", "get_token_security"])
    async def test_empty_address_is_rejected_before_io(self, method):
        self.client.http.do_get = AsyncMock()

        with pytest.raises(ValidationError):
            await getattr(self.client, method)("")

        self.client.http.do_get.assert_not_called()

    async def test_empty_address_in_list_is_rejected_before_io(self):
        self.client.http.do_get = AsyncMock()

        with pytest.raises(ValidationError):
            await self.client.get_multiple_prices([SOL, ""])

        self.client.http.do_get.assert_not_called()

    async def test_success_false_is_application_error(self):
        self.client.http.do_get = AsyncMock(return_value=json.dumps(wrap_failure()).encode())

        with pytest.raises(ApplicationError) as exc_info:
            await self.client.get_token_overview(USDC)

        assert as_api_error(exc_info.value) is None


@pytest.mark.asyncio
class TestBirdeyeClientWire:

    async def test_token_overview_not_found(self, make_client, fake_server):
        client = make_client(max_retries=3)

        with pytest.raises(APIError) as exc_info:
            await client.get_token_overview("unknown-token")

        err = exc_info.value
        assert err.status_code == 404
        assert err.path == "/defi/token_overview"
        assert err.is_not_found
        assert not err.is_rate_limited
        assert json.loads(err.message) == {"error": "not found"}
        # 404 : jamais rejoué
        assert len(fake_server.requests) == 1

    async def test_get_price_roundtrip(self, make_client, fake_server, recording_logger):
        fake_server.responses["/defi/price"] = load_json("price_SOL.json")
        client = make_client()

        price = await client.get_price(SOL)

        assert price.value == Decimal("1.5")
        assert fake_server.requests[0].url.params["address"] == SOL
        assert "debug" in recording_logger.levels()

    async def test_rate_limited_then_ok(self, make_client, fake_server):
        attempts = {"count": 0}

        def rate_limited_once(request):
            attempts["count"] += 1
            if attempts["count"] == 1:
                return httpx.Response(429, text="Too many requests")
            return httpx.Response(200, json=load_json("price_SOL.json"))

        fake_server.responses["/defi/price"] = rate_limited_once
        client = make_client(max_retries=3)

        price = await client.get_price(SOL)

        assert price.value == Decimal("1.5")
        assert attempts["count"] == 2

    async def test_multi_price_batches(self, make_client, fake_server):
        def echo(request):
            keys = request.url.params["list_address"].split(",")
            return httpx.Response(200, json=wrap_response({k: 1.0 for k in keys}))

        fake_server.responses["/defi/multi_price"] = echo
        client = make_client()
        addresses = [f"token{i}" for i in range(150)]

        prices = await client.get_multiple_prices(addresses)

        assert len(fake_server.calls("/defi/multi_price")) == 2
        assert set(prices) == set(addresses)

    async def test_batch_cancellation_aborts_remaining_chunks(self):
        class SlowSecondChunk(httpx.AsyncBaseTransport):
            def __init__(self):
                self.calls = 0
                self.second_started = asyncio.Event()

            async def handle_async_request(self, request):
                self.calls += 1
                if self.calls == 2:
                    self.second_started.set()
                    await asyncio.sleep(30)
                keys = request.url.params["list_address"].split(",")
                return httpx.Response(200, json=wrap_response({k: 1.0 for k in keys}))

        transport = SlowSecondChunk()
        client = BirdeyeClient("test-api-key", with_base_url(TEST_BASE_URL), with_transport(transport))

        task = asyncio.create_task(client.get_multiple_prices([f"token{i}" for i in range(250)]))
        await transport.second_started.wait()
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
        # la troisième tranche n'est jamais envoyée
        assert transport.calls == 2

    async def test_client_is_reusable_after_error(self, make_client, fake_server):
        client = make_client()

        with pytest.raises(APIError):
            await client.get_price(SOL)

        fake_server.responses["/defi/price"] = load_json("price_SOL.json")
        assert (await client.get_price(SOL)).value == Decimal("1.5")

    async def test_concurrent_calls_share_one_client(self, make_client, fake_server):
        fake_server.responses["/defi/price"] = load_json("price_SOL.json")
        fake_server.responses["/defi/token_overview"] = load_json("token_overview_USDC.json")
        client = make_client()

        price, overview = await asyncio.gather(client.get_price(SOL), client.get_token_overview(USDC))

        assert price.value == Decimal("1.5")
        assert overview.symbol == "USDC"
        await client.aclose()
