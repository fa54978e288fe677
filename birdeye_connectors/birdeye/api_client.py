# birdeye_connectors/birdeye/api_client.py

from decimal import Decimal
from typing import Dict, Optional, Sequence

from birdeye_connectors.core.batch import get_multiple
from birdeye_connectors.core.config import Option, resolve_config
from birdeye_connectors.core.envelope import parse_response
from birdeye_connectors.core.exceptions import ValidationError
from birdeye_connectors.core.httpx_client import HTTPClient
from birdeye_connectors.birdeye.schema import PriceData, TokenOverview, TokenSecurity


class BirdeyeClient:
    """
    Client pour l'API Birdeye (analytics DeFi Solana).

    Fournit les méthodes pour accéder aux API:
     - get_price(address)                 /defi/price
     - get_multiple_prices(addresses)     /defi/multi_price (par lots de 100)
     - get_token_overview(address)        /defi/token_overview
     - get_token_security(address)        /defi/token_security

    Exemple:
        async with BirdeyeClient("api-key", with_timeout(30), with_max_retries(5)) as client:
            price = await client.get_price("So11111111111111111111111111111111111111112")
    """

    PRICE_PATH = "/defi/price"
    MULTI_PRICE_PATH = "/defi/multi_price"
    TOKEN_OVERVIEW_PATH = "/defi/token_overview"
    TOKEN_SECURITY_PATH = "/defi/token_security"

    def __init__(self, api_key: str, *options: Option, http_client: Optional[HTTPClient] = None):
        if not api_key:
            raise ValidationError("api key is required")
        self.api_key = api_key
        # HTTPClient wrapper (testable / injectable)
        self.http = http_client if http_client is not None else HTTPClient(api_key, resolve_config(*options))
        self.logger = self.http.logger

    # ---------------- Validation utilitaires ----------------
    @staticmethod
    def _validate_address(address: str, path: str):
        if not address:
            raise ValidationError(f"{path}: address is required")

    # ---------------- Endpoints ----------------
    async def get_price(self, address: str) -> PriceData:
        """
        Prix courant d'un token.
        """
        self._validate_address(address, self.PRICE_PATH)

        body = await self.http.do_get(self.PRICE_PATH, {"address": address})
        price = parse_response(body, PriceData)

        self.logger.debug("fetched token price | address=%s price=%s change_24h=%s",
                          address, price.value, price.price_change_24h)
        return price

    async def get_multiple_prices(self, addresses: Sequence[str]) -> Dict[str, Decimal]:
        """
        Prix de plusieurs tokens : map adresse -> prix.
        Découpe automatiquement en lots de 100 adresses. Les prix manquants sont omis.
        """
        return await get_multiple(self.http, self.MULTI_PRICE_PATH, addresses, Decimal, param="list_address")

    async def get_token_overview(self, address: str) -> TokenOverview:
        """
        Vue marché d'un token : liquidité, volumes, holders, prix et market cap.
        """
        self._validate_address(address, self.TOKEN_OVERVIEW_PATH)

        body = await self.http.do_get(self.TOKEN_OVERVIEW_PATH, {"address": address})
        overview = parse_response(body, TokenOverview)

        self.logger.debug(
            "fetched token overview | address=%s symbol=%s liquidity=%s volume_24h=%s holders=%s",
            address, overview.symbol, overview.liquidity, overview.volume_24h_usd, overview.holder,
        )
        return overview

    async def get_token_security(self, address: str) -> TokenSecurity:
        """
        Informations de sécurité : mint/freeze authority, concentration des holders,
        spécificités Token-2022.
        """
        self._validate_address(address, self.TOKEN_SECURITY_PATH)

        body = await self.http.do_get(self.TOKEN_SECURITY_PATH, {"address": address})
        security = parse_response(body, TokenSecurity)

        self.logger.debug(
            "fetched token security | address=%s has_mint_auth=%s has_freeze_auth=%s top10_pct=%s",
            address, security.has_mint_authority, security.has_freeze_authority, security.top10_holder_percent,
        )
        return security

    async def aclose(self) -> None:
        await self.http.aclose()

    async def __aenter__(self) -> "BirdeyeClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()
