# birdeye_connectors/birdeye/report.py
import asyncio
import time
from datetime import datetime
from typing import Any, Dict, Optional

from birdeye_connectors.birdeye.api_client import BirdeyeClient
from birdeye_connectors.birdeye.schema import PriceData, TokenOverview, TokenSecurity
from birdeye_connectors.core.config import get_birdeye_api_key, with_logger
from birdeye_connectors.core.logger import get_logger

logger = get_logger(__name__)


class TokenReport:
    """
    Agrégateur de données Birdeye pour générer un rapport Json de screening d'un token
    Fournit les méthodes suivantes:
      - instance.fetch_all_async(...)  -> asynchrone, parallélise les appels
      - instance.fetch_all(...)        -> wrapper synchrone (utilise asyncio.run, ferme le client construit)
      - async with TokenReport() as r  -> ferme le client construit en sortie
      - TokenReport.fetch(...)         -> méthode de classe pratique (factory)
    Output:
        - Une sortie Json représentant les données agrégées
    """

    def __init__(self, client: Optional[BirdeyeClient] = None, api_key: Optional[str] = None):
        # client construit ici : fermé par aclose() / fetch_all()
        self._owns_client = client is None
        if client is None:
            client = BirdeyeClient(api_key or get_birdeye_api_key(), with_logger(logger))
        self.client = client

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    async def __aenter__(self) -> "TokenReport":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    # -------- Méthode de classe pratique --------
    @classmethod
    async def fetch(cls, address: str, **kwargs) -> Dict[str, Any]:
        """
        :param address: adresse du mint du token
        :param kwargs: les keywords arguments de fetch_all_async
        :return: le rapport du token
        """
        async with BirdeyeClient(get_birdeye_api_key(), with_logger(logger)) as client:
            inst = cls(client)
            return await inst.fetch_all_async(address, **kwargs)

    # -------- Méthodes de filtrage --------
    def _filter_overview(self, overview: TokenOverview) -> Dict[str, Any]:
        return {
            "symbol": overview.symbol,
            "name": overview.name,
            "liquidite_usd": str(overview.liquidity),
            "volume_24h_usd": str(overview.volume_24h_usd),
            "market_cap": str(overview.market_cap),
            "holders": overview.holder,
        }

    def _filter_security(self, security: TokenSecurity) -> Dict[str, Any]:
        return {
            "mint_authority": security.has_mint_authority,
            "freeze_authority": security.has_freeze_authority,
            "top10_holder_percent": security.top10_holder_percent,
            "creator_percentage": security.creator_percentage,
            "token_2022": security.is_token_2022,
        }

    def _filter_price(self, price: PriceData) -> Dict[str, Any]:
        return {
            "prix": str(price.value),
            "variation_24h": str(price.price_change_24h),
            "maj": price.update_unix_time,
        }

    async def fetch_all_async(
        self,
        address: str,
        include_overview: bool = True,
        include_security: bool = True,
        include_price: bool = True,
    ) -> Dict[str, Any]:
        """
        Lance en parallèle les appels demandés et renvoie un résultat normalisé.
        La première erreur d'un appel est propagée telle quelle.
        """
        # Préparation des tâches selon les flags
        tasks = {}
        if include_overview:
            tasks["overview"] = self.client.get_token_overview(address)
        if include_security:
            tasks["security"] = self.client.get_token_security(address)
        if include_price:
            tasks["price"] = self.client.get_price(address)

        if not tasks:
            return {}

        start = time.perf_counter()
        results = dict(zip(tasks.keys(), await asyncio.gather(*tasks.values())))
        elapsed = time.perf_counter() - start
        logger.debug("fetch_all_async completed in %.3fs", elapsed)

        out: Dict[str, Any] = {}
        if "overview" in results:
            out["overview"] = self._filter_overview(results["overview"])
        if "security" in results:
            out["security"] = self._filter_security(results["security"])
        if "price" in results:
            out["price"] = self._filter_price(results["price"])

        return {
            "data": out,
            "token": {"address": address},
            "meta": {
                "source": "Birdeye",
                "fetch_time_s": round(elapsed, 3),
                "timestamp": datetime.now().timestamp()
            }
        }

    # -------- Wrapper synchrone --------
    def fetch_all(self, *args, **kwargs) -> Dict[str, Any]:
        """
        Wrapper synchrone. Attention : si tu appelles depuis une boucle asyncio active,
        tu dois utiliser fetch_all_async() directement.
        """
        return asyncio.run(self._fetch_all_and_close(*args, **kwargs))

    async def _fetch_all_and_close(self, *args, **kwargs) -> Dict[str, Any]:
        # la boucle se termine avec asyncio.run : le client httpx ne lui survit pas
        try:
            return await self.fetch_all_async(*args, **kwargs)
        finally:
            await self.aclose()
