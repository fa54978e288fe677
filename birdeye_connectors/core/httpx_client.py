from typing import Any, Mapping, Optional
from urllib.parse import urlencode

import httpx
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    retry_if_result,
    stop_after_attempt,
    wait_exponential,
)
from tenacity.wait import wait_base

from .config import ClientConfig
from .exceptions import APIError, TransportError, ValidationError
from .logger import SafeLogger
from .utils import truncate_for_log

# Le client ne parle qu'à une seule chaîne, même si l'API en supporte plusieurs.
CHAIN_SOLANA = "solana"

LOG_BODY_MAX_LEN = 500


def should_retry_response(response: httpx.Response) -> bool:
    """Rate limiting (429) et erreurs serveur (5xx) sont rejoués."""
    return response.status_code == 429 or response.status_code >= 500


def parse_retry_after(response: httpx.Response) -> Optional[float]:
    """Valeur en secondes du header Retry-After sur un 429/503, sinon None."""
    if response.status_code not in (429, 503):
        return None
    value = response.headers.get("Retry-After")
    if value is None:
        return None
    try:
        return max(0.0, float(value))
    except ValueError:
        return None


class BackoffWait(wait_base):
    """
    Attente exponentielle bornée : retry_wait_min * 2**n, ramenée dans
    [retry_wait_min, retry_wait_max]. Un Retry-After serveur est respecté,
    plafonné à retry_wait_max.
    """

    def __init__(self, wait_min: float, wait_max: float):
        self.wait_min = wait_min
        self.wait_max = wait_max
        self._exponential = wait_exponential(multiplier=wait_min, min=wait_min, max=wait_max)

    def __call__(self, retry_state: RetryCallState) -> float:
        outcome = retry_state.outcome
        if outcome is not None and not outcome.failed:
            retry_after = parse_retry_after(outcome.result())
            if retry_after is not None:
                return min(retry_after, self.wait_max)
        return self._exponential(retry_state)


def _last_outcome(retry_state: RetryCallState) -> Any:
    # retries épuisés : dernière réponse retournée telle quelle, ou exception relancée
    return retry_state.outcome.result()


class HTTPClient:
    """
    Client HTTP asynchrone basé sur httpx pour l'API Birdeye.

    - Authentifie chaque requête (X-API-KEY, Accept, x-chain).
    - Rejoue les erreurs de connexion, 429 et 5xx via tenacity (backoff exponentiel),
      sauf si un client httpx personnalisé a été fourni.
    - Normalise tout statut non-200 en APIError.
    """

    def __init__(self, api_key: str, config: Optional[ClientConfig] = None):
        if not api_key:
            raise ValidationError("api key is required")

        self.config = config if config is not None else ClientConfig()
        self.api_key = api_key
        self.base_url = self.config.base_url
        self.logger = SafeLogger(self.config.logger)

        if self.config.http_client is not None:
            # client fourni : aucun retry intégré, et on ne le ferme pas nous-mêmes
            self._client = self.config.http_client
            self._owns_client = False
            self._retrying: Optional[AsyncRetrying] = None
        else:
            self._client = httpx.AsyncClient(timeout=self.config.timeout, transport=self.config.transport)
            self._owns_client = True
            self._retrying = AsyncRetrying(
                stop=stop_after_attempt(max(self.config.max_retries, 0) + 1),
                wait=BackoffWait(self.config.retry_wait_min, self.config.retry_wait_max),
                retry=(retry_if_exception_type(httpx.TransportError)
                       | retry_if_result(should_retry_response)),
                before_sleep=self._log_retry,
                retry_error_callback=_last_outcome,
            )

    @property
    def retries_enabled(self) -> bool:
        return self._retrying is not None

    def build_url(self, path: str, params: Optional[Mapping[str, Any]] = None) -> str:
        url = self.base_url + path
        if params:
            url = url + "?" + urlencode(sorted(params.items()), doseq=True)
        return url

    def _headers(self) -> dict:
        return {
            "X-API-KEY": self.api_key,
            "Accept": "application/json",
            "x-chain": CHAIN_SOLANA,
        }

    def _log_retry(self, retry_state: RetryCallState) -> None:
        outcome = retry_state.outcome
        if outcome.failed:
            reason = repr(outcome.exception())
        else:
            reason = f"status {outcome.result().status_code}"
        self.logger.warning(
            "birdeye api retry | attempt=%s reason=%s wait=%.3fs",
            retry_state.attempt_number, reason, retry_state.next_action.sleep if retry_state.next_action else 0.0,
        )

    async def _send(self, url: str) -> httpx.Response:
        # requête non streamée : httpx lit le corps et libère la connexion
        return await self._client.get(url, headers=self._headers())

    async def _execute(self, url: str) -> httpx.Response:
        if self._retrying is None:
            return await self._send(url)
        # copie par appel : aucun état partagé entre coroutines concurrentes
        return await self._retrying.copy()(self._send, url)

    async def do_get(self, path: str, params: Optional[Mapping[str, Any]] = None) -> bytes:
        """
        GET authentifié sur `base_url + path`.
        Retourne le corps brut d'une réponse 200, lève APIError / TransportError sinon.
        """
        url = self.build_url(path, params)
        self.logger.debug("birdeye api request | method=GET path=%s", path)

        try:
            response = await self._execute(url)
        except httpx.InvalidURL as e:
            # base_url / path mal formés : erreur de l'appelant, jamais rejouée
            self.logger.error("birdeye api invalid url | path=%s error=%s", path, e)
            raise ValidationError(f"{path}: invalid request url: {e}") from e
        except httpx.HTTPError as e:
            self.logger.error("birdeye api request failed | path=%s error=%s", path, e)
            raise TransportError(f"execute request: {e}", path=path) from e

        if response.status_code != 200:
            body = response.text
            self.logger.error(
                "birdeye api error response | path=%s status_code=%s body=%s",
                path, response.status_code, truncate_for_log(body, LOG_BODY_MAX_LEN),
            )
            raise APIError(status_code=response.status_code, message=body, path=path)

        return response.content

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "HTTPClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()
