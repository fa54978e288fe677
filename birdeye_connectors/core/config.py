# birdeye_connectors/core/config.py

import os
from dataclasses import dataclass, replace
from typing import Callable, Optional

import httpx
from dotenv import load_dotenv

from birdeye_connectors.core.logger import Logger, NoopLogger

load_dotenv()

DEFAULT_BASE_URL = "https://public-api.birdeye.so"
DEFAULT_TIMEOUT = 10.0
DEFAULT_MAX_RETRIES = 3
DEFAULT_RETRY_WAIT_MIN = 0.5
DEFAULT_RETRY_WAIT_MAX = 3.0


def get_birdeye_api_key() -> str:
    key = os.getenv("BIRDEYE_API_KEY")
    if not key:
        raise RuntimeError("BIRDEYE_API_KEY manquante. Définir la var d'environnement ou passer la clé au client.")
    return key


@dataclass(frozen=True)
class ClientConfig:
    """
    Configuration effective du client Birdeye.

    Construite une seule fois (défauts + options), immuable ensuite.
    Les durées sont exprimées en secondes.
    """
    base_url: str = DEFAULT_BASE_URL
    timeout: float = DEFAULT_TIMEOUT
    max_retries: int = DEFAULT_MAX_RETRIES
    retry_wait_min: float = DEFAULT_RETRY_WAIT_MIN
    retry_wait_max: float = DEFAULT_RETRY_WAIT_MAX
    logger: Logger = NoopLogger()
    # Remplace entièrement le client retryable (plus aucun retry intégré)
    http_client: Optional[httpx.AsyncClient] = None
    # Transport bas niveau utilisé par le client retryable (tests, proxy...)
    transport: Optional[httpx.AsyncBaseTransport] = None

    @classmethod
    def from_env(cls) -> "ClientConfig":
        """Lit les variables BIRDEYE_* optionnelles par-dessus les valeurs par défaut."""
        return cls(
            base_url=os.getenv("BIRDEYE_BASE_URL", DEFAULT_BASE_URL),
            timeout=float(os.getenv("BIRDEYE_TIMEOUT", DEFAULT_TIMEOUT)),
            max_retries=int(os.getenv("BIRDEYE_MAX_RETRIES", DEFAULT_MAX_RETRIES)),
            retry_wait_min=float(os.getenv("BIRDEYE_RETRY_WAIT_MIN", DEFAULT_RETRY_WAIT_MIN)),
            retry_wait_max=float(os.getenv("BIRDEYE_RETRY_WAIT_MAX", DEFAULT_RETRY_WAIT_MAX)),
        )


Option = Callable[[ClientConfig], ClientConfig]


# ---------------- Options ----------------
# Chaque option remplace exactement son champ. Aucune validation des valeurs.

def with_base_url(url: str) -> Option:
    return lambda cfg: replace(cfg, base_url=url)


def with_timeout(seconds: float) -> Option:
    return lambda cfg: replace(cfg, timeout=seconds)


def with_max_retries(n: int) -> Option:
    return lambda cfg: replace(cfg, max_retries=n)


def with_retry_wait(wait_min: float, wait_max: float) -> Option:
    return lambda cfg: replace(cfg, retry_wait_min=wait_min, retry_wait_max=wait_max)


def with_logger(logger: Optional[Logger]) -> Option:
    # None -> retour au logger silencieux
    return lambda cfg: replace(cfg, logger=logger if logger is not None else NoopLogger())


def with_http_client(client: httpx.AsyncClient) -> Option:
    """Remplace le client retryable. Les retries deviennent la responsabilité de l'appelant."""
    return lambda cfg: replace(cfg, http_client=client)


def with_transport(transport: httpx.AsyncBaseTransport) -> Option:
    return lambda cfg: replace(cfg, transport=transport)


def resolve_config(*options: Option, base: Optional[ClientConfig] = None) -> ClientConfig:
    """
    Applique les options dans l'ordre d'appel sur `base` (ou les défauts).
    La dernière option qui touche un champ l'emporte.
    """
    cfg = base if base is not None else ClientConfig()
    for option in options:
        cfg = option(cfg)
    return cfg
