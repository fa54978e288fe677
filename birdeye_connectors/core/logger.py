import logging
import os
from typing import Any, Protocol, runtime_checkable

from dotenv import load_dotenv

# charge immédiatement le .env
load_dotenv()


def get_logger(name: str) -> logging.Logger:
    """Configure un logger standardisé avec un niveau selon l'environnement"""
    log_level = os.getenv("LOG_LEVEL", "INFO").upper()

    logger = logging.getLogger(name)
    if not logger.hasHandlers():
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            fmt="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.setLevel(log_level)

        logger.debug("Logger initialized for '%s' with level=%s", name, log_level)
    return logger


@runtime_checkable
class Logger(Protocol):
    """
    Contrat minimal attendu par le client. Un `logging.Logger` le respecte tel quel,
    tout comme un adaptateur structlog/loguru exposant ces quatre méthodes.
    """

    def debug(self, msg: str, *args: Any, **kwargs: Any) -> None: ...

    def info(self, msg: str, *args: Any, **kwargs: Any) -> None: ...

    def warning(self, msg: str, *args: Any, **kwargs: Any) -> None: ...

    def error(self, msg: str, *args: Any, **kwargs: Any) -> None: ...


class NoopLogger:
    """Logger par défaut : ignore tous les messages."""

    def debug(self, msg: str, *args: Any, **kwargs: Any) -> None:
        pass

    def info(self, msg: str, *args: Any, **kwargs: Any) -> None:
        pass

    def warning(self, msg: str, *args: Any, **kwargs: Any) -> None:
        pass

    def error(self, msg: str, *args: Any, **kwargs: Any) -> None:
        pass

    def __eq__(self, other: object) -> bool:
        return isinstance(other, NoopLogger)

    def __hash__(self) -> int:
        return hash(NoopLogger)


class SafeLogger:
    """
    Enveloppe un logger injecté : une exception levée par le logger
    ne doit jamais interrompre une requête.
    Même politique que `logging.Handler.handleError` (message ignoré).
    """

    def __init__(self, logger: Logger):
        self._logger = logger

    def _emit(self, level: str, msg: str, *args: Any, **kwargs: Any) -> None:
        try:
            getattr(self._logger, level)(msg, *args, **kwargs)
        except Exception:
            pass

    def debug(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._emit("debug", msg, *args, **kwargs)

    def info(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._emit("info", msg, *args, **kwargs)

    def warning(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._emit("warning", msg, *args, **kwargs)

    def error(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._emit("error", msg, *args, **kwargs)
