# birdeye_connectors/core/exceptions.py
from typing import Optional


class BirdeyeError(Exception):
    """Erreur de base du connecteur Birdeye"""
    pass


class ValidationError(BirdeyeError, ValueError):
    """Entrée invalide détectée avant toute I/O (clé API vide, adresse vide...)."""
    pass


class TransportError(BirdeyeError):
    """Erreur de connexion / timeout, après épuisement des retries."""

    def __init__(self, message: str, path: str = ""):
        super().__init__(message)
        self.path = path


class DecodeError(BirdeyeError):
    """Réponse dont le JSON ne correspond pas à l'enveloppe attendue."""
    pass


class ApplicationError(BirdeyeError):
    """Enveloppe bien formée mais `success=false`. Aucun statut HTTP disponible."""
    pass


class APIError(BirdeyeError):
    """Réponse HTTP non-200 renvoyée par l'API Birdeye."""

    def __init__(self, status_code: int, message: str, path: str):
        super().__init__(status_code, message, path)
        self.status_code = status_code
        self.message = message
        self.path = path

    def __str__(self) -> str:
        return f"birdeye api error: {self.path} returned status {self.status_code}: {self.message}"

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404

    @property
    def is_rate_limited(self) -> bool:
        return self.status_code == 429

    @property
    def is_server_error(self) -> bool:
        return self.status_code >= 500

    @property
    def is_client_error(self) -> bool:
        # chevauche is_not_found / is_rate_limited
        return 400 <= self.status_code < 500


def as_api_error(err: Optional[BaseException]) -> Optional[APIError]:
    """
    Remonte la chaîne d'exceptions (__cause__ puis __context__, sauf `from None`) et retourne
    la première APIError trouvée, sinon None.
    """
    seen = set()
    while err is not None and id(err) not in seen:
        if isinstance(err, APIError):
            return err
        seen.add(id(err))
        if err.__cause__ is not None:
            err = err.__cause__
        elif err.__suppress_context__:
            # `raise ... from None` : le contexte a été masqué volontairement
            err = None
        else:
            err = err.__context__
    return None


def is_api_error(err: Optional[BaseException]) -> bool:
    return as_api_error(err) is not None
