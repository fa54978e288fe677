from typing import Iterator, List, Sequence, TypeVar

T = TypeVar("T")

# --- Fonctions utilitaires ---

TRUNCATION_MARKER = "...(truncated)"


def truncate_for_log(text: str, max_len: int = 500) -> str:
    """Tronque un texte pour le log, suffixé par un marqueur s'il a été coupé."""
    if len(text) <= max_len:
        return text
    return text[:max_len] + TRUNCATION_MARKER


def chunked(items: Sequence[T], size: int) -> Iterator[List[T]]:
    """Découpe `items` en tranches consécutives d'au plus `size` éléments."""
    for start in range(0, len(items), size):
        yield list(items[start:start + size])
