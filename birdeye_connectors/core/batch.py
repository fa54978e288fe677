# birdeye_connectors/core/batch.py
from typing import Dict, Optional, Sequence, Type, TypeVar

from .envelope import parse_response
from .exceptions import ValidationError
from .httpx_client import HTTPClient
from .utils import chunked

V = TypeVar("V")

BATCH_SIZE = 100


async def get_multiple(
        http: HTTPClient,
        path: str,
        keys: Sequence[str],
        value_type: Type[V],
        param: str = "list_address",
        chunk_size: int = BATCH_SIZE,
) -> Dict[str, V]:
    """
    Récupère une map clé -> valeur pour un endpoint acceptant une liste séparée par des virgules.

    Les clés sont envoyées par tranches de `chunk_size`, une requête après l'autre.
    Tout ou rien : la première tranche en échec interrompt le lot et aucun résultat
    partiel n'est retourné. Les clés absentes de la réponse, ou à valeur null,
    sont simplement absentes du résultat.
    """
    if not keys:
        return {}

    # Validation complète avant toute requête
    if any(not key for key in keys):
        raise ValidationError(f"{path}: key list contains empty string")

    result: Dict[str, V] = {}
    for chunk in chunked(keys, chunk_size):
        body = await http.do_get(path, {param: ",".join(chunk)})
        values = parse_response(body, Dict[str, Optional[value_type]])
        # valeur null = clé inconnue du serveur, omise comme une clé absente
        result.update({key: value for key, value in values.items() if value is not None})

    http.logger.debug(
        "fetched batched keys | path=%s requested=%s received=%s",
        path, len(keys), len(result),
    )
    return result
