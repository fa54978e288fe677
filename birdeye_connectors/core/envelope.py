# birdeye_connectors/core/envelope.py
import collections.abc
from typing import Generic, Optional, Type, TypeVar, get_origin

import pydantic
from pydantic import BaseModel, Field

from .exceptions import ApplicationError, DecodeError

DataT = TypeVar("DataT")


class Envelope(BaseModel, Generic[DataT]):
    """
    Enveloppe commune à toutes les réponses Birdeye :

        {"success": true, "message": "...", "data": {...}}
    """
    success: bool                    = Field(False, description="Statut applicatif (absent -> false)")
    message: Optional[str]           = Field(None, description="Message serveur (surtout en cas d'échec)")
    data: Optional[DataT]            = Field(None, description="Payload typé")


def parse_response(body: bytes, data_type: Type[DataT]) -> DataT:
    """
    Décode l'enveloppe et retourne uniquement `data`, validé selon `data_type`.

    - JSON invalide ou forme inattendue -> DecodeError
    - success=false ou absent -> ApplicationError (message serveur si présent)
    - data null -> {} / [] pour une map ou une liste, DecodeError pour un modèle
    """
    try:
        envelope = Envelope[data_type].model_validate_json(body)
    except pydantic.ValidationError as e:
        raise DecodeError(f"unmarshal response: {e}") from e

    if not envelope.success:
        if envelope.message:
            raise ApplicationError(f"birdeye api error: {envelope.message}")
        raise ApplicationError("birdeye api returned success=false")

    if envelope.data is None:
        # data null : map/liste vide, comme une réponse sans aucune entrée
        origin = get_origin(data_type) or data_type
        if origin in (dict, collections.abc.Mapping):
            return {}
        if origin in (list, collections.abc.Sequence):
            return []
        raise DecodeError("unmarshal response: success=true but data is missing")

    return envelope.data
