# assistente_cnae/domain/consulta/value_objects.py
from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class QueryId(StrEnum):
    """Conjunto fechado de consultas que o chat pode executar."""

    CNAE_TO_ITEM = "cnae_to_item"
    CNAE_DETAILS = "cnae_details"
    ITEM_TO_DETAILS = "item_to_details"
    ITEM_TO_NBS = "item_to_nbs"
    SEARCH_TEXT = "search_text"
    SEARCH_BY_RISK = "search_by_risk"
    CNAE_FULL_INFO = "cnae_full_info"
    CNAE_BY_MASCARA = "cnae_by_mascara"
    SEARCH_NBS = "search_nbs"
    LIST_ITEMS_BY_GROUP = "list_items_by_group"


@dataclass(frozen=True)
class ParametrosConsulta:
    """Parametros extraidos pelo classificador. Cada consulta le apenas os seus."""

    cnae: str | None = None
    cnae_mascara: str | None = None
    item_lc: str | None = None
    q: str | None = None
    grau_risco: str | None = None
    group: str | None = None
    limit: int | None = None

    def preenchidos(self) -> dict[str, str | int]:
        return {k: v for k, v in self.__dict__.items() if v is not None}
