# assistente_cnae/domain/cnae/value_objects.py
from __future__ import annotations

import re
from enum import StrEnum

_NAO_DIGITO = re.compile(r"\D")
_ITEM_LC = re.compile(r"^0*(\d{1,2})\.(\d{2})$")


class GrauRisco(StrEnum):
    ALTO = "ALTO"
    MEDIO = "MÉDIO"  # o banco grava com acento
    BAIXO = "BAIXO"

    @classmethod
    def normalizar(cls, raw: str | None) -> GrauRisco | None:
        """Aceita ALTO/MEDIO/MÉDIO/BAIXO em qualquer caixa. None se nao reconhecer."""
        if not raw:
            return None
        valor = raw.strip().upper()
        if valor in ("MEDIO", "MÉDIO"):
            return cls.MEDIO
        if valor == "ALTO":
            return cls.ALTO
        if valor == "BAIXO":
            return cls.BAIXO
        return None


def apenas_digitos(raw: str) -> str:
    return _NAO_DIGITO.sub("", raw or "")


def mascarar_cnae(digitos: str) -> str:
    """6920601 -> 6920-6/01. Devolve a entrada se nao tiver 7 digitos."""
    if len(digitos) != 7 or not digitos.isdigit():
        return digitos
    return f"{digitos[:4]}-{digitos[4]}/{digitos[5:]}"


def normalizar_item_lc(raw: str) -> str:
    """Remove zeros a esquerda do grupo: 01.03 -> 1.03, 17.12 -> 17.12.

    Entradas fora do formato X.XX / XX.XX voltam apenas trimadas.
    """
    valor = (raw or "").strip()
    match = _ITEM_LC.match(valor)
    if match is None:
        return valor
    return f"{int(match.group(1))}.{match.group(2)}"


class CodigoCnae:
    """Value Object para CNAE completo (7 digitos). Aceita 6920601 ou 6920-6/01."""

    __slots__ = ("_valor",)

    def __init__(self, raw: str) -> None:
        digitos = apenas_digitos(raw)
        if len(digitos) != 7:
            raise ValueError(f"CNAE invalido: comprimento {len(digitos)}, esperado 7")
        self._valor = digitos

    @property
    def valor(self) -> str:
        return self._valor

    @property
    def mascara(self) -> str:
        return mascarar_cnae(self._valor)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CodigoCnae):
            return NotImplemented
        return self._valor == other._valor

    def __hash__(self) -> int:
        return hash(self._valor)

    def __repr__(self) -> str:
        return f"CodigoCnae({self.mascara!r})"

    def __str__(self) -> str:
        return self._valor


class ItemLC:
    """Value Object para item da lista de servicos da LC 116/2003 (X.XX)."""

    __slots__ = ("_valor",)

    def __init__(self, raw: str) -> None:
        normalizado = normalizar_item_lc(raw)
        if _ITEM_LC.match(normalizado) is None:
            raise ValueError(f"Item LC invalido: {raw!r}, esperado X.XX")
        self._valor = normalizado

    @property
    def valor(self) -> str:
        return self._valor

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ItemLC):
            return NotImplemented
        return self._valor == other._valor

    def __hash__(self) -> int:
        return hash(self._valor)

    def __repr__(self) -> str:
        return f"ItemLC({self._valor!r})"

    def __str__(self) -> str:
        return self._valor
