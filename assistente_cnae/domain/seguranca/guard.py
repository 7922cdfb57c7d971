# assistente_cnae/domain/seguranca/guard.py
from __future__ import annotations

import re
from collections.abc import Iterable
from typing import Protocol

from .padroes import PADROES_INJECAO, PADROES_VAZAMENTO

# Caracteres removidos antes de embutir texto do usuario em prompts.
_CARACTERES_PROIBIDOS = re.compile(r"[<>{}$]")
_ESPACOS = re.compile(r"\s+")

TAMANHO_MAXIMO_PERGUNTA = 500


class ContentGuard(Protocol):
    def is_injection(self, text: str) -> bool: ...
    def is_leaked(self, text: str) -> bool: ...
    def injection_match(self, text: str) -> str | None: ...


class RegexContentGuard:
    """ContentGuard baseado em listas de regex. Listas sao dados, nao codigo."""

    def __init__(
        self,
        padroes_injecao: Iterable[str] = PADROES_INJECAO,
        padroes_vazamento: Iterable[str] = PADROES_VAZAMENTO,
    ) -> None:
        self._injecao = [re.compile(p, re.IGNORECASE | re.MULTILINE) for p in padroes_injecao]
        self._vazamento = [re.compile(p, re.IGNORECASE) for p in padroes_vazamento]

    def injection_match(self, text: str) -> str | None:
        """Padrao de injecao que casou, ou None."""
        for padrao in self._injecao:
            if padrao.search(text or ""):
                return padrao.pattern
        return None

    def is_injection(self, text: str) -> bool:
        return self.injection_match(text) is not None

    def is_leaked(self, text: str) -> bool:
        return any(p.search(text or "") for p in self._vazamento)


def sanitizar_entrada(texto: str, limite: int = TAMANHO_MAXIMO_PERGUNTA) -> str:
    """Remove < > { } $, colapsa espacos e trunca. Segunda linha de defesa,
    independente dos padroes de injecao."""
    limpo = _CARACTERES_PROIBIDOS.sub("", texto or "")
    limpo = _ESPACOS.sub(" ", limpo).strip()
    return limpo[:limite]
