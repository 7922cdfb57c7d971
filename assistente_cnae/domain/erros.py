# assistente_cnae/domain/erros.py
from __future__ import annotations


class ConfiguracaoInvalida(RuntimeError):
    """Variaveis obrigatorias ausentes (chave do LLM, URL/chave do backend)."""

    def __init__(self, faltando: list[str]) -> None:
        self.faltando = list(faltando)
        super().__init__(f"Configuracao incompleta: {', '.join(self.faltando)}")


class ErroBackend(Exception):
    """Falha de leitura no backend (PostgREST). Recuperavel: vira success=False."""


class ErroLLM(Exception):
    """Falha na chamada de completion (timeout, HTTP, resposta vazia)."""
