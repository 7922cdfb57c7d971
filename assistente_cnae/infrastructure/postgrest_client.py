# assistente_cnae/infrastructure/postgrest_client.py
#
# Minimal read-only PostgREST client over httpx.AsyncClient.
#
# Design decisions:
#   - Only the filter operators the allowed queries use are exposed:
#     eq, like, ilike, in. There is no raw-filter escape hatch.
#   - Values are quoted inside in.(...) lists so item codes like "17.01"
#     survive PostgREST's comma/dot parsing.
#   - Pattern metacharacters in user search terms (* % _ , ( )) are stripped
#     before building like/ilike filters.
#   - Any transport error or non-2xx response is raised as ErroBackend with
#     the PostgREST "message" when there is one.
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

import httpx

from assistente_cnae.domain.erros import ErroBackend

_METACARACTERES = re.compile(r"[*%_,()\\\"]")


def escapar_termo(termo: str) -> str:
    return _METACARACTERES.sub("", termo or "").strip()


@dataclass
class ConsultaTabela:
    """Builder de uma leitura: tabela, projecao, filtros, ordem e limite."""

    tabela: str
    colunas: str = "*"
    filtros: list[tuple[str, str]] = field(default_factory=list)
    ordem: str | None = None
    limite: int | None = None

    def eq(self, coluna: str, valor: str | int) -> ConsultaTabela:
        self.filtros.append((coluna, f"eq.{valor}"))
        return self

    def like(self, coluna: str, padrao: str) -> ConsultaTabela:
        self.filtros.append((coluna, f"like.{padrao}"))
        return self

    def ilike(self, coluna: str, padrao: str) -> ConsultaTabela:
        self.filtros.append((coluna, f"ilike.{padrao}"))
        return self

    def in_(self, coluna: str, valores: list[str]) -> ConsultaTabela:
        lista = ",".join(f'"{v}"' for v in valores)
        self.filtros.append((coluna, f"in.({lista})"))
        return self

    def order(self, coluna: str, ascendente: bool = True) -> ConsultaTabela:
        self.ordem = f"{coluna}.{'asc' if ascendente else 'desc'}"
        return self

    def limit(self, n: int) -> ConsultaTabela:
        self.limite = n
        return self

    def params(self) -> list[tuple[str, str]]:
        params: list[tuple[str, str]] = [("select", self.colunas)]
        params.extend(self.filtros)
        if self.ordem:
            params.append(("order", self.ordem))
        if self.limite is not None:
            params.append(("limit", str(self.limite)))
        return params


class PostgrestClient:
    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    @classmethod
    def criar(cls, base_url: str, api_key: str, timeout: float = 10.0) -> PostgrestClient:
        client = httpx.AsyncClient(
            base_url=f"{base_url.rstrip('/')}/rest/v1",
            headers={
                "apikey": api_key,
                "Authorization": f"Bearer {api_key}",
                "Accept": "application/json",
            },
            timeout=timeout,
        )
        return cls(client)

    def tabela(self, nome: str, colunas: str = "*") -> ConsultaTabela:
        return ConsultaTabela(tabela=nome, colunas=colunas)

    async def executar(self, consulta: ConsultaTabela) -> list[dict[str, Any]]:
        try:
            response = await self._client.get(f"/{consulta.tabela}", params=consulta.params())
        except httpx.HTTPError as err:
            raise ErroBackend(f"Falha de comunicacao com o banco: {err.__class__.__name__}") from err

        if response.is_error:
            raise ErroBackend(self._mensagem_de_erro(response))

        dados = response.json()
        if not isinstance(dados, list):
            raise ErroBackend("Resposta inesperada do banco")
        return dados

    async def fechar(self) -> None:
        await self._client.aclose()

    @staticmethod
    def _mensagem_de_erro(response: httpx.Response) -> str:
        try:
            corpo = response.json()
        except ValueError:
            return f"Erro {response.status_code} ao consultar o banco"
        if isinstance(corpo, dict) and corpo.get("message"):
            return str(corpo["message"])
        return f"Erro {response.status_code} ao consultar o banco"
