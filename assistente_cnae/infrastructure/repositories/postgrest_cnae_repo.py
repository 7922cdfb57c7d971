# assistente_cnae/infrastructure/repositories/postgrest_cnae_repo.py
from __future__ import annotations

from typing import Any

from assistente_cnae.domain.cnae.entities import CnaeItem, ItemNbs, ItemServico
from assistente_cnae.domain.cnae.value_objects import GrauRisco
from assistente_cnae.infrastructure.postgrest_client import PostgrestClient, escapar_termo

TABELA_CNAE = "cnae_item_lc"
TABELA_ITENS = "itens_lista_servicos"
TABELA_NBS = "item_lc_ibs_cbs"

_COLUNAS_CNAE = "cnae,cnae_mascara,cnae_descricao,item_lc,grau_risco"
_COLUNAS_CNAE_COM_ITEM = f"{_COLUNAS_CNAE},itens_lista_servicos(item_lc,descricao)"
_COLUNAS_ITEM = "item_lc,descricao"
_COLUNAS_NBS = (
    "item_lc,nbs,nbs_descricao,ps_onerosa,adq_exterior,indop,"
    "local_incidencia_ibs,cclass_trib,nome_cclass_trib"
)


class PostgrestCnaeRepo:
    def __init__(self, client: PostgrestClient) -> None:
        self._client = client

    async def buscar_cnae(
        self, cnae: str, limit: int, incluir_item: bool = False
    ) -> list[CnaeItem]:
        colunas = _COLUNAS_CNAE_COM_ITEM if incluir_item else _COLUNAS_CNAE
        consulta = self._client.tabela(TABELA_CNAE, colunas).eq("cnae", cnae).limit(limit)
        return [self._hidratar_cnae(r) for r in await self._client.executar(consulta)]

    async def buscar_cnae_por_mascara(self, mascara: str, limit: int) -> list[CnaeItem]:
        consulta = (
            self._client.tabela(TABELA_CNAE, _COLUNAS_CNAE_COM_ITEM)
            .ilike("cnae_mascara", f"*{escapar_termo(mascara)}*")
            .limit(limit)
        )
        return [self._hidratar_cnae(r) for r in await self._client.executar(consulta)]

    async def buscar_cnaes_por_descricao(self, termo: str, limit: int) -> list[CnaeItem]:
        consulta = (
            self._client.tabela(TABELA_CNAE, _COLUNAS_CNAE)
            .ilike("cnae_descricao", f"*{escapar_termo(termo)}*")
            .limit(limit)
        )
        return [self._hidratar_cnae(r) for r in await self._client.executar(consulta)]

    async def listar_cnaes_por_risco(self, grau: GrauRisco, limit: int) -> list[CnaeItem]:
        consulta = (
            self._client.tabela(TABELA_CNAE, _COLUNAS_CNAE)
            .eq("grau_risco", grau.value)
            .limit(limit)
        )
        return [self._hidratar_cnae(r) for r in await self._client.executar(consulta)]

    async def listar_cnaes_por_item(self, item_lc: str, limit: int) -> list[CnaeItem]:
        consulta = (
            self._client.tabela(TABELA_CNAE, _COLUNAS_CNAE)
            .eq("item_lc", item_lc)
            .order("cnae")
            .limit(limit)
        )
        return [self._hidratar_cnae(r) for r in await self._client.executar(consulta)]

    async def buscar_item(self, item_lc: str) -> list[ItemServico]:
        consulta = self._client.tabela(TABELA_ITENS, _COLUNAS_ITEM).eq("item_lc", item_lc).limit(1)
        return [self._hidratar_item(r) for r in await self._client.executar(consulta)]

    async def buscar_itens_por_descricao(self, termo: str, limit: int) -> list[ItemServico]:
        consulta = (
            self._client.tabela(TABELA_ITENS, _COLUNAS_ITEM)
            .ilike("descricao", f"*{escapar_termo(termo)}*")
            .limit(limit)
        )
        return [self._hidratar_item(r) for r in await self._client.executar(consulta)]

    async def listar_itens_do_grupo(self, grupo: str) -> list[ItemServico]:
        # like "17.*" em vez de faixa numerica: item_lc e texto, e "10.01" cairia em [1, 2)
        consulta = (
            self._client.tabela(TABELA_ITENS, _COLUNAS_ITEM)
            .like("item_lc", f"{grupo}.*")
            .order("item_lc")
        )
        return [self._hidratar_item(r) for r in await self._client.executar(consulta)]

    async def listar_nbs_por_itens(self, itens_lc: list[str], limit: int) -> list[ItemNbs]:
        if not itens_lc:
            return []
        consulta = self._client.tabela(TABELA_NBS, _COLUNAS_NBS)
        if len(itens_lc) == 1:
            consulta.eq("item_lc", itens_lc[0])
        else:
            consulta.in_("item_lc", itens_lc)
        consulta.limit(limit)
        return [self._hidratar_nbs(r) for r in await self._client.executar(consulta)]

    async def buscar_nbs_por_descricao(self, termo: str, limit: int) -> list[ItemNbs]:
        consulta = (
            self._client.tabela(TABELA_NBS, _COLUNAS_NBS)
            .ilike("nbs_descricao", f"*{escapar_termo(termo)}*")
            .limit(limit)
        )
        return [self._hidratar_nbs(r) for r in await self._client.executar(consulta)]

    def _hidratar_cnae(self, row: dict[str, Any]) -> CnaeItem:
        """Colunas: cnae, cnae_mascara, cnae_descricao, item_lc, grau_risco e,
        quando embutido, itens_lista_servicos {item_lc, descricao}."""
        embutido = row.get("itens_lista_servicos")
        if isinstance(embutido, list):  # PostgREST devolve lista em relacoes 1:N
            embutido = embutido[0] if embutido else None
        return CnaeItem(
            cnae=str(row.get("cnae") or "").zfill(7),
            cnae_mascara=_texto(row.get("cnae_mascara")),
            cnae_descricao=str(row.get("cnae_descricao") or ""),
            item_lc=_texto(row.get("item_lc")),
            grau_risco=GrauRisco.normalizar(row.get("grau_risco")),
            item_servico=self._hidratar_item(embutido) if embutido else None,
        )

    def _hidratar_item(self, row: dict[str, Any]) -> ItemServico:
        return ItemServico(
            item_lc=str(row.get("item_lc") or ""),
            descricao=str(row.get("descricao") or ""),
        )

    def _hidratar_nbs(self, row: dict[str, Any]) -> ItemNbs:
        return ItemNbs(
            item_lc=str(row.get("item_lc") or ""),
            nbs=_texto(row.get("nbs")),
            nbs_descricao=_texto(row.get("nbs_descricao")),
            indop=_texto(row.get("indop")),
            local_incidencia_ibs=_texto(row.get("local_incidencia_ibs")),
            cclass_trib=_texto(row.get("cclass_trib")),
            nome_cclass_trib=_texto(row.get("nome_cclass_trib")),
            ps_onerosa=_texto(row.get("ps_onerosa")),
            adq_exterior=_texto(row.get("adq_exterior")),
        )


def _texto(valor: object) -> str | None:
    return None if valor is None else str(valor)
