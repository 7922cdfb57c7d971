# assistente_cnae/application/services/consultas_permitidas.py
#
# Allow-list dispatcher: the only path from an LLM decision to the database.
#
# Design decisions:
#   - QueryId is a closed enum and every id maps to one handler in a fixed
#     registry. Anything outside it is rejected before touching the backend.
#   - Handlers only clean their own parameters (digits, item zeros, risk
#     accent); they never build filters from raw model output.
#   - ErroBackend becomes success=False with the backend message. An empty
#     read is success=True with a summary. The two never mix.
from __future__ import annotations

from collections.abc import Awaitable, Callable

from assistente_cnae.domain.cnae.repository import CnaeRepository
from assistente_cnae.domain.cnae.value_objects import (
    GrauRisco,
    apenas_digitos,
    normalizar_item_lc,
)
from assistente_cnae.domain.consulta.entities import (
    BuscaTexto,
    InformacaoCompletaCnae,
    ResultadoConsulta,
)
from assistente_cnae.domain.consulta.value_objects import ParametrosConsulta, QueryId
from assistente_cnae.domain.erros import ErroBackend
from assistente_cnae.infrastructure.logging_config import get_logger

logger = get_logger(__name__)

LIMITE_PADRAO = 10
LIMITE_RISCO_PADRAO = 20
LIMITE_RISCO_MAXIMO = 50
LIMITE_FULL_INFO_CNAE = 5
LIMITE_FULL_INFO_NBS = 20
LIMITE_BUSCA_NBS = 15

Handler = Callable[[ParametrosConsulta], Awaitable[ResultadoConsulta]]


def _obrigatorio(nome: str) -> ResultadoConsulta:
    return ResultadoConsulta.falha(f"Parâmetro '{nome}' é obrigatório para esta consulta")


class ConsultasPermitidas:
    def __init__(self, repo: CnaeRepository) -> None:
        self._repo = repo
        self._handlers: dict[QueryId, Handler] = {
            QueryId.CNAE_TO_ITEM: self._cnae_to_item,
            QueryId.CNAE_DETAILS: self._cnae_details,
            QueryId.ITEM_TO_DETAILS: self._item_to_details,
            QueryId.ITEM_TO_NBS: self._item_to_nbs,
            QueryId.SEARCH_TEXT: self._search_text,
            QueryId.SEARCH_BY_RISK: self._search_by_risk,
            QueryId.CNAE_FULL_INFO: self._cnae_full_info,
            QueryId.CNAE_BY_MASCARA: self._cnae_by_mascara,
            QueryId.SEARCH_NBS: self._search_nbs,
            QueryId.LIST_ITEMS_BY_GROUP: self._list_items_by_group,
        }

    async def executar(
        self, query_id: QueryId | str, params: ParametrosConsulta | None = None
    ) -> ResultadoConsulta:
        try:
            qid = QueryId(query_id)
        except ValueError:
            logger.warning("consulta_nao_permitida", query_id=str(query_id)[:50])
            return ResultadoConsulta.falha(f"Consulta não permitida: {query_id}")

        p = params or ParametrosConsulta()
        try:
            resultado = await self._handlers[qid](p)
        except ErroBackend as err:
            logger.warning("consulta_falhou", query_id=qid.value, erro=str(err))
            return ResultadoConsulta.falha(str(err))
        logger.info(
            "consulta_executada",
            query_id=qid.value,
            params=p.preenchidos(),
            success=resultado.success,
        )
        return resultado

    async def _cnae_to_item(self, p: ParametrosConsulta) -> ResultadoConsulta:
        cnae = apenas_digitos(p.cnae or "")
        if not cnae:
            return _obrigatorio("cnae")
        rows = await self._repo.buscar_cnae(cnae, LIMITE_PADRAO, incluir_item=True)
        if not rows:
            return ResultadoConsulta.vazio(f"Nenhum CNAE encontrado com o código {cnae}")
        return ResultadoConsulta(
            success=True, data=tuple(rows), summary=f"CNAE {cnae}: {len(rows)} registro(s)"
        )

    async def _cnae_details(self, p: ParametrosConsulta) -> ResultadoConsulta:
        cnae = apenas_digitos(p.cnae or "")
        if not cnae:
            return _obrigatorio("cnae")
        rows = await self._repo.buscar_cnae(cnae, LIMITE_PADRAO)
        if not rows:
            return ResultadoConsulta.vazio(f"Nenhum CNAE encontrado com o código {cnae}")
        return ResultadoConsulta(success=True, data=tuple(rows))

    async def _item_to_details(self, p: ParametrosConsulta) -> ResultadoConsulta:
        item = normalizar_item_lc(p.item_lc or "")
        if not item:
            return _obrigatorio("item_lc")
        rows = await self._repo.buscar_item(item)
        if not rows:
            return ResultadoConsulta.vazio(f"Item {item} não encontrado na lista de serviços")
        return ResultadoConsulta(success=True, data=tuple(rows))

    async def _item_to_nbs(self, p: ParametrosConsulta) -> ResultadoConsulta:
        item = normalizar_item_lc(p.item_lc or "")
        if not item:
            return _obrigatorio("item_lc")
        rows = await self._repo.listar_nbs_por_itens([item], LIMITE_PADRAO)
        if not rows:
            return ResultadoConsulta.vazio(f"Nenhum código NBS/IBS/CBS encontrado para o item {item}")
        return ResultadoConsulta(
            success=True, data=tuple(rows), summary=f"{len(rows)} código(s) NBS para o item {item}"
        )

    async def _search_text(self, p: ParametrosConsulta) -> ResultadoConsulta:
        termo = (p.q or "").strip()
        if not termo:
            return _obrigatorio("q")
        itens = await self._repo.buscar_itens_por_descricao(termo, LIMITE_PADRAO)
        cnaes = await self._repo.buscar_cnaes_por_descricao(termo, LIMITE_PADRAO)
        busca = BuscaTexto(items=tuple(itens), cnaes=tuple(cnaes))
        if busca.total == 0:
            return ResultadoConsulta.vazio(f'Nenhum resultado encontrado para "{termo}"')
        return ResultadoConsulta(
            success=True,
            data=busca,
            summary=f"{len(cnaes)} CNAE(s) e {len(itens)} item(ns) para \"{termo}\"",
        )

    async def _search_by_risk(self, p: ParametrosConsulta) -> ResultadoConsulta:
        if not p.grau_risco:
            return _obrigatorio("grau_risco")
        grau = GrauRisco.normalizar(p.grau_risco)
        if grau is None:
            return ResultadoConsulta.falha(
                f"Grau de risco inválido: {p.grau_risco[:20]}. Use ALTO, MEDIO ou BAIXO"
            )
        limite = min(max(p.limit or LIMITE_RISCO_PADRAO, 1), LIMITE_RISCO_MAXIMO)
        rows = await self._repo.listar_cnaes_por_risco(grau, limite)
        if not rows:
            return ResultadoConsulta.vazio(f"Nenhum CNAE com grau de risco {grau.value}")
        return ResultadoConsulta(
            success=True,
            data=tuple(rows),
            summary=f"{len(rows)} CNAE(s) com grau de risco {grau.value}",
        )

    async def _cnae_full_info(self, p: ParametrosConsulta) -> ResultadoConsulta:
        cnae = apenas_digitos(p.cnae or "")
        if not cnae:
            return _obrigatorio("cnae")
        cnaes = await self._repo.buscar_cnae(cnae, LIMITE_FULL_INFO_CNAE, incluir_item=True)
        if not cnaes:
            return ResultadoConsulta.vazio(f"Nenhum CNAE encontrado com o código {cnae}")

        itens = list(dict.fromkeys(c.item_lc for c in cnaes if c.item_lc))
        try:
            nbs = await self._repo.listar_nbs_por_itens(itens, LIMITE_FULL_INFO_NBS)
        except ErroBackend as err:
            # a parte do CNAE ainda e util sem o cruzamento
            logger.warning("cruzamento_nbs_indisponivel", cnae=cnae, erro=str(err))
            nbs = []
        return ResultadoConsulta(
            success=True,
            data=InformacaoCompletaCnae(cnaes=tuple(cnaes), nbs=tuple(nbs)),
            summary=f"CNAE {cnae}: {len(cnaes)} registro(s), {len(nbs)} código(s) NBS",
        )

    async def _cnae_by_mascara(self, p: ParametrosConsulta) -> ResultadoConsulta:
        mascara = (p.cnae_mascara or "").strip()
        if not mascara:
            return _obrigatorio("cnae_mascara")
        rows = await self._repo.buscar_cnae_por_mascara(mascara, LIMITE_PADRAO)
        if not rows:
            return ResultadoConsulta.vazio(f"Nenhum CNAE encontrado com a máscara {mascara}")
        return ResultadoConsulta(success=True, data=tuple(rows))

    async def _search_nbs(self, p: ParametrosConsulta) -> ResultadoConsulta:
        termo = (p.q or "").strip()
        if not termo:
            return _obrigatorio("q")
        rows = await self._repo.buscar_nbs_por_descricao(termo, LIMITE_BUSCA_NBS)
        if not rows:
            return ResultadoConsulta.vazio(f'Nenhum código NBS encontrado para "{termo}"')
        return ResultadoConsulta(
            success=True, data=tuple(rows), summary=f"{len(rows)} código(s) NBS para \"{termo}\""
        )

    async def _list_items_by_group(self, p: ParametrosConsulta) -> ResultadoConsulta:
        grupo = apenas_digitos(p.group or "").lstrip("0")
        if not grupo:
            return _obrigatorio("group")
        rows = await self._repo.listar_itens_do_grupo(grupo)
        if not rows:
            return ResultadoConsulta.vazio(f"Nenhum item encontrado no grupo {grupo}")
        return ResultadoConsulta(
            success=True, data=tuple(rows), summary=f"{len(rows)} item(ns) no grupo {grupo}"
        )
