# assistente_cnae/application/services/classificador_intencao.py
#
# LLM call #1: decide between a direct answer and one allowed query.
#
# Design decisions:
#   - The model output is untrusted. It is scanned for injection markers, parsed
#     as JSON and validated against two strict pydantic models chosen by the
#     needsQuery flag. Anything else collapses into DECISAO_FALLBACK.
#   - params is a closed set of optional fields (extra="forbid"); an unknown
#     field rejects the whole decision instead of being silently dropped.
#   - If the question carries a 7-digit CNAE and the model still answered
#     directly, the decision is rewritten to cnae_to_item. Questions about a
#     CNAE code never get a free-form factual answer.
from __future__ import annotations

import json
import re
from collections.abc import Sequence
from typing import Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from assistente_cnae.domain.consulta.value_objects import ParametrosConsulta, QueryId
from assistente_cnae.domain.erros import ErroLLM
from assistente_cnae.domain.seguranca.guard import ContentGuard, sanitizar_entrada
from assistente_cnae.infrastructure.llm_client import CompletionClient
from assistente_cnae.infrastructure.logging_config import get_logger, registrar_injecao

from ..dtos.chat_dto import MensagemHistoricoDTO
from ..prompts import montar_mensagens_decisao

logger = get_logger(__name__)

TEMPERATURA_DECISAO = 0.3
MAX_TOKENS_DECISAO = 1000

MENSAGEM_FALLBACK = (
    "Desculpe, tive um problema ao processar sua pergunta. Pode tentar novamente? 😊"
)

# 7 digitos soltos ou no formato DDDD-D/DD
_CNAE_NA_PERGUNTA = re.compile(r"(?<!\d)(\d{4}-?\d/?\d{2})(?!\d)")


class ParametrosDecisao(BaseModel):
    model_config = ConfigDict(extra="forbid", coerce_numbers_to_str=True)

    cnae: str | None = None
    cnae_mascara: str | None = None
    item_lc: str | None = None
    q: str | None = Field(default=None, max_length=200)
    grau_risco: str | None = None
    group: str | None = None
    limit: int | None = None  # faixa aplicada pelo dispatcher

    def to_domain(self) -> ParametrosConsulta:
        return ParametrosConsulta(**self.model_dump())


class DecisaoDireta(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    needs_query: Literal[False] = Field(default=False, alias="needsQuery")
    direct_response: str = Field(alias="directResponse", min_length=1, max_length=2000)


class DecisaoConsulta(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    needs_query: Literal[True] = Field(default=True, alias="needsQuery")
    query_id: QueryId = Field(alias="queryId")
    params: ParametrosDecisao = Field(default_factory=ParametrosDecisao)

    @field_validator("params", mode="before")
    @classmethod
    def _params_nulos(cls, valor: Any) -> Any:
        return {} if valor is None else valor


Decisao = Union[DecisaoDireta, DecisaoConsulta]

DECISAO_FALLBACK = DecisaoDireta(direct_response=MENSAGEM_FALLBACK)


def extrair_cnae(pergunta: str) -> str | None:
    """Primeiro CNAE completo (7 digitos) citado na pergunta, so digitos."""
    match = _CNAE_NA_PERGUNTA.search(pergunta or "")
    if match is None:
        return None
    digitos = re.sub(r"\D", "", match.group(1))
    return digitos if len(digitos) == 7 else None


class ClassificadorIntencao:
    def __init__(self, llm: CompletionClient, guard: ContentGuard) -> None:
        self._llm = llm
        self._guard = guard

    async def classificar(
        self, pergunta: str, historico: Sequence[MensagemHistoricoDTO] = ()
    ) -> Decisao:
        historico_limpo: list[MensagemHistoricoDTO] = []
        for mensagem in historico:
            conteudo = sanitizar_entrada(mensagem.content)
            if conteudo:
                historico_limpo.append(MensagemHistoricoDTO(role=mensagem.role, content=conteudo))
        mensagens = montar_mensagens_decisao(sanitizar_entrada(pergunta), historico_limpo)

        try:
            bruto = await self._llm.completar(
                mensagens,
                temperature=TEMPERATURA_DECISAO,
                max_tokens=MAX_TOKENS_DECISAO,
                json_mode=True,
            )
        except ErroLLM as err:
            logger.error("classificador_llm_falhou", erro=str(err))
            decisao: Decisao = DECISAO_FALLBACK
        else:
            decisao = self._interpretar(bruto)

        return self._garantir_consulta_de_cnae(pergunta, decisao)

    def _interpretar(self, bruto: str) -> Decisao:
        padrao = self._guard.injection_match(bruto)
        if padrao is not None:
            registrar_injecao(bruto, padrao, origem="classificador")
            return DECISAO_FALLBACK

        try:
            dados = json.loads(bruto)
        except ValueError:
            logger.warning("classificador_json_invalido", tamanho=len(bruto))
            return DECISAO_FALLBACK
        if not isinstance(dados, dict):
            logger.warning("classificador_json_invalido", tipo=type(dados).__name__)
            return DECISAO_FALLBACK

        modelo: type[DecisaoDireta] | type[DecisaoConsulta]
        if dados.get("needsQuery") is True:
            modelo = DecisaoConsulta
        elif dados.get("needsQuery") is False:
            modelo = DecisaoDireta
        else:
            logger.warning("classificador_schema_invalido", motivo="needsQuery ausente")
            return DECISAO_FALLBACK

        try:
            return modelo.model_validate(dados)
        except ValidationError as err:
            logger.warning(
                "classificador_schema_invalido",
                campos=[".".join(str(p) for p in e["loc"]) for e in err.errors()],
            )
            return DECISAO_FALLBACK

    def _garantir_consulta_de_cnae(self, pergunta: str, decisao: Decisao) -> Decisao:
        if isinstance(decisao, DecisaoConsulta):
            return decisao
        cnae = extrair_cnae(pergunta)
        if cnae is None:
            return decisao
        logger.info("classificador_roteamento_forcado", query_id=QueryId.CNAE_TO_ITEM.value, cnae=cnae)
        return DecisaoConsulta(
            query_id=QueryId.CNAE_TO_ITEM, params=ParametrosDecisao(cnae=cnae)
        )
