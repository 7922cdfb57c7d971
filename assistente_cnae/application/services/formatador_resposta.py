# assistente_cnae/application/services/formatador_resposta.py
from __future__ import annotations

from assistente_cnae.domain.consulta.entities import ResultadoConsulta
from assistente_cnae.domain.consulta.value_objects import QueryId
from assistente_cnae.domain.erros import ErroLLM
from assistente_cnae.domain.seguranca.guard import ContentGuard, sanitizar_entrada
from assistente_cnae.infrastructure.llm_client import CompletionClient
from assistente_cnae.infrastructure.logging_config import get_logger, registrar_vazamento

from ..prompts import montar_mensagens_formatacao
from .formatador_fallback import formatar_fallback

logger = get_logger(__name__)

TEMPERATURA_FORMATACAO = 0.5
MAX_TOKENS_FORMATACAO = 1500


def remover_negrito(texto: str) -> str:
    return texto.replace("**", "")


class FormatadorResposta:
    """LLM call #2. Qualquer falha, texto vazio ou vazamento cai no template."""

    def __init__(self, llm: CompletionClient, guard: ContentGuard) -> None:
        self._llm = llm
        self._guard = guard

    async def formatar(
        self, pergunta: str, query_id: QueryId, resultado: ResultadoConsulta
    ) -> str:
        mensagens = montar_mensagens_formatacao(
            sanitizar_entrada(pergunta), query_id, resultado.to_dict()
        )
        try:
            texto = await self._llm.completar(
                mensagens,
                temperature=TEMPERATURA_FORMATACAO,
                max_tokens=MAX_TOKENS_FORMATACAO,
            )
        except ErroLLM as err:
            logger.warning("formatador_llm_falhou", query_id=query_id.value, erro=str(err))
            return formatar_fallback(query_id, resultado)

        texto = remover_negrito(texto).strip()
        if not texto:
            return formatar_fallback(query_id, resultado)
        if self._guard.is_leaked(texto):
            registrar_vazamento("formatador", texto)
            return formatar_fallback(query_id, resultado)
        return texto
