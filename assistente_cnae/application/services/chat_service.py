# assistente_cnae/application/services/chat_service.py
from __future__ import annotations

from assistente_cnae.domain.seguranca.guard import ContentGuard
from assistente_cnae.infrastructure.logging_config import (
    get_logger,
    registrar_injecao,
    registrar_vazamento,
)
from assistente_cnae.infrastructure.response_cache import ResponseCache, normalizar_pergunta

from ..dtos.chat_dto import ChatRequestDTO, ChatResponseDTO
from .classificador_intencao import ClassificadorIntencao, DecisaoDireta, MENSAGEM_FALLBACK
from .consultas_permitidas import ConsultasPermitidas
from .formatador_resposta import FormatadorResposta

logger = get_logger(__name__)

RESPOSTA_RECUSA = "Não posso fazer isso. Como posso ajudar com CNAE e tributação? 🤔"


class ChatService:
    """Imperative Shell do chat: guard -> cache -> classificador -> consulta -> formatador."""

    def __init__(
        self,
        classificador: ClassificadorIntencao,
        consultas: ConsultasPermitidas,
        formatador: FormatadorResposta,
        guard: ContentGuard,
        cache: ResponseCache,
    ) -> None:
        self._classificador = classificador
        self._consultas = consultas
        self._formatador = formatador
        self._guard = guard
        self._cache = cache

    async def responder(self, requisicao: ChatRequestDTO) -> ChatResponseDTO:
        pergunta = requisicao.question

        if self._detectar_injecao(requisicao):
            return ChatResponseDTO(response=RESPOSTA_RECUSA)

        # cache apenas para perguntas sem historico
        usar_cache = not requisicao.history
        chave = normalizar_pergunta(pergunta)
        if usar_cache:
            em_cache = self._cache.get(chave)
            if em_cache is not None:
                logger.info("chat_cache_hit", query_id=em_cache.get("queryId"))
                return ChatResponseDTO.model_validate({**em_cache, "cached": True})

        decisao = await self._classificador.classificar(pergunta, requisicao.history)

        if isinstance(decisao, DecisaoDireta):
            texto = decisao.direct_response
            if self._guard.is_leaked(texto):
                registrar_vazamento("resposta_direta", texto)
                texto = MENSAGEM_FALLBACK
            return ChatResponseDTO(response=texto, is_direct=True)

        resultado = await self._consultas.executar(decisao.query_id, decisao.params.to_domain())
        texto = await self._formatador.formatar(pergunta, decisao.query_id, resultado)

        resposta = ChatResponseDTO(
            response=texto,
            query_id=decisao.query_id.value,
            params=decisao.params.model_dump(exclude_none=True),
            success=resultado.success,
        )
        logger.info(
            "chat_consulta_respondida",
            query_id=decisao.query_id.value,
            success=resultado.success,
        )
        # success=False nunca entra no cache
        if usar_cache and resultado.success:
            self._cache.set(chave, resposta.to_payload())
        return resposta

    def _detectar_injecao(self, requisicao: ChatRequestDTO) -> bool:
        textos = [requisicao.question] + [m.content for m in requisicao.history if m.role == "user"]
        for texto in textos:
            padrao = self._guard.injection_match(texto)
            if padrao is not None:
                registrar_injecao(texto, padrao)
                return True
        return False
