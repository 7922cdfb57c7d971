# assistente_cnae/interfaces/api/dependencies.py
#
# Shared objects live on app.state (built in the lifespan); these providers
# hand them to the routes. Tests replace them through app.dependency_overrides.
from __future__ import annotations

from fastapi import Depends, Request

from assistente_cnae.application.services.chat_service import ChatService
from assistente_cnae.application.services.classificador_intencao import ClassificadorIntencao
from assistente_cnae.application.services.consulta_service import ConsultaService
from assistente_cnae.application.services.consultas_permitidas import ConsultasPermitidas
from assistente_cnae.application.services.formatador_resposta import FormatadorResposta
from assistente_cnae.domain.cnae.repository import CnaeRepository
from assistente_cnae.domain.seguranca.guard import ContentGuard
from assistente_cnae.infrastructure.config import Settings
from assistente_cnae.infrastructure.llm_client import CompletionClient
from assistente_cnae.infrastructure.rate_limiter import MemoryRateLimiter
from assistente_cnae.infrastructure.repositories.postgrest_cnae_repo import PostgrestCnaeRepo
from assistente_cnae.infrastructure.response_cache import ResponseCache


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_rate_limiter(request: Request) -> MemoryRateLimiter:
    return request.app.state.rate_limiter


def get_response_cache(request: Request) -> ResponseCache:
    return request.app.state.response_cache


def get_content_guard(request: Request) -> ContentGuard:
    return request.app.state.content_guard


def get_cnae_repo(request: Request) -> CnaeRepository | None:
    """None quando SUPABASE_URL/SUPABASE_ANON_KEY nao estao configurados."""
    client = request.app.state.postgrest
    return PostgrestCnaeRepo(client) if client is not None else None


def get_completion_client(request: Request) -> CompletionClient | None:
    return request.app.state.llm


def get_chat_service(
    repo: CnaeRepository | None = Depends(get_cnae_repo),  # noqa: B008
    llm: CompletionClient | None = Depends(get_completion_client),  # noqa: B008
    guard: ContentGuard = Depends(get_content_guard),  # noqa: B008
    cache: ResponseCache = Depends(get_response_cache),  # noqa: B008
) -> ChatService | None:
    if repo is None or llm is None:
        return None
    return ChatService(
        classificador=ClassificadorIntencao(llm, guard),
        consultas=ConsultasPermitidas(repo),
        formatador=FormatadorResposta(llm, guard),
        guard=guard,
        cache=cache,
    )


def get_consulta_service(
    repo: CnaeRepository | None = Depends(get_cnae_repo),  # noqa: B008
) -> ConsultaService | None:
    return ConsultaService(repo) if repo is not None else None
