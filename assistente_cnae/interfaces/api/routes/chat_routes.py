# assistente_cnae/interfaces/api/routes/chat_routes.py
#
# POST /api/chat runs its gates in a fixed order:
#   body validation (400) -> rate limit (429) -> payload size (413)
#   -> configuration (500) -> ChatService (guard, cache, LLM, dispatcher).
# Malformed bodies never consume a rate-limit slot, so the limiter is called
# from the route and not from a middleware.
from __future__ import annotations

import json
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from assistente_cnae.application.dtos.chat_dto import ChatRequestDTO, DetalheErroDTO, ErroDTO
from assistente_cnae.application.services.chat_service import ChatService
from assistente_cnae.infrastructure.config import Settings
from assistente_cnae.infrastructure.logging_config import get_logger, registrar_rate_limit
from assistente_cnae.infrastructure.rate_limiter import MemoryRateLimiter, ip_do_cliente
from assistente_cnae.interfaces.api.dependencies import (
    get_app_settings,
    get_chat_service,
    get_rate_limiter,
)

logger = get_logger(__name__)

router = APIRouter()


def _erro(status_code: int, erro: ErroDTO, headers: dict[str, str] | None = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=erro.to_payload(), headers=headers)


def _detalhes_validacao(err: ValidationError) -> list[DetalheErroDTO]:
    detalhes = []
    for e in err.errors():
        campo = ".".join(str(p) for p in e["loc"]) or "body"
        detalhes.append(DetalheErroDTO(field=campo, message=e["msg"]))
    return detalhes


async def _ler_corpo(request: Request) -> Any:
    corpo = await request.body()
    return json.loads(corpo) if corpo else None


@router.post("/chat")
async def chat(
    request: Request,
    settings: Settings = Depends(get_app_settings),  # noqa: B008
    limiter: MemoryRateLimiter = Depends(get_rate_limiter),  # noqa: B008
    service: ChatService | None = Depends(get_chat_service),  # noqa: B008
) -> JSONResponse:
    # 1. corpo
    try:
        dados = await _ler_corpo(request)
    except ValueError:
        return _erro(400, ErroDTO(
            error="Corpo da requisição inválido",
            code="VALIDATION_ERROR",
            details=[DetalheErroDTO(field="body", message="JSON inválido")],
        ))
    try:
        requisicao = ChatRequestDTO.model_validate(dados)
    except ValidationError as err:
        return _erro(400, ErroDTO(
            error="Requisição inválida",
            code="VALIDATION_ERROR",
            details=_detalhes_validacao(err),
        ))

    # 2. rate limit
    headers: dict[str, str] = {}
    if limiter.ativo:
        ip = ip_do_cliente(request)
        decisao = limiter.verificar(ip)
        headers = decisao.headers(limiter.agora())
        if not decisao.ok:
            registrar_rate_limit("bloqueado", ip, decisao.restantes)
            return _erro(
                429,
                ErroDTO(
                    error="Muitas requisições. Por favor, aguarde um momento.",
                    code="RATE_LIMITED",
                ),
                headers=headers,
            )

    # 3. tamanho declarado
    tamanho = request.headers.get("content-length")
    if tamanho and tamanho.isdigit() and int(tamanho) > settings.chat_max_body_bytes:
        return _erro(
            413,
            ErroDTO(error="Requisição muito grande", code="PAYLOAD_TOO_LARGE"),
            headers=headers,
        )

    # 4. configuracao
    faltando = settings.faltando()
    if faltando or service is None:
        logger.error("configuracao_incompleta", faltando=faltando)
        return _erro(
            500,
            ErroDTO(error="Configuração do servidor incompleta", code="CONFIG_ERROR"),
            headers=headers,
        )

    # 5-7. guard, cache, classificador, consulta
    try:
        resposta = await service.responder(requisicao)
    except Exception:  # noqa: BLE001
        logger.exception("chat_erro_interno")
        return _erro(
            500,
            ErroDTO(error="Erro interno do servidor", code="INTERNAL_ERROR"),
            headers=headers,
        )
    return JSONResponse(content=resposta.to_payload(), headers=headers)


@router.get("/chat")
def chat_status() -> dict[str, str]:
    return {"status": "ok", "message": "Chat API está funcionando"}
