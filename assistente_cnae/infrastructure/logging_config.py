# assistente_cnae/infrastructure/logging_config.py
#
# Structured logging on top of the stdlib logging module.
#
# Design decisions:
#   - JSON lines in production, console renderer elsewhere.
#   - A redaction processor masks any key that looks like a credential before
#     rendering, so call sites can pass context dicts without pre-filtering.
#   - Security events (prompt injection, leakage, rate limiting) go through the
#     helpers below: they carry a fixed `evento` name, a masked IP and at most a
#     100-char preview of the offending text, never the full payload.
#   - Loggers are not cached on first use so structlog.testing.capture_logs
#     sees every event in tests.
from __future__ import annotations

import logging
import sys
from collections.abc import MutableMapping
from typing import Any

import structlog

_CAMPOS_SENSIVEIS = (
    "password",
    "api_key",
    "apikey",
    "token",
    "secret",
    "authorization",
    "cookie",
    "session",
    "groq_api_key",
    "supabase_anon_key",
)

TAMANHO_PREVIA = 100


def _redigir(valor: Any) -> Any:
    if isinstance(valor, dict):
        return {
            k: "[REDACTED]" if _sensivel(k) else _redigir(v)
            for k, v in valor.items()
        }
    return valor


def _sensivel(chave: object) -> bool:
    nome = str(chave).lower()
    return any(campo in nome for campo in _CAMPOS_SENSIVEIS)


def redigir_campos_sensiveis(
    _logger: Any, _metodo: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    for chave in list(event_dict.keys()):
        if chave == "event":
            continue
        event_dict[chave] = "[REDACTED]" if _sensivel(chave) else _redigir(event_dict[chave])
    return event_dict


def configurar_logging(log_level: str = "INFO", json_logs: bool = False) -> None:
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        redigir_campos_sensiveis,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]
    if json_logs:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, log_level.upper(), logging.INFO),
        handlers=[logging.StreamHandler()],
        force=True,
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("openai").setLevel(logging.WARNING)


def get_logger(name: str) -> Any:
    return structlog.get_logger(name)


def mascarar_ip(ip: str) -> str:
    """Mantem so os dois primeiros octetos de um IPv4."""
    if ip == "unknown":
        return ip
    partes = ip.split(".")
    if len(partes) == 4:
        return f"{partes[0]}.{partes[1]}.xxx.xxx"
    return ip[:10] + "..."


def previa(texto: str, tamanho: int = TAMANHO_PREVIA) -> str:
    return (texto or "")[:tamanho]


_seguranca = get_logger("assistente_cnae.seguranca")


def registrar_injecao(texto: str, padrao: str | None, origem: str = "entrada") -> None:
    _seguranca.warning(
        "prompt_injection_detectado",
        evento="seguranca",
        origem=origem,
        previa=previa(texto),
        tamanho=len(texto or ""),
        padrao=padrao,
    )


def registrar_vazamento(origem: str, texto: str) -> None:
    _seguranca.warning(
        "vazamento_de_prompt_detectado",
        evento="seguranca",
        origem=origem,
        previa=previa(texto),
    )


def registrar_rate_limit(acao: str, ip: str, restantes: int) -> None:
    _seguranca.warning(
        "rate_limit",
        evento="seguranca",
        acao=acao,
        ip=mascarar_ip(ip),
        restantes=restantes,
    )
