# assistente_cnae/interfaces/api/main.py
from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from assistente_cnae.domain.erros import ConfiguracaoInvalida
from assistente_cnae.domain.seguranca.guard import RegexContentGuard
from assistente_cnae.infrastructure.config import Settings, get_settings
from assistente_cnae.infrastructure.llm_client import GroqCompletionClient
from assistente_cnae.infrastructure.logging_config import configurar_logging, get_logger
from assistente_cnae.infrastructure.postgrest_client import PostgrestClient
from assistente_cnae.infrastructure.rate_limiter import MemoryRateLimiter
from assistente_cnae.infrastructure.response_cache import ResponseCache

logger = get_logger(__name__)

CONTENT_SECURITY_POLICY = "; ".join([
    "default-src 'self'",
    "script-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net",
    "style-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net",
    "img-src 'self' data: https:",
    "connect-src 'self' https://*.supabase.co https://api.groq.com",
    "frame-ancestors 'none'",
    "base-uri 'self'",
    "form-action 'self'",
])

SECURITY_HEADERS = {
    "Content-Security-Policy": CONTENT_SECURITY_POLICY,
    "X-Frame-Options": "DENY",
    "X-Content-Type-Options": "nosniff",
    "X-XSS-Protection": "1; mode=block",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Permissions-Policy": "camera=(), microphone=(), geolocation=(), interest-cohort=()",
    "Strict-Transport-Security": "max-age=31536000; includeSubDomains",
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    settings: Settings = app.state.settings
    configurar_logging(settings.log_level, json_logs=settings.producao)

    faltando = settings.faltando()
    if faltando:
        logger.error("configuracao_incompleta", faltando=faltando, app_env=settings.app_env)
        if settings.producao:
            raise ConfiguracaoInvalida(faltando)

    app.state.rate_limiter = MemoryRateLimiter(
        limite=settings.chat_rate_limit,
        janela_segundos=settings.chat_rate_window_seconds,
    )
    app.state.response_cache = ResponseCache(ttl_seconds=settings.chat_cache_ttl_seconds)
    app.state.content_guard = RegexContentGuard()
    app.state.postgrest = None
    app.state.llm = None
    if settings.supabase_url and settings.supabase_anon_key:
        app.state.postgrest = PostgrestClient.criar(
            settings.supabase_url,
            settings.supabase_anon_key,
            timeout=settings.supabase_timeout_seconds,
        )
    if settings.groq_api_key:
        app.state.llm = GroqCompletionClient.criar(
            api_key=settings.groq_api_key,
            base_url=settings.llm_base_url,
            model=settings.llm_model,
            timeout=settings.llm_timeout_seconds,
        )
    logger.info(
        "api_iniciada",
        app_env=settings.app_env,
        rate_limit=settings.chat_rate_limit,
        cache_ttl=settings.chat_cache_ttl_seconds,
    )

    yield

    if app.state.postgrest is not None:
        await app.state.postgrest.fechar()
    if app.state.llm is not None:
        await app.state.llm.fechar()


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()

    app = FastAPI(
        title="Assistente CNAE API",
        debug=False,  # NUNCA True em producao
        lifespan=lifespan,
        docs_url=None if settings.producao else "/api/docs",
        redoc_url=None,
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_methods=["GET", "POST"],
        allow_headers=["Content-Type"],
        expose_headers=["X-RateLimit-Limit", "X-RateLimit-Remaining", "X-RateLimit-Reset", "Retry-After"],
    )

    # registrado por ultimo: envolve o CORS, inclusive respostas de preflight
    @app.middleware("http")
    async def add_security_headers(request: Request, call_next: object) -> Response:
        response = await call_next(request)  # type: ignore[operator]
        for nome, valor in SECURITY_HEADERS.items():
            response.headers[nome] = valor
        return response  # type: ignore[no-any-return]

    from assistente_cnae.interfaces.api.routes.chat_routes import router as chat_router
    from assistente_cnae.interfaces.api.routes.consulta_routes import router as consulta_router

    app.include_router(chat_router, prefix="/api")
    app.include_router(consulta_router, prefix="/api")

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    return app


app = create_app()
