# assistente_cnae/infrastructure/config.py
from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class Settings:
    groq_api_key: str
    llm_base_url: str
    llm_model: str
    llm_timeout_seconds: float
    supabase_url: str
    supabase_anon_key: str
    supabase_timeout_seconds: float
    chat_rate_limit: int  # 0 = sem limite
    chat_rate_window_seconds: int
    chat_cache_ttl_seconds: int
    chat_max_body_bytes: int
    app_env: str
    log_level: str
    cors_origins: tuple[str, ...]

    @property
    def producao(self) -> bool:
        return self.app_env == "production"

    def faltando(self) -> list[str]:
        """Variaveis obrigatorias ausentes."""
        obrigatorias = {
            "GROQ_API_KEY": self.groq_api_key,
            "SUPABASE_URL": self.supabase_url,
            "SUPABASE_ANON_KEY": self.supabase_anon_key,
        }
        return [nome for nome, valor in obrigatorias.items() if not valor.strip()]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings(
        groq_api_key=os.environ.get("GROQ_API_KEY", ""),
        llm_base_url=os.environ.get("LLM_BASE_URL", "https://api.groq.com/openai/v1"),
        llm_model=os.environ.get("LLM_MODEL", "llama-3.1-8b-instant"),
        llm_timeout_seconds=float(os.environ.get("LLM_TIMEOUT_SECONDS", "30")),
        supabase_url=os.environ.get("SUPABASE_URL", "").rstrip("/"),
        supabase_anon_key=os.environ.get("SUPABASE_ANON_KEY", ""),
        supabase_timeout_seconds=float(os.environ.get("SUPABASE_TIMEOUT_SECONDS", "10")),
        chat_rate_limit=int(os.environ.get("CHAT_RATE_LIMIT", "20")),
        chat_rate_window_seconds=int(os.environ.get("CHAT_RATE_WINDOW_SECONDS", "60")),
        chat_cache_ttl_seconds=int(os.environ.get("CHAT_CACHE_TTL_SECONDS", "300")),
        chat_max_body_bytes=int(os.environ.get("CHAT_MAX_BODY_BYTES", "10000")),
        app_env=os.environ.get("APP_ENV", "development").lower(),
        log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        cors_origins=tuple(
            o.strip()
            for o in os.environ.get("CORS_ORIGINS", "http://localhost:3000").split(",")
            if o.strip()
        ),
    )
