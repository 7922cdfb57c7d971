# assistente_cnae/infrastructure/rate_limiter.py
#
# Fixed-window rate limiter held in process memory.
#
# Design decisions:
#   - Best-effort and single-process: every worker/instance keeps its own
#     buckets. With N stateless instances behind a load balancer a client can
#     get up to N x limit requests per window. This is a known limitation and
#     is not corrected here.
#   - Fixed window: the first request creates {count=1, reset_at=now+window};
#     a request after reset_at replaces the bucket. Blocked requests do not
#     increment the counter, so Retry-After counts down to the shared reset_at.
#   - The bucket map is guarded by a threading.Lock so the limiter stays
#     correct if handlers run in a threadpool.
#   - Expired buckets are swept at most once per cleanup interval, piggybacked
#     on regular calls (no background thread).
#   - The clock is injectable so tests can move time without sleeping.
from __future__ import annotations

import math
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

from starlette.requests import Request

from assistente_cnae.infrastructure.logging_config import get_logger

logger = get_logger(__name__)

INTERVALO_LIMPEZA = 5 * 60.0


@dataclass
class RateLimitBucket:
    count: int
    reset_at: float  # epoch seconds


@dataclass(frozen=True)
class DecisaoRateLimit:
    ok: bool
    limite: int
    restantes: int
    reset_at: float

    def retry_after(self, agora: float) -> int:
        return max(1, math.ceil(self.reset_at - agora))

    def headers(self, agora: float) -> dict[str, str]:
        headers = {
            "X-RateLimit-Limit": str(self.limite),
            "X-RateLimit-Remaining": str(self.restantes),
            "X-RateLimit-Reset": str(math.ceil(self.reset_at)),
        }
        if not self.ok:
            headers["Retry-After"] = str(self.retry_after(agora))
        return headers


class MemoryRateLimiter:
    def __init__(
        self,
        limite: int = 20,
        janela_segundos: float = 60.0,
        relogio: Callable[[], float] = time.time,
    ) -> None:
        self.limite = limite
        self.janela_segundos = janela_segundos
        self._relogio = relogio
        self._buckets: dict[str, RateLimitBucket] = {}
        self._lock = threading.Lock()
        self._ultima_limpeza = relogio()

    @property
    def ativo(self) -> bool:
        return self.limite > 0

    def agora(self) -> float:
        return self._relogio()

    def verificar(self, chave: str) -> DecisaoRateLimit:
        agora = self._relogio()
        with self._lock:
            self._limpar(agora)
            bucket = self._buckets.get(chave)

            if bucket is None or agora > bucket.reset_at:
                bucket = RateLimitBucket(count=1, reset_at=agora + self.janela_segundos)
                self._buckets[chave] = bucket
                return DecisaoRateLimit(True, self.limite, self.limite - 1, bucket.reset_at)

            if bucket.count >= self.limite:
                return DecisaoRateLimit(False, self.limite, 0, bucket.reset_at)

            bucket.count += 1
            return DecisaoRateLimit(
                True, self.limite, self.limite - bucket.count, bucket.reset_at
            )

    def _limpar(self, agora: float) -> None:
        if agora - self._ultima_limpeza < INTERVALO_LIMPEZA:
            return
        expirados = [k for k, b in self._buckets.items() if agora > b.reset_at]
        for chave in expirados:
            del self._buckets[chave]
        self._ultima_limpeza = agora
        if expirados:
            logger.debug("rate_limit_limpeza", removidos=len(expirados), ativos=len(self._buckets))


def ip_do_cliente(request: Request) -> str:
    """x-forwarded-for (primeiro IP), x-real-ip, peer do socket, 'unknown'."""
    encaminhado = request.headers.get("x-forwarded-for")
    if encaminhado:
        primeiro = encaminhado.split(",")[0].strip()
        if primeiro:
            return primeiro
    real = request.headers.get("x-real-ip")
    if real and real.strip():
        return real.strip()
    if request.client and request.client.host:
        return request.client.host
    return "unknown"
