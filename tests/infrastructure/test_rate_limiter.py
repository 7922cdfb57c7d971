# tests/infrastructure/test_rate_limiter.py
from structlog.testing import capture_logs

from assistente_cnae.infrastructure.rate_limiter import INTERVALO_LIMPEZA, MemoryRateLimiter


class Relogio:
    def __init__(self, agora: float = 1_000.0) -> None:
        self.agora = agora

    def __call__(self) -> float:
        return self.agora


def test_permite_ate_o_limite_e_bloqueia_o_seguinte():
    limiter = MemoryRateLimiter(limite=20, janela_segundos=60, relogio=Relogio())
    decisoes = [limiter.verificar("1.2.3.4") for _ in range(21)]
    assert all(d.ok for d in decisoes[:20])
    assert decisoes[19].restantes == 0
    assert not decisoes[20].ok


def test_restantes_decrescem():
    limiter = MemoryRateLimiter(limite=3, janela_segundos=60, relogio=Relogio())
    assert [limiter.verificar("ip").restantes for _ in range(3)] == [2, 1, 0]


def test_janela_nova_apos_reset():
    relogio = Relogio()
    limiter = MemoryRateLimiter(limite=2, janela_segundos=60, relogio=relogio)
    limiter.verificar("ip")
    limiter.verificar("ip")
    assert not limiter.verificar("ip").ok

    relogio.agora += 61
    decisao = limiter.verificar("ip")
    assert decisao.ok
    assert decisao.restantes == 1


def test_chaves_independentes():
    limiter = MemoryRateLimiter(limite=1, janela_segundos=60, relogio=Relogio())
    assert limiter.verificar("a").ok
    assert not limiter.verificar("a").ok
    assert limiter.verificar("b").ok


def test_retry_after_conta_ate_o_reset_compartilhado():
    """Bloqueios na mesma janela apontam para o mesmo reset_at."""
    relogio = Relogio(1_000.0)
    limiter = MemoryRateLimiter(limite=1, janela_segundos=60, relogio=relogio)
    limiter.verificar("ip")

    relogio.agora = 1_010.0
    primeiro = limiter.verificar("ip")
    relogio.agora = 1_030.0
    segundo = limiter.verificar("ip")

    assert primeiro.reset_at == segundo.reset_at == 1_060.0
    assert primeiro.retry_after(1_010.0) == 50
    assert segundo.retry_after(1_030.0) == 30
    assert segundo.retry_after(1_060.0) == 1


def test_headers():
    relogio = Relogio(1_000.0)
    limiter = MemoryRateLimiter(limite=1, janela_segundos=60, relogio=relogio)
    ok = limiter.verificar("ip")
    bloqueado = limiter.verificar("ip")

    assert ok.headers(1_000.0) == {
        "X-RateLimit-Limit": "1",
        "X-RateLimit-Remaining": "0",
        "X-RateLimit-Reset": "1060",
    }
    assert bloqueado.headers(1_000.0)["Retry-After"] == "60"


def test_limpeza_remove_buckets_expirados():
    relogio = Relogio()
    limiter = MemoryRateLimiter(limite=5, janela_segundos=60, relogio=relogio)
    limiter.verificar("a")
    limiter.verificar("b")

    relogio.agora += INTERVALO_LIMPEZA + 1
    with capture_logs() as logs:
        decisao = limiter.verificar("c")

    assert decisao.restantes == 4
    limpeza = next(e for e in logs if e["event"] == "rate_limit_limpeza")
    assert limpeza["removidos"] == 2
    assert limpeza["ativos"] == 0


def test_limpeza_respeita_intervalo():
    relogio = Relogio()
    limiter = MemoryRateLimiter(limite=5, janela_segundos=60, relogio=relogio)
    limiter.verificar("a")

    relogio.agora += 61
    with capture_logs() as logs:
        limiter.verificar("b")
    assert logs == []


def test_limite_zero_desativa():
    assert not MemoryRateLimiter(limite=0).ativo
    assert MemoryRateLimiter(limite=20).ativo
