# tests/infrastructure/test_response_cache.py
from assistente_cnae.infrastructure.response_cache import ResponseCache, normalizar_pergunta


class Relogio:
    def __init__(self) -> None:
        self.agora = 0.0

    def __call__(self) -> float:
        return self.agora


def test_get_dentro_do_ttl():
    cache = ResponseCache(ttl_seconds=300, relogio=Relogio())
    cache.set("cnae 6920601", {"response": "ok"})
    assert cache.get("cnae 6920601") == {"response": "ok"}


def test_entrada_expirada_e_descartada_na_leitura():
    relogio = Relogio()
    cache = ResponseCache(ttl_seconds=300, relogio=relogio)
    cache.set("k", {"response": "ok"})
    relogio.agora = 300.0
    assert cache.get("k") is None
    relogio.agora = 0.0  # ja removida, nao reaparece
    assert cache.get("k") is None


def test_valor_guardado_nao_e_alterado_pelo_chamador():
    cache = ResponseCache()
    valor = {"response": "ok", "params": {"cnae": "6920601"}}
    cache.set("k", valor)
    valor["params"]["cnae"] = "outro"
    lido = cache.get("k")
    lido["response"] = "alterado"
    assert cache.get("k") == {"response": "ok", "params": {"cnae": "6920601"}}


def test_normalizar_pergunta():
    assert normalizar_pergunta("  CNAE   6920601 \n") == "cnae 6920601"
    assert normalizar_pergunta("CNAE 6920601") == normalizar_pergunta("cnae  6920601")
