# tests/infrastructure/test_postgrest_cnae_repo.py
import asyncio

import httpx
import pytest

from assistente_cnae.domain.cnae.value_objects import GrauRisco
from assistente_cnae.domain.erros import ErroBackend
from assistente_cnae.infrastructure.postgrest_client import PostgrestClient, escapar_termo
from assistente_cnae.infrastructure.repositories.postgrest_cnae_repo import PostgrestCnaeRepo


def _repo(handler) -> PostgrestCnaeRepo:
    client = httpx.AsyncClient(
        base_url="https://projeto.invalid/rest/v1",
        transport=httpx.MockTransport(handler),
    )
    return PostgrestCnaeRepo(PostgrestClient(client))


class Gravador:
    """Handler do MockTransport que guarda as requisicoes e devolve `corpo`."""

    def __init__(self, corpo, status_code: int = 200) -> None:
        self.corpo = corpo
        self.status_code = status_code
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, json=self.corpo)

    @property
    def params(self) -> list[tuple[str, str]]:
        return list(self.requests[-1].url.params.multi_items())


def test_buscar_cnae_com_item_embutido():
    gravador = Gravador([
        {
            "cnae": 6920601,
            "cnae_mascara": "6920-6/01",
            "cnae_descricao": "Atividades de contabilidade",
            "item_lc": "17.19",
            "grau_risco": "BAIXO",
            "itens_lista_servicos": {"item_lc": "17.19", "descricao": "Contabilidade"},
        }
    ])
    rows = asyncio.run(_repo(gravador).buscar_cnae("6920601", 10, incluir_item=True))

    assert gravador.requests[-1].url.path == "/rest/v1/cnae_item_lc"
    assert ("cnae", "eq.6920601") in gravador.params
    assert ("limit", "10") in gravador.params
    select = dict(gravador.params)["select"]
    assert "itens_lista_servicos(item_lc,descricao)" in select

    assert rows[0].cnae == "6920601"
    assert rows[0].grau_risco is GrauRisco.BAIXO
    assert rows[0].item_servico is not None
    assert rows[0].item_servico.descricao == "Contabilidade"


def test_cnae_com_zero_a_esquerda_volta_com_sete_digitos():
    gravador = Gravador([{"cnae": 111301, "cnae_descricao": "Cultivo de arroz"}])
    rows = asyncio.run(_repo(gravador).buscar_cnae("0111301", 10))
    assert rows[0].cnae == "0111301"
    assert rows[0].codigo_exibicao == "0111-3/01"


def test_risco_medio_consulta_com_acento():
    gravador = Gravador([{"cnae": 6201501, "cnae_descricao": "x", "grau_risco": "MÉDIO"}])
    rows = asyncio.run(_repo(gravador).listar_cnaes_por_risco(GrauRisco.MEDIO, 20))
    assert ("grau_risco", "eq.MÉDIO") in gravador.params
    assert rows[0].grau_risco is GrauRisco.MEDIO


def test_busca_por_descricao_escapa_metacaracteres():
    gravador = Gravador([])
    asyncio.run(_repo(gravador).buscar_itens_por_descricao("conta*bil%i,da(de)", 10))
    assert ("descricao", "ilike.*contabilidade*") in gravador.params


def test_itens_do_grupo_usa_prefixo_e_ordem():
    gravador = Gravador([{"item_lc": "17.01", "descricao": "Assessoria"}])
    asyncio.run(_repo(gravador).listar_itens_do_grupo("17"))
    assert ("item_lc", "like.17.*") in gravador.params
    assert ("order", "item_lc.asc") in gravador.params


def test_nbs_de_varios_itens_usa_in_com_aspas():
    gravador = Gravador([])
    asyncio.run(_repo(gravador).listar_nbs_por_itens(["17.19", "1.01"], 20))
    assert ("item_lc", 'in.("17.19","1.01")') in gravador.params


def test_nbs_de_um_item_usa_eq():
    gravador = Gravador([
        {"item_lc": "17.19", "nbs": "1.1502.10.00", "nbs_descricao": "Contabilidade", "ps_onerosa": "S"}
    ])
    rows = asyncio.run(_repo(gravador).listar_nbs_por_itens(["17.19"], 10))
    assert gravador.requests[-1].url.path == "/rest/v1/item_lc_ibs_cbs"
    assert ("item_lc", "eq.17.19") in gravador.params
    assert rows[0].prestacao_onerosa is True


def test_nbs_sem_itens_nao_consulta():
    gravador = Gravador([])
    assert asyncio.run(_repo(gravador).listar_nbs_por_itens([], 10)) == []
    assert gravador.requests == []


def test_erro_http_vira_erro_backend_com_mensagem():
    gravador = Gravador({"message": "relation does not exist"}, status_code=404)
    with pytest.raises(ErroBackend, match="relation does not exist"):
        asyncio.run(_repo(gravador).buscar_item("1.01"))


def test_falha_de_transporte_vira_erro_backend():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout("timeout", request=request)

    with pytest.raises(ErroBackend):
        asyncio.run(_repo(handler).buscar_item("1.01"))


def test_resposta_que_nao_e_lista():
    with pytest.raises(ErroBackend):
        asyncio.run(_repo(Gravador({"ok": True})).buscar_item("1.01"))


def test_escapar_termo():
    assert escapar_termo(" 100%_contab(il),* ") == "100contabil"
