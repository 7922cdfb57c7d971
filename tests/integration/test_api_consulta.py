# tests/integration/test_api_consulta.py
from fastapi import FastAPI
from fastapi.testclient import TestClient

from tests.fakes import FakeCnaeRepository


def test_get_cnae_com_mascara(client: TestClient) -> None:
    response = client.get("/api/cnaes/6920-6/01")
    assert response.status_code == 200
    data = response.json()
    assert data["cnae"] == "6920601"
    assert data["cnae_mascara"] == "6920-6/01"
    assert len(data["registros"]) == 1
    registro = data["registros"][0]
    assert registro["item_lc"] == "17.19"
    assert registro["grau_risco"] == "BAIXO"
    assert registro["item_servico"]["descricao"].startswith("Contabilidade")
    assert data["nbs_ibs_cbs"][0]["nbs"] == "1.1502.10.00"
    assert data["nbs_ibs_cbs"][0]["prestacao_onerosa"] is True
    assert data["nbs_ibs_cbs"][0]["aquisicao_exterior"] is False


def test_get_cnae_sem_mascara(client: TestClient) -> None:
    response = client.get("/api/cnaes/6201501")
    assert response.status_code == 200
    assert response.json()["registros"][0]["item_lc"] == "1.01"


def test_get_cnae_invalido(client: TestClient) -> None:
    response = client.get("/api/cnaes/12ab")
    assert response.status_code == 422


def test_get_cnae_inexistente(client: TestClient) -> None:
    response = client.get("/api/cnaes/1111111")
    assert response.status_code == 404
    assert response.json()["detail"] == "CNAE nao encontrado"


def test_get_cnae_backend_fora(client: TestClient, repo: FakeCnaeRepository) -> None:
    repo.falhar = {"buscar_cnae"}
    response = client.get("/api/cnaes/6920601")
    assert response.status_code == 502
    assert "falha simulada" not in response.text


def test_get_item_lc(client: TestClient) -> None:
    response = client.get("/api/itens-lc/17.19")
    assert response.status_code == 200
    data = response.json()
    assert data["item"]["item_lc"] == "17.19"
    assert [c["cnae"] for c in data["cnaes"]] == ["6920601"]
    assert len(data["nbs_ibs_cbs"]) == 1


def test_get_item_lc_com_zero_a_esquerda(client: TestClient) -> None:
    response = client.get("/api/itens-lc/01.01")
    assert response.status_code == 200
    assert response.json()["item"]["item_lc"] == "1.01"


def test_get_item_lc_invalido(client: TestClient) -> None:
    assert client.get("/api/itens-lc/abc").status_code == 422


def test_get_item_lc_inexistente(client: TestClient) -> None:
    assert client.get("/api/itens-lc/99.99").status_code == 404


def test_banco_nao_configurado_retorna_503(app: FastAPI) -> None:
    from assistente_cnae.interfaces.api.dependencies import get_cnae_repo

    app.dependency_overrides[get_cnae_repo] = lambda: None
    with TestClient(app) as c:
        assert c.get("/api/cnaes/6920601").status_code == 503
