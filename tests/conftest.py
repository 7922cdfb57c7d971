# tests/conftest.py
from __future__ import annotations

from collections.abc import Generator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from assistente_cnae.infrastructure.config import Settings
from tests.fakes import FakeCnaeRepository, FakeCompletionClient, settings_de_teste


@pytest.fixture()
def repo() -> FakeCnaeRepository:
    return FakeCnaeRepository()


@pytest.fixture()
def llm() -> FakeCompletionClient:
    return FakeCompletionClient()


@pytest.fixture()
def settings() -> Settings:
    return settings_de_teste()


@pytest.fixture()
def app(settings: Settings, repo: FakeCnaeRepository, llm: FakeCompletionClient) -> FastAPI:
    """App com LLM e banco substituidos pelos fakes."""
    from assistente_cnae.interfaces.api.dependencies import get_cnae_repo, get_completion_client
    from assistente_cnae.interfaces.api.main import create_app

    application = create_app(settings)
    application.dependency_overrides[get_cnae_repo] = lambda: repo
    application.dependency_overrides[get_completion_client] = lambda: llm
    return application


@pytest.fixture()
def client(app: FastAPI) -> Generator[TestClient, None, None]:
    with TestClient(app) as c:
        yield c
