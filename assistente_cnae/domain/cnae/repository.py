# assistente_cnae/domain/cnae/repository.py
from __future__ import annotations

from typing import Protocol

from .entities import CnaeItem, ItemNbs, ItemServico
from .value_objects import GrauRisco


class CnaeRepository(Protocol):
    """Leituras permitidas sobre as tres tabelas somente-leitura.

    Falhas do backend sobem como ErroBackend; resultado vazio e lista vazia.
    """

    async def buscar_cnae(
        self, cnae: str, limit: int, incluir_item: bool = False
    ) -> list[CnaeItem]: ...
    async def buscar_cnae_por_mascara(self, mascara: str, limit: int) -> list[CnaeItem]: ...
    async def buscar_cnaes_por_descricao(self, termo: str, limit: int) -> list[CnaeItem]: ...
    async def listar_cnaes_por_risco(self, grau: GrauRisco, limit: int) -> list[CnaeItem]: ...
    async def listar_cnaes_por_item(self, item_lc: str, limit: int) -> list[CnaeItem]: ...
    async def buscar_item(self, item_lc: str) -> list[ItemServico]: ...
    async def buscar_itens_por_descricao(self, termo: str, limit: int) -> list[ItemServico]: ...
    async def listar_itens_do_grupo(self, grupo: str) -> list[ItemServico]: ...
    async def listar_nbs_por_itens(self, itens_lc: list[str], limit: int) -> list[ItemNbs]: ...
    async def buscar_nbs_por_descricao(self, termo: str, limit: int) -> list[ItemNbs]: ...
