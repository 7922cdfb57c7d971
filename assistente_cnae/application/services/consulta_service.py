# assistente_cnae/application/services/consulta_service.py
from __future__ import annotations

from assistente_cnae.domain.cnae.repository import CnaeRepository
from assistente_cnae.domain.cnae.value_objects import CodigoCnae, ItemLC

from ..dtos.consulta_dto import CnaeDetalheDTO, CnaeDTO, ItemLcDetalheDTO, ItemServicoDTO, NbsDTO

LIMITE_REGISTROS_CNAE = 10
LIMITE_CNAES_POR_ITEM = 100
LIMITE_NBS = 50


class ConsultaService:
    """Leituras diretas para as rotas de consulta. ErroBackend sobe para a rota."""

    def __init__(self, repo: CnaeRepository) -> None:
        self._repo = repo

    async def detalhar_cnae(self, cnae: CodigoCnae) -> CnaeDetalheDTO | None:
        registros = await self._repo.buscar_cnae(cnae.valor, LIMITE_REGISTROS_CNAE, incluir_item=True)
        if not registros:
            return None
        itens = list(dict.fromkeys(r.item_lc for r in registros if r.item_lc))
        nbs = await self._repo.listar_nbs_por_itens(itens, LIMITE_NBS)
        return CnaeDetalheDTO(
            cnae=cnae.valor,
            cnae_mascara=cnae.mascara,
            registros=[CnaeDTO.from_domain(r) for r in registros],
            nbs_ibs_cbs=[NbsDTO.from_domain(n) for n in nbs],
        )

    async def detalhar_item(self, item_lc: ItemLC) -> ItemLcDetalheDTO | None:
        itens = await self._repo.buscar_item(item_lc.valor)
        if not itens:
            return None
        cnaes = await self._repo.listar_cnaes_por_item(item_lc.valor, LIMITE_CNAES_POR_ITEM)
        nbs = await self._repo.listar_nbs_por_itens([item_lc.valor], LIMITE_NBS)
        return ItemLcDetalheDTO(
            item=ItemServicoDTO.from_domain(itens[0]),
            cnaes=[CnaeDTO.from_domain(c) for c in cnaes],
            nbs_ibs_cbs=[NbsDTO.from_domain(n) for n in nbs],
        )
