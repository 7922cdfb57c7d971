# assistente_cnae/interfaces/api/routes/consulta_routes.py
from fastapi import APIRouter, Depends, HTTPException

from assistente_cnae.application.dtos.consulta_dto import CnaeDetalheDTO, ItemLcDetalheDTO
from assistente_cnae.application.services.consulta_service import ConsultaService
from assistente_cnae.domain.cnae.value_objects import CodigoCnae, ItemLC
from assistente_cnae.domain.erros import ErroBackend
from assistente_cnae.infrastructure.logging_config import get_logger
from assistente_cnae.interfaces.api.dependencies import get_consulta_service

logger = get_logger(__name__)

router = APIRouter()


def _exigir_servico(service: ConsultaService | None) -> ConsultaService:
    if service is None:
        raise HTTPException(status_code=503, detail="Banco de dados nao configurado")
    return service


@router.get("/cnaes/{cnae_raw:path}", response_model=CnaeDetalheDTO)
async def get_cnae(
    cnae_raw: str,
    service: ConsultaService | None = Depends(get_consulta_service),  # noqa: B008
) -> CnaeDetalheDTO:
    try:
        cnae = CodigoCnae(cnae_raw)
    except ValueError as err:
        raise HTTPException(status_code=422, detail="CNAE invalido") from err

    try:
        detalhe = await _exigir_servico(service).detalhar_cnae(cnae)
    except ErroBackend as err:
        logger.warning("consulta_cnae_falhou", cnae=cnae.valor, erro=str(err))
        raise HTTPException(status_code=502, detail="Falha ao consultar o banco de dados") from err

    if detalhe is None:
        raise HTTPException(status_code=404, detail="CNAE nao encontrado")
    return detalhe


@router.get("/itens-lc/{item_raw}", response_model=ItemLcDetalheDTO)
async def get_item_lc(
    item_raw: str,
    service: ConsultaService | None = Depends(get_consulta_service),  # noqa: B008
) -> ItemLcDetalheDTO:
    try:
        item = ItemLC(item_raw)
    except ValueError as err:
        raise HTTPException(status_code=422, detail="Item LC invalido") from err

    try:
        detalhe = await _exigir_servico(service).detalhar_item(item)
    except ErroBackend as err:
        logger.warning("consulta_item_falhou", item_lc=item.valor, erro=str(err))
        raise HTTPException(status_code=502, detail="Falha ao consultar o banco de dados") from err

    if detalhe is None:
        raise HTTPException(status_code=404, detail="Item LC nao encontrado")
    return detalhe
