# assistente_cnae/application/dtos/consulta_dto.py
from __future__ import annotations

from pydantic import BaseModel

from assistente_cnae.domain.cnae.entities import CnaeItem, ItemNbs, ItemServico


class ItemServicoDTO(BaseModel):
    item_lc: str
    descricao: str

    @classmethod
    def from_domain(cls, item: ItemServico) -> ItemServicoDTO:
        return cls(item_lc=item.item_lc, descricao=item.descricao)


class CnaeDTO(BaseModel):
    cnae: str
    cnae_mascara: str
    cnae_descricao: str
    item_lc: str | None
    grau_risco: str | None
    item_servico: ItemServicoDTO | None = None

    @classmethod
    def from_domain(cls, c: CnaeItem) -> CnaeDTO:
        return cls(
            cnae=c.cnae,
            cnae_mascara=c.codigo_exibicao,
            cnae_descricao=c.cnae_descricao,
            item_lc=c.item_lc,
            grau_risco=c.grau_risco.value if c.grau_risco else None,
            item_servico=ItemServicoDTO.from_domain(c.item_servico) if c.item_servico else None,
        )


class NbsDTO(BaseModel):
    item_lc: str
    nbs: str | None
    nbs_descricao: str | None
    indop: str | None
    local_incidencia_ibs: str | None
    cclass_trib: str | None
    nome_cclass_trib: str | None
    prestacao_onerosa: bool | None
    aquisicao_exterior: bool | None

    @classmethod
    def from_domain(cls, n: ItemNbs) -> NbsDTO:
        return cls(
            item_lc=n.item_lc,
            nbs=n.nbs,
            nbs_descricao=n.nbs_descricao,
            indop=n.indop,
            local_incidencia_ibs=n.local_incidencia_ibs,
            cclass_trib=n.cclass_trib,
            nome_cclass_trib=n.nome_cclass_trib,
            prestacao_onerosa=n.prestacao_onerosa,
            aquisicao_exterior=n.aquisicao_exterior,
        )


class CnaeDetalheDTO(BaseModel):
    cnae: str
    cnae_mascara: str
    registros: list[CnaeDTO]
    nbs_ibs_cbs: list[NbsDTO]


class ItemLcDetalheDTO(BaseModel):
    item: ItemServicoDTO
    cnaes: list[CnaeDTO]
    nbs_ibs_cbs: list[NbsDTO]
