# assistente_cnae/domain/cnae/entities.py
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

from .value_objects import GrauRisco, mascarar_cnae


@dataclass(frozen=True)
class ItemServico:
    """Item da lista de servicos (LC 116/2003). Referenciado por varios CNAEs."""
    item_lc: str
    descricao: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class CnaeItem:
    """Linha de cnae_item_lc. Varias linhas podem compartilhar o mesmo item_lc."""
    cnae: str  # 7 digitos
    cnae_descricao: str
    item_lc: str | None
    grau_risco: GrauRisco | None = None
    cnae_mascara: str | None = None
    item_servico: ItemServico | None = None  # embed itens_lista_servicos

    @property
    def codigo_exibicao(self) -> str:
        return self.cnae_mascara or mascarar_cnae(self.cnae)

    def to_dict(self) -> dict[str, Any]:
        dados: dict[str, Any] = {
            "cnae": self.cnae,
            "cnae_mascara": self.cnae_mascara,
            "cnae_descricao": self.cnae_descricao,
            "item_lc": self.item_lc,
            "grau_risco": self.grau_risco.value if self.grau_risco else None,
        }
        if self.item_servico is not None:
            dados["itens_lista_servicos"] = self.item_servico.to_dict()
        return dados


@dataclass(frozen=True)
class ItemNbs:
    """Linha de item_lc_ibs_cbs: cruzamento Item LC -> NBS / IBS / CBS."""
    item_lc: str
    nbs: str | None = None
    nbs_descricao: str | None = None
    indop: str | None = None
    local_incidencia_ibs: str | None = None
    cclass_trib: str | None = None
    nome_cclass_trib: str | None = None
    ps_onerosa: str | None = None  # "S" / "N"
    adq_exterior: str | None = None  # "S" / "N"

    @property
    def prestacao_onerosa(self) -> bool | None:
        return None if self.ps_onerosa is None else self.ps_onerosa.upper() == "S"

    @property
    def aquisicao_exterior(self) -> bool | None:
        return None if self.adq_exterior is None else self.adq_exterior.upper() == "S"

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
