# assistente_cnae/domain/consulta/entities.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

from assistente_cnae.domain.cnae.entities import CnaeItem, ItemNbs, ItemServico


@dataclass(frozen=True)
class BuscaTexto:
    """Resultado de search_text: itens da lista e CNAEs cuja descricao casa."""
    items: tuple[ItemServico, ...] = ()
    cnaes: tuple[CnaeItem, ...] = ()

    @property
    def total(self) -> int:
        return len(self.items) + len(self.cnaes)

    def to_dict(self) -> dict[str, Any]:
        return {
            "items": [i.to_dict() for i in self.items],
            "cnaes": [c.to_dict() for c in self.cnaes],
        }


@dataclass(frozen=True)
class InformacaoCompletaCnae:
    """Resultado de cnae_full_info: linhas do CNAE + cruzamento NBS/IBS/CBS."""
    cnaes: tuple[CnaeItem, ...] = ()
    nbs: tuple[ItemNbs, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "cnae": [c.to_dict() for c in self.cnaes],
            "nbs_ibs_cbs": [n.to_dict() for n in self.nbs],
        }


Registro = Union[CnaeItem, ItemServico, ItemNbs]
DadosConsulta = Union[tuple[Registro, ...], BuscaTexto, InformacaoCompletaCnae]


@dataclass(frozen=True)
class ResultadoConsulta:
    """Saida do dispatcher.

    Invariante: erro do backend (success=False) e resultado vazio
    (success=True, data vazio, summary preenchido) nunca se confundem.
    """
    success: bool
    data: DadosConsulta = field(default=())
    error: str | None = None
    summary: str | None = None

    @classmethod
    def falha(cls, error: str) -> ResultadoConsulta:
        return cls(success=False, error=error)

    @classmethod
    def vazio(cls, summary: str) -> ResultadoConsulta:
        return cls(success=True, data=(), summary=summary)

    @property
    def sem_dados(self) -> bool:
        if isinstance(self.data, BuscaTexto):
            return self.data.total == 0
        if isinstance(self.data, InformacaoCompletaCnae):
            return not self.data.cnaes
        return len(self.data) == 0

    def to_dict(self) -> dict[str, Any]:
        if isinstance(self.data, (BuscaTexto, InformacaoCompletaCnae)):
            dados: Any = self.data.to_dict()
        else:
            dados = [r.to_dict() for r in self.data]
        resultado: dict[str, Any] = {"success": self.success, "data": dados}
        if self.error is not None:
            resultado["error"] = self.error
        if self.summary is not None:
            resultado["summary"] = self.summary
        return resultado
